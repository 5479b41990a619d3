# dual_ad/aad/__init__.py
# Dual-mode automatic differentiation for single-variable real functions

from .core.var import GraphVar
from .core.tape import Tape, global_tape, use_tape
from .core.engine import (
    run_forward,
    run_backward,
    backward_node,
    zero_grads,
    read_grad,
    read_value,
)
from .core.seeds import build_graph, grad, value_and_grad
from .ops import input_node, constant_node, add, sub, mul, div, pow, log

# Forward-mode expression tree
from .expression import (
    Expression, Constant, Power, Log, Add, Subtract, Product, Division,
    variable, evaluate,
)
from .errors import DomainError
from .config import ADConfig, DEFAULT_CONFIG
from .lowering import expression_to_graph
from .bumping import central_difference, check_derivatives

__all__ = [
    # Reverse mode
    'GraphVar',
    'Tape',
    'global_tape',
    'use_tape',
    'run_forward',
    'run_backward',
    'backward_node',
    'zero_grads',
    'read_grad',
    'read_value',
    'build_graph',
    'grad',
    'value_and_grad',
    'input_node',
    'constant_node',
    'add',
    'sub',
    'mul',
    'div',
    'pow',
    'log',
    # Forward mode
    'Expression',
    'Constant',
    'Power',
    'Log',
    'Add',
    'Subtract',
    'Product',
    'Division',
    'variable',
    'evaluate',
    # Checks
    'DomainError',
    'ADConfig',
    'DEFAULT_CONFIG',
    'expression_to_graph',
    'central_difference',
    'check_derivatives',
]
