# dual_ad/aad/core/__init__.py

"""
Core public API for the reverse-mode engine.

Exports:
    GraphVar        : Handle to a node on a tape, with operator overloading.
    Tape            : Arena that owns every node and records creation order.
    global_tape     : The default tape graph builders record onto.
    use_tape        : Context manager to temporarily switch the active tape.
    run_forward     : Compute node values in topological order.
    run_backward    : Seed the output and sweep gradients in reverse order.
    backward_node   : Recursive per-node backward rule.
    zero_grads      : Reset every grad on a tape to zero.
    read_grad       : Gradient accumulated on a node.
    read_value      : Forward value of a node.
    build_graph     : Record y = f(x) on a fresh tape.
    grad            : Convenience: derivative of f at x0.
    value_and_grad  : Convenience: (f(x0), f'(x0)).
"""

from .var import GraphVar
from .tape import Tape, global_tape, use_tape
from .engine import (
    run_forward, run_backward, backward_node,
    zero_grads, read_grad, read_value,
)
from .seeds import build_graph, grad, value_and_grad

__all__ = [
    "GraphVar",
    "Tape", "global_tape", "use_tape",
    "run_forward", "run_backward", "backward_node",
    "zero_grads", "read_grad", "read_value",
    "build_graph", "grad", "value_and_grad",
]
