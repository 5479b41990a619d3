# dual_ad/aad/ops/__init__.py

# Convenience re-exports so users can do: from dual_ad.aad.ops import mul, log, ...
from .arithmetic import input_node, constant_node, add, sub, mul, div, pow
from .transcendental import log

__all__ = [
    "input_node", "constant_node",
    "add", "sub", "mul", "div", "pow",
    "log",
]
