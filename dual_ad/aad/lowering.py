# dual_ad/aad/lowering.py
"""
Compile a forward expression tree into an equivalent reverse-mode graph.

Every Power(n) in the tree reads the evaluation point directly, so all of
them become PowerNode(x, n) over one shared Input node. The result is a DAG
in which x is consumed along several paths.
"""
from .expression import Constant, Power, Log, Add, Subtract, Product, Division, _as_expr
from .core.seeds import build_graph
from .ops import constant_node, add, sub, mul, div, pow, log

_BINARY = {Add: add, Subtract: sub, Product: mul, Division: div}


def lower(expr, x):
    """Record `expr` on x's tape, returning the GraphVar for its root."""
    if isinstance(expr, Constant):
        return constant_node(expr.c, tape=x.tape)
    if isinstance(expr, Power):
        return pow(x, expr.n)
    if isinstance(expr, Log):
        return log(lower(expr.inner, x))
    op = _BINARY.get(type(expr))
    if op is None:
        raise TypeError(f"Cannot lower {type(expr).__name__}")
    return op(lower(expr.left, x), lower(expr.right, x))


def expression_to_graph(expr, x0):
    """Fresh tape holding `expr` over a single Input x = x0."""
    expr = _as_expr(expr)
    return build_graph(lambda x: lower(expr, x), x0)
