# dual_ad/aad/ops/arithmetic.py
import numpy as np
from ..core.var import GraphVar
from ..core import tape as tape_mod  # Use module access for use_tape() compatibility

_NUMERIC = (int, float, np.integer, np.floating)

def _check_numeric(v, what):
    if not isinstance(v, _NUMERIC) or isinstance(v, bool):
        raise TypeError(f"{what} only accepts real scalars (int, float), but got {type(v)}")

def _pick_tape(*args):
    """Tape of the first GraphVar argument, else the active global tape."""
    for a in args:
        if isinstance(a, GraphVar):
            return a.tape
    return tape_mod.global_tape

def _as_node(x, tape):
    """Ensure x is a GraphVar on `tape`; otherwise wrap it as a ConstantNode."""
    if isinstance(x, GraphVar):
        if x.tape is not tape:
            raise ValueError("Cannot combine nodes from different tapes")
        return x
    _check_numeric(x, "constant")
    return constant_node(x, tape=tape)

def input_node(v, *, name=None, tape=None):
    """Leaf that receives gradient: forward keeps `v`, backward accumulates grad."""
    _check_numeric(v, "input_node")
    tape = tape or tape_mod.global_tape
    return GraphVar(tape, tape.push_node(op_tag="input", param=v, name=name))

def constant_node(v, *, name=None, tape=None):
    """Leaf that is not a differentiable parameter; its grad stays 0."""
    _check_numeric(v, "constant_node")
    tape = tape or tape_mod.global_tape
    return GraphVar(tape, tape.push_node(op_tag="const", param=v, name=name))

def _binary(x, y, tag, name=None):
    tape = _pick_tape(x, y)
    x = _as_node(x, tape)
    y = _as_node(y, tape)
    return GraphVar(tape, tape.push_node(op_tag=tag, operands=(x.handle, y.handle), name=name))

def add(x, y, *, name=None): return _binary(x, y, "add", name)
def sub(x, y, *, name=None): return _binary(x, y, "sub", name)
def mul(x, y, *, name=None): return _binary(x, y, "mul", name)
def div(x, y, *, name=None): return _binary(x, y, "div", name)

def pow(x, n, *, name=None):
    """
    PowerNode(base, n): value = base ** n with a fixed real exponent `n`.
    The exponent is a parameter, not an operand, so no gradient flows to it.
    """
    if isinstance(n, GraphVar):
        raise TypeError("pow exponent must be a real scalar, not a graph node")
    _check_numeric(n, "pow exponent")
    tape = _pick_tape(x)
    x = _as_node(x, tape)
    return GraphVar(tape, tape.push_node(op_tag="pow", operands=(x.handle,), param=n, name=name))
