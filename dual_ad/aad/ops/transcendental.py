# dual_ad/aad/ops/transcendental.py
from ..core.var import GraphVar
from .arithmetic import _as_node, _pick_tape

def log(x, *, name=None):
    """LogNode(arg): natural log; the forward pass rejects arg <= 0."""
    tape = _pick_tape(x)
    x = _as_node(x, tape)
    return GraphVar(tape, tape.push_node(op_tag="log", operands=(x.handle,), name=name))
