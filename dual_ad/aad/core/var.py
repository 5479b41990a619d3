# dual_ad/aad/core/var.py
from __future__ import annotations
from typing import Optional
from .tape import Tape

class GraphVar:
    """
    Handle to one node of a reverse-mode graph.

    Attributes
    ----------
    tape : Tape
        The arena that owns the node.
    handle : int
        Index of the node in `tape.nodes`.

    `value` and `grad` read straight through to the arena, so they reflect the
    most recent forward/backward pass on the tape.
    """

    def __init__(self, tape: Tape, handle: int):
        self.tape = tape
        self.handle = handle

    @property
    def node(self):
        return self.tape.nodes[self.handle]

    @property
    def op_tag(self) -> str:
        return self.node.op_tag

    @property
    def name(self) -> Optional[str]:
        return self.node.name

    @property
    def value(self) -> float:
        return self.node.value

    @property
    def grad(self) -> float:
        return self.node.grad

    def __repr__(self):
        return f"GraphVar({self.node.label(self.handle)}, value={self.value!r}, grad={self.grad!r})"

    # Operator overloading for graph construction
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __truediv__(self, other):
        from ..ops.arithmetic import div
        return div(self, other)

    def __rtruediv__(self, other):
        from ..ops.arithmetic import div
        return div(other, self)

    def __neg__(self):
        from ..ops.arithmetic import sub
        return sub(0.0, self)

    def __pow__(self, n):
        from ..ops.arithmetic import pow
        return pow(self, n)
