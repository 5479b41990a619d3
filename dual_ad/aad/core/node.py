# dual_ad/aad/core/node.py
from dataclasses import dataclass
from typing import Optional, Tuple

# Closed set of graph-node variants understood by the engine.
OP_TAGS = ("input", "const", "add", "sub", "mul", "div", "pow", "log")

# Number of operand handles each variant reads.
ARITY = {
    "input": 0, "const": 0,
    "add": 2, "sub": 2, "mul": 2, "div": 2,
    "pow": 1, "log": 1,
}


@dataclass
class Node:
    """
    One node of the computational graph, stored in the tape's arena.

    Attributes
    ----------
    op_tag : str
        Variant tag, one of OP_TAGS.
    operands : Tuple[int, ...]
        Handles (indices into the tape) of the nodes this one reads. A handle
        may appear under several parents, so the graph is a DAG.
    param : Optional[float]
        Variant parameter: the held value for "input"/"const", the exponent
        for "pow", unused otherwise.
    value : float
        Forward value; valid only after the forward pass reached this node.
    grad : float
        Gradient accumulator, summed over every consumer edge.
    name : Optional[str]
        Optional debug label.
    """
    op_tag: str
    operands: Tuple[int, ...] = ()
    param: Optional[float] = None
    value: float = 0.0
    grad: float = 0.0
    name: Optional[str] = None

    def label(self, handle: int) -> str:
        """Short description used in error messages and graph dumps."""
        if self.name:
            return f"{self.op_tag}[{handle}:{self.name}]"
        return f"{self.op_tag}[{handle}]"
