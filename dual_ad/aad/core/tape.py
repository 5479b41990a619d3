# dual_ad/aad/core/tape.py
from __future__ import annotations
from typing import List, Optional, Tuple
from contextlib import contextmanager
import numpy as np
from .node import Node, OP_TAGS, ARITY

class Tape:
    """
    Arena of graph nodes, recorded in creation order.

    The tape is the sole owner of every node; edges are integer handles into
    `nodes`. Because `push_node` only accepts operands that already exist,
    creation order is a valid topological order and is replayed as-is by the
    forward pass (and reversed by the backward pass).
    """
    def __init__(self):
        self.nodes: List[Node] = []
        self.inputs: List[int] = []
        self.output: Optional[int] = None
        self.evaluated = False

    def __len__(self):
        return len(self.nodes)

    def reset(self):
        self.nodes.clear()
        self.inputs.clear()
        self.output = None
        self.evaluated = False

    def push_node(self, *, op_tag: str, operands: Tuple[int, ...] = (),
                  param=None, name: Optional[str] = None) -> int:
        """
        Append a Node(op_tag, operands, param) to the tape and return its handle.
        """
        if op_tag not in OP_TAGS:
            raise ValueError(f"Unknown op_tag {op_tag!r}")
        operands = tuple(int(h) for h in operands)
        if len(operands) != ARITY[op_tag]:
            raise ValueError(
                f"{op_tag!r} takes {ARITY[op_tag]} operand(s), got {len(operands)}"
            )
        for h in operands:
            if not 0 <= h < len(self.nodes):
                raise ValueError(f"Operand handle {h} is not on this tape yet")
        if param is not None:
            param = np.float64(param)
        self.nodes.append(Node(op_tag=op_tag, operands=operands, param=param, name=name))
        handle = len(self.nodes) - 1
        if op_tag == "input":
            self.inputs.append(handle)
        # Any structural change invalidates previous forward values
        self.evaluated = False
        return handle

    def node(self, handle: int) -> Node:
        return self.nodes[handle]

    def set_input(self, handle: int, v):
        """Move an input node to a new evaluation point; forces a fresh forward pass."""
        node = self.nodes[handle]
        if node.op_tag != "input":
            raise ValueError(f"Node {handle} is {node.op_tag!r}, not an input")
        node.param = np.float64(v)
        self.evaluated = False

    def zero_grads(self):
        for node in self.nodes:
            node.grad = 0.0

    def clear_values(self):
        for node in self.nodes:
            node.value = 0.0
        self.evaluated = False

# Global singleton tape (graph builders record here unless told otherwise)
global_tape = Tape()

@contextmanager
def use_tape(tape: Optional[Tape] = None):
    """
    Context manager to temporarily record onto a fresh (or given) tape:
        with use_tape() as t:
            x = input_node(1.5)
            y = x * x
        run_forward(t)
    """
    from . import tape as _tape_mod  # local import to avoid cycles
    prev = _tape_mod.global_tape
    try:
        _tape_mod.global_tape = tape or Tape()
        yield _tape_mod.global_tape
    finally:
        _tape_mod.global_tape = prev
