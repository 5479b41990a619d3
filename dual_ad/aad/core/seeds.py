# dual_ad/aad/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1) at the scalar output and let gradients grow
# backwards through the graph.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Callable, Tuple

from .var import GraphVar
from .tape import Tape, use_tape
from .engine import run_forward, run_backward, read_grad, read_value
from ..ops.arithmetic import input_node, constant_node


def build_graph(f: Callable[[GraphVar], GraphVar], x0, *, name: str = "x") -> Tape:
    """
    Record y = f(x) on a fresh tape with a single input x = x0.

    The returned tape has `inputs == [x.handle]` and `output == y.handle`;
    nothing is evaluated yet.
    """
    with use_tape() as tape:
        x = input_node(x0, name=name)
        y = f(x)
        if not isinstance(y, GraphVar):
            # f ignored its input: the graph is a constant
            y = constant_node(y, name="y")
        tape.output = y.handle
    return tape


def value_and_grad(f: Callable[[GraphVar], GraphVar], x0, seed=1.0) -> Tuple[float, float]:
    """
    (f(x0), f'(x0)) via one forward and one backward pass on an isolated tape.
    """
    tape = build_graph(f, x0)
    run_forward(tape)
    run_backward(tape, seed=seed)
    return read_value(tape), read_grad(tape, tape.inputs[0])


def grad(f: Callable[[GraphVar], GraphVar], x0) -> float:
    """Derivative of a single-input scalar function y=f(x) at x0."""
    return value_and_grad(f, x0)[1]
