# dual_ad/aad/core/engine.py
from __future__ import annotations
import logging
import warnings
from typing import List, Optional, Tuple, Union
import numpy as np
from .tape import Tape
from .var import GraphVar
from ..errors import DomainError
from ..validate import check_log_argument, check_denominator

logger = logging.getLogger(__name__)

NodeRef = Union[int, GraphVar]

def _handle(tape: Tape, ref: NodeRef) -> int:
    if isinstance(ref, GraphVar):
        if ref.tape is not tape:
            raise ValueError("Node belongs to a different tape")
        return ref.handle
    h = int(ref)
    if not 0 <= h < len(tape.nodes):
        raise ValueError(f"No node {h} on this tape")
    return h

# ---------------- local rules (one branch per variant) ---------------- #
def _forward_value(tape: Tape, handle: int):
    """Value of node `handle` from the current values of its operands."""
    node = tape.nodes[handle]
    tag = node.op_tag
    if tag in ("input", "const"):
        return node.param
    vals = [tape.nodes[h].value for h in node.operands]
    if tag == "add":
        return vals[0] + vals[1]
    if tag == "sub":
        return vals[0] - vals[1]
    if tag == "mul":
        return vals[0] * vals[1]
    if tag == "div":
        check_denominator(vals[1], node.label(handle))
        return vals[0] / vals[1]
    if tag == "log":
        check_log_argument(vals[0], node.label(handle))
        return np.log(vals[0])
    if tag == "pow":
        with np.errstate(divide="ignore", invalid="ignore"):
            out = vals[0] ** node.param
        if not np.isfinite(out):
            warnings.warn(f"{node.label(handle)} is not finite for base {float(vals[0])!r}",
                          RuntimeWarning, stacklevel=3)
        return out
    raise ValueError(f"Unknown op_tag {tag!r}")

def _local_partials(tape: Tape, handle: int) -> List[Tuple[int, float]]:
    """
    (operand_handle, d node / d operand) pairs for node `handle`.

    Leaves have none. PowerNode with a zero base only propagates when the
    exponent is >= 1, where n * 0 ** (n - 1) is finite.
    """
    node = tape.nodes[handle]
    tag = node.op_tag
    ops = node.operands
    if tag in ("input", "const"):
        return []
    if tag == "add":
        return [(ops[0], 1.0), (ops[1], 1.0)]
    if tag == "sub":
        return [(ops[0], 1.0), (ops[1], -1.0)]
    a = tape.nodes[ops[0]].value
    if tag == "mul":
        b = tape.nodes[ops[1]].value
        return [(ops[0], b), (ops[1], a)]
    if tag == "div":
        b = tape.nodes[ops[1]].value
        return [(ops[0], 1.0 / b), (ops[1], -a / (b * b))]
    if tag == "log":
        return [(ops[0], 1.0 / a)]
    if tag == "pow":
        n = node.param
        if a == 0 and n < 1:
            logger.debug("%s: zero base with exponent %g, gradient not propagated",
                         node.label(handle), n)
            return []
        return [(ops[0], n * a ** (n - 1.0))]
    raise ValueError(f"Unknown op_tag {tag!r}")

# ---------------- forward pass ---------------- #
def run_forward(tape: Tape):
    """
    Compute every node's value in creation (topological) order.

    Raises DomainError at the first invalid log/division. On failure all
    values are cleared, so no partial forward result is left on the tape.
    """
    logger.debug("forward pass over %d nodes", len(tape.nodes))
    tape.evaluated = False
    try:
        for h, node in enumerate(tape.nodes):
            node.value = _forward_value(tape, h)
    except DomainError as e:
        tape.clear_values()
        logger.debug("forward pass aborted: %s", e)
        raise
    tape.evaluated = True

# ---------------- backward pass ---------------- #
def zero_grads(tape: Tape):
    """Set every grad on the tape to zero."""
    tape.zero_grads()

def _zero_intermediate(tape: Tape):
    # Composite grads are per-pass scratch; only input accumulators may persist
    for node in tape.nodes:
        if node.op_tag != "input":
            node.grad = 0.0

def run_backward(tape: Tape, seed=1.0, output: Optional[NodeRef] = None, reset: bool = True):
    """
    Run a single reverse sweep from `output` (default: tape.output, else the
    last recorded node).

    Args:
        tape:   a tape whose forward pass has completed.
        seed:   adjoint planted at the output (d out / d out).
        output: node to differentiate.
        reset:  zero input accumulators first. With reset=False, input grads
                keep what earlier passes left and the new pass adds to them.

    Notes:
        - Nodes are visited in reverse creation order, so a node's grad holds
          the sum over all its consumers before it propagates upstream.
        - For each edge: operand.grad += node.grad * (d node / d operand).
        - ConstantNode never accumulates.
    """
    if not tape.evaluated:
        raise RuntimeError("run_forward must complete before run_backward")
    if output is None:
        output = tape.output if tape.output is not None else len(tape.nodes) - 1
    out = _handle(tape, output)

    if reset:
        tape.zero_grads()
        logger.debug("grads reset on %d nodes", len(tape.nodes))
    else:
        _zero_intermediate(tape)

    nodes = tape.nodes
    if nodes[out].op_tag != "const":
        nodes[out].grad += float(seed)

    # Nodes after `out` cannot influence it
    for h in range(out, -1, -1):
        g = nodes[h].grad
        if g == 0 or nodes[h].op_tag == "input":
            continue
        for p, local_partial in _local_partials(tape, h):
            if nodes[p].op_tag == "const":
                continue
            nodes[p].grad += g * local_partial
    logger.debug("backward pass from node %d finished", out)

def backward_node(tape: Tape, node: NodeRef, grad_in):
    """
    Per-node backward rule applied recursively from `node`.

    Inputs add `grad_in` to their grad, constants ignore it, composites pass
    `grad_in` scaled by each local partial to their operands. A node reached
    along k parent edges is visited k times and accumulates all k
    contributions. Intermediate grads are not written. Nothing is reset, so
    calling this twice on the same tape doubles the input grads.
    """
    if not tape.evaluated:
        raise RuntimeError("run_forward must complete before backward_node")
    h = _handle(tape, node)
    n = tape.nodes[h]
    if n.op_tag == "input":
        n.grad += grad_in
        return
    for p, local_partial in _local_partials(tape, h):
        backward_node(tape, p, grad_in * local_partial)

def read_grad(tape: Tape, node: NodeRef) -> float:
    """Gradient accumulated on `node` by the last backward pass."""
    return float(tape.nodes[_handle(tape, node)].grad)

def read_value(tape: Tape, node: Optional[NodeRef] = None) -> float:
    """Forward value of `node` (default: the tape's output)."""
    if not tape.evaluated:
        raise RuntimeError("run_forward has not completed on this tape")
    if node is None:
        node = tape.output if tape.output is not None else len(tape.nodes) - 1
    return float(tape.nodes[_handle(tape, node)].value)
