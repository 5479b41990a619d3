"""
Bumping (finite differences) and derivative cross-checks

Formulas:
    f'(x) ≈ [f(x+ε) - f(x-ε)] / (2ε)

Used as an independent reference for forward-mode and reverse-mode results.
"""

import time
from typing import Callable, Dict, Optional

import numpy as np

from .config import ADConfig, DEFAULT_CONFIG
from .expression import evaluate, _as_expr
from .lowering import expression_to_graph
from .core.engine import run_forward, run_backward, read_grad, read_value


def central_difference(f: Callable[[float], float], x: float, eps: float = 1e-5) -> float:
    """Central finite difference of a scalar function."""
    if eps <= 0:
        raise ValueError("eps must be positive.")
    return (f(x + eps) - f(x - eps)) / (2.0 * eps)


def reverse_value_and_grad(expr, x):
    """(value, derivative) of `expr` at x through the reverse-mode graph."""
    tape = expression_to_graph(expr, x)
    run_forward(tape)
    run_backward(tape)
    return read_value(tape), read_grad(tape, tape.inputs[0])


def check_derivatives(expr, x, config: Optional[ADConfig] = None) -> Dict:
    """
    Evaluate `expr` at x with forward mode, reverse mode and bumping.

    Returns:
        {
            'x': float,
            'value': float,              # forward-mode value
            'forward': float,            # forward-mode derivative
            'reverse': float,            # reverse-mode derivative
            'finite_difference': float,  # central difference
            'ad_gap': float,             # |forward - reverse|
            'fd_gap': float,             # max |AD - FD|
            'agree': bool,
            'time_ms': float,
        }

    DomainError propagates unchanged if x is outside the domain.
    """
    config = config or DEFAULT_CONFIG
    expr = _as_expr(expr)
    start_time = time.time()

    value, fwd = evaluate(expr, x)
    rev_value, rev = reverse_value_and_grad(expr, x)
    fd = central_difference(lambda t: expr.eval(t), x, config.fd_eps)

    ad_gap = abs(fwd - rev)
    fd_gap = max(abs(fwd - fd), abs(rev - fd))
    agree = bool(
        np.isclose(value, rev_value, rtol=0.0, atol=config.agreement_tol)
        and ad_gap <= config.agreement_tol
        and fd_gap <= config.fd_tol
    )
    return {
        'x': float(x),
        'value': value,
        'forward': fwd,
        'reverse': rev,
        'finite_difference': float(fd),
        'ad_gap': ad_gap,
        'fd_gap': fd_gap,
        'agree': agree,
        'time_ms': (time.time() - start_time) * 1000.0,
    }
