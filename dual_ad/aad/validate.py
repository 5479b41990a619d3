# dual_ad/aad/validate.py
"""
Domain checks shared by the forward expression tree and the reverse engine.

Each check raises DomainError at the first violated precondition, so callers
never see a NaN/inf produced by an undefined log or division.
"""
from __future__ import annotations
from typing import Iterable, List

import numpy as np

from .errors import DomainError


def check_log_argument(value, where=None):
    """ln(u) is defined only for u > 0."""
    if not np.isfinite(value) or value <= 0:
        raise DomainError("log", float(value), "argument must be > 0", where)
    return value


def check_denominator(value, where=None):
    """n / d is defined only for d != 0."""
    if not np.isfinite(value) or value == 0:
        raise DomainError("div", float(value), "denominator must be nonzero", where)
    return value


def check_not_singular(x, singularities: Iterable[float], where=None):
    """Reject an evaluation point that coincides with a known singular point."""
    for s in singularities:
        if x == s:
            raise DomainError("singular", float(x), f"evaluation point must not equal {s!r}", where)
    return x


def find_violations(tree, x) -> List[DomainError]:
    """
    Collect every domain violation in `tree` at x without raising.

    A node whose operand subtree already failed has no defined value, so
    nothing above a violation is checked again; independent branches are
    still inspected.
    """
    from .expression import Constant, Power, Log, Division, _Binary

    found: List[DomainError] = []

    def walk(node):
        if isinstance(node, (Constant, Power)):
            return node.eval(x)
        if isinstance(node, Log):
            u = walk(node.inner)
            if u is None:
                return None
            try:
                check_log_argument(u, node)
            except DomainError as e:
                found.append(e)
                return None
            return np.log(u)
        if isinstance(node, _Binary):
            a = walk(node.left)
            b = walk(node.right)
            if a is None or b is None:
                return None
            if isinstance(node, Division):
                try:
                    check_denominator(b, node)
                except DomainError as e:
                    found.append(e)
                    return None
            return node.combine(a, b)
        raise TypeError(f"Not an expression node: {type(node)}")

    walk(tree)
    return found


def validate_expression(tree, x):
    """Raise the first violation `find_violations` reports, if any."""
    found = find_violations(tree, x)
    if found:
        raise found[0]
