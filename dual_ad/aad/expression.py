# dual_ad/aad/expression.py
# Forward-mode engine (independent from the tape/graph): each node returns
# (value, derivative) together in one bottom-up pass.

import copy
import warnings
from typing import Tuple

import numpy as np

from .validate import check_log_argument, check_denominator

_NUMERIC = (int, float, np.integer, np.floating)


def _as_expr(v):
    if isinstance(v, Expression):
        return v
    if isinstance(v, _NUMERIC) and not isinstance(v, bool):
        return Constant(v)
    raise TypeError(f"Expected an Expression or real scalar, got {type(v)}")


def _adopt(child):
    """Take ownership of `child`; a node that already has a parent is copied."""
    child = _as_expr(child)
    if child._owned:
        child = copy.deepcopy(child)
    child._owned = True
    return child


class Expression:
    """
    Base class of the forward expression tree.

    Subclasses implement `eval_pair(x) -> (value, derivative)`; `eval` and
    `derivative` are projections of it. Nodes hold no mutable evaluation
    state, so a tree can be evaluated repeatedly (or from several threads)
    at different points.
    """
    _owned = False

    def eval_pair(self, x) -> Tuple[float, float]:
        raise NotImplementedError

    def eval(self, x) -> float:
        return self.eval_pair(x)[0]

    def derivative(self, x) -> float:
        return self.eval_pair(x)[1]

    def __repr__(self):
        return f"{type(self).__name__}({self})"

    def __add__(a, b): return Add(a, b)
    def __radd__(b, a): return Add(a, b)
    def __sub__(a, b): return Subtract(a, b)
    def __rsub__(b, a): return Subtract(a, b)
    def __mul__(a, b): return Product(a, b)
    def __rmul__(b, a): return Product(a, b)
    def __truediv__(a, b): return Division(a, b)
    def __rtruediv__(b, a): return Division(a, b)


class Constant(Expression):
    def __init__(self, c):
        self.c = np.float64(c)

    def eval_pair(self, x):
        return self.c, np.float64(0.0)

    def __str__(self):
        return f"{float(self.c):g}"


class Power(Expression):
    """
    x ** n on the raw evaluation point.

    Power never wraps a sub-expression: it always reads `x` itself, so
    Power(1) is the variable. Degenerate cases (0 ** -1, negative base with a
    fractional exponent) follow real exponentiation and yield inf/nan with a
    RuntimeWarning.
    """
    def __init__(self, n):
        self.n = np.float64(n)

    def eval_pair(self, x):
        x = np.float64(x)
        n = self.n
        with np.errstate(divide="ignore", invalid="ignore"):
            val = x ** n
            # d/dx x^0 is 0 everywhere, including x == 0
            der = np.float64(0.0) if n == 0 else n * x ** (n - 1.0)
        if not (np.isfinite(val) and np.isfinite(der)):
            warnings.warn(f"{self} is not finite at x={float(x)!r}", RuntimeWarning, stacklevel=2)
        return val, der

    def __str__(self):
        return "x" if self.n == 1 else f"x^{float(self.n):g}"


class Log(Expression):
    """ln(u); requires u(x) > 0."""
    def __init__(self, inner):
        self.inner = _adopt(inner)

    def eval_pair(self, x):
        u, du = self.inner.eval_pair(x)
        check_log_argument(u, self)
        return np.log(u), du / u

    def __str__(self):
        return f"ln({self.inner})"


class _Binary(Expression):
    symbol = "?"

    def __init__(self, left, right):
        self.left = _adopt(left)
        self.right = _adopt(right)

    def eval_pair(self, x):
        a, da = self.left.eval_pair(x)
        b, db = self.right.eval_pair(x)
        return self.combine_pair(a, da, b, db)

    def combine(self, a, b):
        raise NotImplementedError

    def combine_pair(self, a, da, b, db):
        raise NotImplementedError

    def __str__(self):
        def wrap(e):
            return f"({e})" if isinstance(e, _Binary) else str(e)
        return f"{wrap(self.left)} {self.symbol} {wrap(self.right)}"


class Add(_Binary):
    symbol = "+"

    def combine(self, a, b):
        return a + b

    def combine_pair(self, a, da, b, db):
        return a + b, da + db


class Subtract(_Binary):
    symbol = "-"

    def combine(self, a, b):
        return a - b

    def combine_pair(self, a, da, b, db):
        return a - b, da - db


class Product(_Binary):
    symbol = "*"

    def combine(self, a, b):
        return a * b

    def combine_pair(self, a, da, b, db):
        return a * b, da * b + a * db


class Division(_Binary):
    """numerator / denominator; requires denominator(x) != 0."""
    symbol = "/"

    @property
    def numerator(self):
        return self.left

    @property
    def denominator(self):
        return self.right

    def combine(self, a, b):
        return a / b

    def combine_pair(self, a, da, b, db):
        check_denominator(b, self)
        return a / b, (da * b - a * db) / (b * b)


def variable():
    """The evaluation variable x, i.e. Power(1)."""
    return Power(1)


def evaluate(tree: Expression, x) -> Tuple[float, float]:
    """
    Evaluate `tree` at x, returning (value, derivative).

    Raises DomainError at the first violated precondition; no partial result
    is returned.
    """
    val, der = _as_expr(tree).eval_pair(np.float64(x))
    return float(val), float(der)
