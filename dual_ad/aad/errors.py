# dual_ad/aad/errors.py
from __future__ import annotations
from typing import Any, Optional


class DomainError(ValueError):
    """
    Raised when an operation's mathematical precondition is violated.

    Attributes
    ----------
    operation : str
        Operation tag that failed: "log", "div" or "singular".
    argument : Any
        The offending numeric argument (log argument, denominator, or the
        evaluation point itself for singular points).
    reason : str
        Human-readable precondition, e.g. "argument must be > 0".
    where : Optional[str]
        Rendered sub-expression or graph-node label the violation came from;
        any object passed in is stored as its str().
    """

    def __init__(self, operation: str, argument: Any, reason: str, where: Any = None):
        self.operation = operation
        self.argument = argument
        self.reason = reason
        self.where = None if where is None else str(where)
        super().__init__(self._format())

    def _format(self) -> str:
        loc = f" in {self.where}" if self.where else ""
        return f"{self.operation}{loc}: {self.reason} (got {self.argument!r})"
