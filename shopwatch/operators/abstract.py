"""
Operator strategy interfaces for ShopWatch.

Every operator token resolves to a strategy instance implementing
`compare(actual, expected) -> bool`. Concrete strategies declare the subset of
tokens they answer for; the registry is the single source of truth mapping
token -> strategy.
"""

from __future__ import annotations

import abc
import enum
from typing import Any, ClassVar, FrozenSet, Protocol, runtime_checkable


class OperatorToken(str, enum.Enum):
    """The closed set of operator tokens shipped by default."""

    EQ = "=="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    CONTAINS = "%like%"
    STARTS_WITH = "like%"
    ENDS_WITH = "%like"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"


@runtime_checkable
class OperatorStrategy(Protocol):
    """
    Common interface all comparison strategies implement.

    Attributes
    ----------
    token : str
        The operator token this instance is bound to.
    """

    token: str

    def compare(self, actual: Any, expected: Any) -> bool:
        """
        Compare a fetched value with the caller's expected value.

        Parameters
        ----------
        actual : Any
            Value read from the row store.
        expected : Any
            Value declared in the assumption.
        """
        ...


class AbstractOperatorStrategy(abc.ABC):
    """
    ABC helper for class-based strategies bound to one token each.

    Subclasses set `tokens` and implement `compare`.
    """

    tokens: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self, token: str) -> None:
        token = str(token.value if isinstance(token, OperatorToken) else token)
        if token not in self.tokens:
            raise ValueError(
                f"Operator '{token}' is not supported by {type(self).__name__}. "
                f"Supported: {', '.join(sorted(self.tokens))}"
            )
        self.token = token

    @abc.abstractmethod
    def compare(self, actual: Any, expected: Any) -> bool:  # pragma: no cover - interface only
        """Return True if `actual` satisfies the operator against `expected`."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.token!r})"


__all__ = ["OperatorToken", "OperatorStrategy", "AbstractOperatorStrategy"]
