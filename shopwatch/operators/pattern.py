"""
Pattern-match strategy (%like%, like%, %like).

Both operands are rendered as text and lower-cased; `%like%` tests containment,
`like%` a prefix and `%like` a suffix. No wildcard characters are interpreted.
"""

from __future__ import annotations

from typing import Any, ClassVar, FrozenSet

from shopwatch.operators.abstract import AbstractOperatorStrategy, OperatorToken
from shopwatch.operators.coercion import to_text


class PatternMatchOperator(AbstractOperatorStrategy):
    tokens: ClassVar[FrozenSet[str]] = frozenset(
        {
            OperatorToken.CONTAINS.value,
            OperatorToken.STARTS_WITH.value,
            OperatorToken.ENDS_WITH.value,
        }
    )

    def compare(self, actual: Any, expected: Any) -> bool:
        haystack = to_text(actual).lower()
        needle = to_text(expected).lower()
        if self.token == OperatorToken.STARTS_WITH.value:
            return haystack.startswith(needle)
        if self.token == OperatorToken.ENDS_WITH.value:
            return haystack.endswith(needle)
        return needle in haystack


__all__ = ["PatternMatchOperator"]
