"""Null-check strategy (IS NULL, IS NOT NULL). The expected operand is ignored."""

from __future__ import annotations

from typing import Any, ClassVar, FrozenSet

from shopwatch.operators.abstract import AbstractOperatorStrategy, OperatorToken


class NullCheckOperator(AbstractOperatorStrategy):
    tokens: ClassVar[FrozenSet[str]] = frozenset(
        {OperatorToken.IS_NULL.value, OperatorToken.IS_NOT_NULL.value}
    )

    def compare(self, actual: Any, expected: Any) -> bool:
        del expected
        if self.token == OperatorToken.IS_NULL.value:
            return actual is None
        return actual is not None


__all__ = ["NullCheckOperator"]
