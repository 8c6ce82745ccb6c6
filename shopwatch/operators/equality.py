"""
Equality strategy (==, !=) with loose, coercive semantics.

Numeric strings and numbers compare numerically, so a harness asserting
`{"oxorder.OXTOTALORDERSUM": "100"}` matches a DECIMAL column holding 100.00.
"""

from __future__ import annotations

from typing import Any, ClassVar, FrozenSet

from shopwatch.operators.abstract import AbstractOperatorStrategy, OperatorToken
from shopwatch.operators.coercion import loose_equals


class EqualityOperator(AbstractOperatorStrategy):
    tokens: ClassVar[FrozenSet[str]] = frozenset({OperatorToken.EQ.value, OperatorToken.NE.value})

    def compare(self, actual: Any, expected: Any) -> bool:
        equal = loose_equals(actual, expected)
        return equal if self.token == OperatorToken.EQ.value else not equal


__all__ = ["EqualityOperator"]
