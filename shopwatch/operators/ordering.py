"""
Ordering strategy (>, <, >=, <=).

Operands are coerced with the same rules as equality; numbers and numeric
strings compare numerically, everything else lexicographically.
"""

from __future__ import annotations

import operator
from typing import Any, Callable, ClassVar, Dict, FrozenSet

from shopwatch.operators.abstract import AbstractOperatorStrategy, OperatorToken
from shopwatch.operators.coercion import coerce_pair

_COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    OperatorToken.GT.value: operator.gt,
    OperatorToken.LT.value: operator.lt,
    OperatorToken.GE.value: operator.ge,
    OperatorToken.LE.value: operator.le,
}


class OrderingOperator(AbstractOperatorStrategy):
    tokens: ClassVar[FrozenSet[str]] = frozenset(_COMPARATORS)

    def compare(self, actual: Any, expected: Any) -> bool:
        left, right = coerce_pair(actual, expected)
        try:
            return bool(_COMPARATORS[self.token](left, right))
        except TypeError:
            # Incomparable after coercion, e.g. driver-specific types.
            return False


__all__ = ["OrderingOperator"]
