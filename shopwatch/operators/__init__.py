"""
Comparison operators for assumptions.

The operator set is closed (`OperatorToken`); each token maps to a strategy
through an explicit registry that is frozen before the first request.
"""

from shopwatch.operators.abstract import AbstractOperatorStrategy, OperatorStrategy, OperatorToken
from shopwatch.operators.registry import OperatorRegistry, available_operators, default_registry

__all__ = [
    "OperatorToken",
    "OperatorStrategy",
    "AbstractOperatorStrategy",
    "OperatorRegistry",
    "available_operators",
    "default_registry",
]
