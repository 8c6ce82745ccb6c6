"""
Operator registry: the single source of truth mapping tokens to strategies.

The registry is seeded with the default token set, can be extended through
explicit `register` calls while the process starts, and is frozen before the
first request is served.

Usage:
    from shopwatch.operators.registry import default_registry

    strategy = default_registry().resolve(">=")
    strategy.compare(10, "9")  # True
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Dict, List, Tuple, Type

from shopwatch.domain.errors import UnknownOperator
from shopwatch.operators.abstract import (
    AbstractOperatorStrategy,
    OperatorStrategy,
    OperatorToken,
)
from shopwatch.operators.equality import EqualityOperator
from shopwatch.operators.null_check import NullCheckOperator
from shopwatch.operators.ordering import OrderingOperator
from shopwatch.operators.pattern import PatternMatchOperator
from shopwatch.utils.logging import get_logger

log = get_logger(__name__)

StrategyFactory = Callable[[str], OperatorStrategy]

DEFAULT_STRATEGIES: Tuple[Type[AbstractOperatorStrategy], ...] = (
    EqualityOperator,
    OrderingOperator,
    PatternMatchOperator,
    NullCheckOperator,
)


class OperatorRegistry:
    """
    Maps operator tokens to strategy factories.

    Parameters
    ----------
    seed_defaults : bool
        Whether to bind the default token set on construction.
    """

    def __init__(self, seed_defaults: bool = True) -> None:
        self._factories: Dict[str, StrategyFactory] = {}
        self._frozen = False
        if seed_defaults:
            for token in OperatorToken:
                self._factories[token.value] = next(
                    strategy_cls for strategy_cls in DEFAULT_STRATEGIES if token.value in strategy_cls.tokens
                )

    def register(self, token: str, factory: StrategyFactory) -> None:
        """
        Bind `token` to a strategy factory.

        Raises
        ------
        RuntimeError
            If the registry has been frozen.
        TypeError
            If the factory does not produce an OperatorStrategy.
        """
        if self._frozen:
            raise RuntimeError("Operator registry is frozen; register operators at startup")
        probe = factory(token)
        if not isinstance(probe, OperatorStrategy):
            raise TypeError(f"Factory for '{token}' must produce an OperatorStrategy")
        self._factories[token] = factory
        log.debug("Operator registered", extra={"operator": token})

    def freeze(self) -> "OperatorRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def is_supported(self, token: object) -> bool:
        return isinstance(token, str) and token in self._factories

    def tokens(self) -> List[str]:
        """Registered tokens in registration order."""
        return list(self._factories)

    def resolve(self, token: str) -> OperatorStrategy:
        """
        Return the strategy bound to `token`.

        Raises
        ------
        UnknownOperator
            If the token is not registered.
        """
        if not self.is_supported(token):
            raise UnknownOperator(
                f'Invalid operator: "{token}". Allowed: {", ".join(self._factories)}'
            )
        return self._factories[token](token)


@lru_cache(maxsize=1)
def default_registry() -> OperatorRegistry:
    """Process-wide registry with the default token set, frozen."""
    return OperatorRegistry().freeze()


def available_operators() -> List[str]:
    """List the default operator tokens."""
    return default_registry().tokens()


__all__ = [
    "StrategyFactory",
    "DEFAULT_STRATEGIES",
    "OperatorRegistry",
    "default_registry",
    "available_operators",
]
