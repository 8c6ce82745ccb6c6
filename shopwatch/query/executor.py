"""
Evaluate an Assumption against a row store.

The executor resolves the operator strategy, runs exactly one bounded row-store
lookup and compares the fetched value with the expected one. Elapsed time covers
the row-store call only. Failures of the store, including timeouts, surface as
InternalError; nothing is retried here.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from shopwatch.domain.errors import InternalError, ShopWatchError
from shopwatch.domain.models import Assumption, AssumptionOutcome
from shopwatch.operators.registry import OperatorRegistry, default_registry
from shopwatch.query.row_store import RowStore
from shopwatch.utils.logging import get_logger

log = get_logger(__name__)


class QueryExecutor:
    """
    Parameters
    ----------
    row_store : RowStore
        Collaborator performing the single-row lookup.
    registry : OperatorRegistry, optional
        Operator source; defaults to the frozen process registry.
    timeout_seconds : float, optional
        Default bound on the row-store call; `execute` may override it.
    """

    def __init__(
        self,
        row_store: RowStore,
        registry: Optional[OperatorRegistry] = None,
        timeout_seconds: Optional[float] = 5.0,
    ) -> None:
        self._row_store = row_store
        self._registry = registry or default_registry()
        self._timeout_seconds = timeout_seconds

    async def execute(
        self, assumption: Assumption, timeout_seconds: Optional[float] = None
    ) -> AssumptionOutcome:
        """
        Run the lookup for `assumption` and report whether it holds.

        Raises
        ------
        InternalError
            If the row store fails or does not answer within the timeout.
        """
        strategy = self._registry.resolve(assumption.operator)
        timeout = timeout_seconds if timeout_seconds is not None else self._timeout_seconds
        timeout_ms = int(timeout * 1000) if timeout else None

        start = time.perf_counter()
        try:
            row = await asyncio.wait_for(
                self._row_store.fetch_one(
                    assumption.table, assumption.field, assumption.filter, timeout_ms
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise InternalError(f"Row store did not answer within {timeout:.3f}s") from exc
        except ShopWatchError:
            raise
        except Exception as exc:
            raise InternalError(f"Row store lookup failed: {type(exc).__name__}") from exc
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        if row is None:
            return AssumptionOutcome.no_row(elapsed_ms)

        actual_value = row.get(assumption.field)
        matched = strategy.compare(actual_value, assumption.expected_value)
        log.debug(
            "Assumption evaluated",
            extra={
                "field_path": assumption.field_path,
                "operator": assumption.operator,
                "matched": matched,
                "query_time_ms": round(elapsed_ms, 3),
            },
        )
        return AssumptionOutcome(
            matched=matched,
            elapsed_ms=elapsed_ms,
            row_count=1,
            actual_value=actual_value,
            expected_value=assumption.expected_value,
            row_found=True,
        )


__all__ = ["QueryExecutor"]
