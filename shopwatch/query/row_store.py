"""
Row-store collaborators for the query executor.

A row store answers one read-only, single-row lookup per call. The PostgreSQL
implementation borrows a connection from the async pool, runs the composed
lookup inside a read-only transaction bounded by a statement timeout, and
returns the first row as a mapping (or None).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from shopwatch.infrastructure.db_factory import apply_statement_timeout
from shopwatch.query.builder import build_lookup_query
from shopwatch.utils.logging import get_logger

log = get_logger(__name__)

Row = Mapping[str, Any]


@runtime_checkable
class RowStore(Protocol):
    """Read-only, parametrized single-row lookup."""

    async def fetch_one(
        self,
        table: str,
        field: str,
        filter: Mapping[str, Any],
        timeout_ms: Optional[int] = None,
    ) -> Optional[Row]:
        """
        Return the first row of `table` matching `filter`, projected on `field`.

        Parameters
        ----------
        table, field : str
            Validated identifiers; quoted by the implementation.
        filter : Mapping[str, Any]
            Column -> value equality predicates; values are bound parameters.
        timeout_ms : int, optional
            Server-side execution bound, where the store supports one.
        """
        ...


class PostgresRowStore:
    """
    RowStore backed by a psycopg AsyncConnectionPool.

    Parameters
    ----------
    pool : AsyncConnectionPool
        Opened pool, owned by the caller.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def fetch_one(
        self,
        table: str,
        field: str,
        filter: Mapping[str, Any],
        timeout_ms: Optional[int] = None,
    ) -> Optional[Row]:
        query = build_lookup_query(table, field, filter)
        async with self._pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute("SET TRANSACTION READ ONLY")
                    await apply_statement_timeout(cur, timeout_ms)
                    await cur.execute(query.compose(), query.params)
                    row = await cur.fetchone()
        log.debug(
            "Lookup executed",
            extra={"table": table, "field": field, "where_fields": list(query.filter_columns)},
        )
        return row


__all__ = ["Row", "RowStore", "PostgresRowStore"]
