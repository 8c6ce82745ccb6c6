"""
Database connection factory utilities for ShopWatch.

Provides the process-wide async PostgreSQL connection pool used by the row
store. The PoolManager owns the pool lifecycle; opening the pool at startup is
retried for transient connection failures using tenacity. Individual lookups
are never retried.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import psycopg
from psycopg import AsyncCursor
from psycopg_pool import AsyncConnectionPool, PoolTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from shopwatch.config import Settings, get_settings
from shopwatch.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    return (settings or get_settings()).dsn


async def apply_statement_timeout(cur: AsyncCursor, timeout_ms: Optional[int]) -> None:
    """
    Bound server-side execution of the current transaction.

    Uses `set_config(..., is_local => true)` so the value can be bound as a
    parameter and is discarded when the transaction ends.
    """
    if timeout_ms and timeout_ms > 0:
        await cur.execute("SELECT set_config('statement_timeout', %s, true)", (str(int(timeout_ms)),))


class PoolManager:
    """
    Owner of the async connection pool.

    One instance is created by the application lifespan; `open` must be awaited
    before the pool is used and `close` on shutdown.
    """

    def __init__(self, settings: Optional[Settings] = None, dsn_override: Optional[str] = None) -> None:
        self._settings = settings or get_settings()
        self._dsn = dsn_override or build_dsn(self._settings)
        self._pool: Optional[AsyncConnectionPool] = None
        self._lock = asyncio.Lock()

    @property
    def pool(self) -> AsyncConnectionPool:
        if self._pool is None:
            raise RuntimeError("Connection pool is not open")
        return self._pool

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((psycopg.OperationalError, PoolTimeout)),
        reraise=True,
    )
    async def _open_pool(self) -> AsyncConnectionPool:
        pool = AsyncConnectionPool(
            conninfo=self._dsn,
            min_size=self._settings.db_pool_min_size,
            max_size=self._settings.db_pool_max_size,
            open=False,
        )
        try:
            await pool.open(wait=True, timeout=self._settings.query_timeout_seconds * 2)
        except Exception:
            await pool.close()
            raise
        return pool

    async def open(self) -> AsyncConnectionPool:
        """
        Open the pool, retrying up to 3 times with exponential backoff.

        Raises
        ------
        psycopg.OperationalError | PoolTimeout
            If the database stays unreachable after all attempts.
        """
        async with self._lock:
            if self._pool is None:
                self._pool = await self._open_pool()
                log.info(
                    "Connection pool opened",
                    extra={
                        "db_host": self._settings.db_host,
                        "db_name": self._settings.db_name,
                        "pool_max_size": self._settings.db_pool_max_size,
                    },
                )
            return self._pool

    async def close(self) -> None:
        async with self._lock:
            if self._pool is not None:
                try:
                    await self._pool.close()
                finally:
                    self._pool = None
                log.info("Connection pool closed")


__all__ = ["PoolManager", "apply_statement_timeout", "build_dsn"]
