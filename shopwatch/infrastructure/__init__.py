"""
Infrastructure package for ShopWatch.

Centralizes database connectivity (async pool lifecycle, statement timeouts).
Keep this layer focused on I/O and resource management.
"""

from shopwatch.infrastructure.db_factory import PoolManager, apply_statement_timeout, build_dsn

__all__ = [
    "PoolManager",
    "apply_statement_timeout",
    "build_dsn",
]
