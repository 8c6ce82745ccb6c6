"""
Single-row lookup: query composition, row stores and the executor.
"""

from shopwatch.query.builder import LookupQuery, build_lookup_query
from shopwatch.query.executor import QueryExecutor
from shopwatch.query.row_store import PostgresRowStore, Row, RowStore

__all__ = [
    "LookupQuery",
    "build_lookup_query",
    "QueryExecutor",
    "PostgresRowStore",
    "Row",
    "RowStore",
]
