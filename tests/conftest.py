"""
Pytest configuration for ShopWatch.

Provides fixtures for:
- In-memory row stores standing in for PostgreSQL
- Allow-lists, credentials and a wired AssumptionService
- Database connection management for integration tests
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, Generator, List, Mapping, Optional, Tuple

import psycopg
import pytest

from shopwatch.audit import AuditRecorder
from shopwatch.config import Settings
from shopwatch.domain.models import AllowList, AllowListEntry
from shopwatch.query.executor import QueryExecutor
from shopwatch.security.auth import AuthenticationGate
from shopwatch.service import AssumptionService

CALLER_ADDRESS = "10.20.0.7"
CALLER_CREDENTIAL = "a3f1" * 16
OTHER_CREDENTIAL = "0b9c" * 16


class FakeRowStore:
    """
    Row store keyed by (table, sorted filter items).

    Every call is recorded so tests can assert whether the store was reached.
    """

    def __init__(self, rows: Optional[Dict[Tuple[str, Tuple[Tuple[str, Any], ...]], Dict[str, Any]]] = None) -> None:
        self.rows = rows or {}
        self.calls: List[Tuple[str, str, Dict[str, Any], Optional[int]]] = []

    @staticmethod
    def key(table: str, filter: Mapping[str, Any]) -> Tuple[str, Tuple[Tuple[str, Any], ...]]:
        return table, tuple(sorted(filter.items()))

    def add(self, table: str, filter: Mapping[str, Any], row: Dict[str, Any]) -> None:
        self.rows[self.key(table, filter)] = row

    async def fetch_one(
        self,
        table: str,
        field: str,
        filter: Mapping[str, Any],
        timeout_ms: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        self.calls.append((table, field, dict(filter), timeout_ms))
        row = self.rows.get(self.key(table, filter))
        if row is None:
            return None
        return {field: row.get(field)}


class SlowRowStore(FakeRowStore):
    """Never answers within a reasonable timeout; records cancellation."""

    def __init__(self, delay: float = 10.0) -> None:
        super().__init__()
        self.delay = delay
        self.cancelled = False

    async def fetch_one(self, table, field, filter, timeout_ms=None):
        self.calls.append((table, field, dict(filter), timeout_ms))
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return None


class FailingRowStore(FakeRowStore):
    """Raises a driver-style error carrying backend text."""

    def __init__(self, exc: Exception) -> None:
        super().__init__()
        self.exc = exc

    async def fetch_one(self, table, field, filter, timeout_ms=None):
        self.calls.append((table, field, dict(filter), timeout_ms))
        raise self.exc


class RecordingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def allow_list() -> AllowList:
    return AllowList(
        entries=(
            AllowListEntry(address=CALLER_ADDRESS, credential=CALLER_CREDENTIAL, label="e2e-runner"),
            AllowListEntry(address="192.168.1.0/24", credential=OTHER_CREDENTIAL, label="ci-subnet"),
        )
    )


@pytest.fixture
def row_store() -> FakeRowStore:
    store = FakeRowStore()
    store.add("osc_payment_contract", {"OXID": "c-1"}, {"OXSTATE": "committed"})
    store.add("oxorder", {"OXORDERNR": 42}, {"OXTOTALORDERSUM": "100.00", "OXFOLDER": "ORDERFOLDER_NEW"})
    return store


@pytest.fixture
def audit_records() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def audit(audit_records: RecordingHandler) -> Generator[AuditRecorder, None, None]:
    logger = logging.getLogger("tests.shopwatch.audit")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(audit_records)
    try:
        yield AuditRecorder(logger)
    finally:
        logger.removeHandler(audit_records)


@pytest.fixture
def service(allow_list: AllowList, row_store: FakeRowStore, audit: AuditRecorder) -> AssumptionService:
    return AssumptionService(
        gate=AuthenticationGate(allow_list),
        executor=QueryExecutor(row_store, timeout_seconds=1.0),
        audit=audit,
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        _env_file=None,
        enabled=True,
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "shopwatch_test"),
        query_timeout_ms=2_000,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return test_settings.dsn


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def seeded_orders(db_connection: psycopg.Connection) -> Generator[str, None, None]:
    """
    Create and seed a small `sw_orders` table, dropped after the test.

    Returns the table name.
    """
    with db_connection.cursor() as cur:
        cur.execute('DROP TABLE IF EXISTS sw_orders')
        cur.execute(
            'CREATE TABLE sw_orders ("OXID" text PRIMARY KEY, "OXFOLDER" text, '
            '"OXTOTALORDERSUM" numeric(10, 2), "OXPAID" timestamp NULL)'
        )
        cur.execute(
            'INSERT INTO sw_orders ("OXID", "OXFOLDER", "OXTOTALORDERSUM", "OXPAID") VALUES '
            "('o-1', 'ORDERFOLDER_NEW', 100.00, NULL), "
            "('o-2', 'ORDERFOLDER_FINISHED', 59.90, '2024-05-01 12:30:00')"
        )
    yield "sw_orders"
    with db_connection.cursor() as cur:
        cur.execute('DROP TABLE IF EXISTS sw_orders')
