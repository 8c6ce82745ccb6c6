from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import psycopg
import typer
from psycopg_pool import PoolTimeout
from rich import box
from rich.console import Console
from rich.table import Table

from shopwatch.config import get_settings, load_allow_list
from shopwatch.domain.errors import ConfigurationError, InternalError, ShopWatchError
from shopwatch.domain.models import AssumptionOutcome
from shopwatch.infrastructure.db_factory import PoolManager
from shopwatch.operators.registry import available_operators
from shopwatch.parser import AssumptionParser
from shopwatch.query.executor import QueryExecutor
from shopwatch.query.row_store import PostgresRowStore
from shopwatch.security import credentials
from shopwatch.service import decode_body
from shopwatch.utils.logging import configure_logging

app = typer.Typer(help="ShopWatch - database state verification API for E2E tests.")
console = Console()


@app.command()
def info() -> None:
    """
    Show effective configuration values (credentials redacted).
    """
    settings = get_settings()
    typer.echo(
        f"enabled={settings.enabled} | "
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"timeout={settings.query_timeout_ms}ms | "
        f"listen={settings.http_host}:{settings.http_port} | "
        f"operators={', '.join(available_operators())}"
    )
    try:
        allow_list = load_allow_list(settings)
    except ConfigurationError as exc:
        typer.echo(f"Allow-list error: {exc}", err=True)
        raise typer.Exit(code=2)

    table = Table(title="Allowed hosts", box=box.ROUNDED)
    table.add_column("Address", style="cyan")
    table.add_column("Label")
    table.add_column("Credential", style="dim")
    for entry in allow_list.entries:
        table.add_row(entry.address, entry.label, credentials.redact(entry.credential))
    console.print(table)


@app.command("generate-key")
def generate_key() -> None:
    """
    Print a new 64 character credential for an allow-list entry.
    """
    typer.echo(credentials.generate())


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (default from settings)."),
) -> None:
    """
    Run the HTTP service.
    """
    import uvicorn

    from shopwatch.http.app import create_app

    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    uvicorn.run(
        create_app(settings),
        host=host or settings.http_host,
        port=port or settings.http_port,
        log_config=None,
    )


def _render_outcome(outcome: AssumptionOutcome) -> None:
    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in outcome.to_response().items():
        table.add_row(key, json.dumps(value))
    console.print(table)


async def _check(payload: dict) -> AssumptionOutcome:
    settings = get_settings()
    assumption = AssumptionParser().parse(payload)
    pools = PoolManager(settings)
    try:
        pool = await pools.open()
    except (psycopg.OperationalError, PoolTimeout) as exc:
        raise InternalError(f"Database unreachable: {exc}") from exc
    try:
        executor = QueryExecutor(PostgresRowStore(pool), timeout_seconds=settings.query_timeout_seconds)
        return await executor.execute(assumption)
    finally:
        await pools.close()


@app.command()
def check(
    assumption: Optional[str] = typer.Argument(
        None, help='Assumption JSON, e.g. \'{"assumption": {"oxorder.OXFOLDER": "ORDERFOLDER_NEW"}}\'.'
    ),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read the assumption JSON from a file."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw response body."),
) -> None:
    """
    Evaluate one assumption against the configured database (no caller auth).
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    raw = file.read_text(encoding="utf-8") if file is not None else assumption
    try:
        outcome = asyncio.run(_check(decode_body(raw)))
    except ShopWatchError as exc:
        typer.echo(f"{type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(outcome.to_response()))
    else:
        _render_outcome(outcome)
    raise typer.Exit(code=0 if outcome.matched else 3)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
