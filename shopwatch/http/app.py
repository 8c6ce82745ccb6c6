"""
FastAPI application exposing the assumption endpoint.

Routes:
    POST /shopwatch/assume   -> AssumptionService.handle_assumption
    GET  /health             -> {"status": "ok", "enabled": bool}

The shell only resolves the caller address, reads headers and body, and maps the
ServiceResponse to a JSON response. If the client disconnects before the lookup
finishes, the in-flight request is cancelled.
"""

from __future__ import annotations

import asyncio
import contextlib
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from shopwatch import __version__
from shopwatch.config import Settings, get_settings, load_allow_list
from shopwatch.domain.errors import InternalError
from shopwatch.infrastructure.db_factory import PoolManager
from shopwatch.query.row_store import PostgresRowStore, Row
from shopwatch.service import (
    INTERNAL_ERROR_BODY,
    AssumptionService,
    ServiceResponse,
    build_service,
    new_request_id,
)
from shopwatch.utils.logging import get_logger, start_audit_listener, stop_audit_listener

log = get_logger(__name__)

router = APIRouter()

DISCONNECT_POLL_SECONDS = 0.1
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


class _ClosedRowStore:
    """Row store used while the service is disabled; it is never reached."""

    async def fetch_one(
        self,
        table: str,
        field: str,
        filter: Mapping[str, Any],
        timeout_ms: Optional[int] = None,
    ) -> Optional[Row]:
        raise InternalError("Row store is not configured")


def client_address(request: Request, trust_forwarded_headers: bool) -> str:
    """
    Resolve the caller address.

    Forwarded headers are honoured only when the service sits behind a trusted
    proxy; otherwise any client could claim an allow-listed address.
    """
    if trust_forwarded_headers:
        forwarded = request.headers.get("X-Forwarded-For", "")
        if forwarded.strip():
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP", "")
        if real_ip.strip():
            return real_ip.strip()
    if request.client is None:
        return "0.0.0.0"
    return request.client.host


def request_id_for(request: Request) -> str:
    candidate = request.headers.get("X-Request-ID", "")
    return candidate if _REQUEST_ID_PATTERN.fullmatch(candidate) else new_request_id()


async def _run_until_disconnect(request: Request, work: "asyncio.Future[ServiceResponse]") -> Optional[ServiceResponse]:
    while True:
        done, _ = await asyncio.wait({work}, timeout=DISCONNECT_POLL_SECONDS)
        if done:
            return work.result()
        if await request.is_disconnected():
            work.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await work
            return None


@router.post("/shopwatch/assume")
async def assume(request: Request) -> JSONResponse:
    service: AssumptionService = request.app.state.service
    settings: Settings = request.app.state.settings
    request_id = request_id_for(request)

    body = await request.body()
    work = asyncio.ensure_future(
        service.handle_assumption(
            client_address(request, settings.trust_forwarded_headers),
            request.headers.get("X-API-Key"),
            body,
            request_id=request_id,
        )
    )
    result = await _run_until_disconnect(request, work)
    if result is None:
        log.info("Client disconnected; request cancelled", extra={"request_id": request_id})
        result = ServiceResponse(500, dict(INTERNAL_ERROR_BODY), request_id)

    return JSONResponse(
        status_code=result.status,
        content=result.body,
        headers={"X-Request-ID": result.request_id},
    )


@router.get("/health")
async def health(request: Request) -> dict:
    return {"status": "ok", "enabled": request.app.state.service.enabled}


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[AssumptionService] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    settings : Settings, optional
        Defaults to the cached process settings.
    service : AssumptionService, optional
        Pre-wired service (tests). When omitted, the lifespan loads the
        allow-list, opens the connection pool and starts the audit listener.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.settings = settings
        if service is not None:
            app.state.service = service
            yield
            return

        allow_list = load_allow_list(settings)
        pools: Optional[PoolManager] = None
        if settings.enabled:
            pools = PoolManager(settings)
            row_store: Any = PostgresRowStore(await pools.open())
        else:
            row_store = _ClosedRowStore()
        app.state.service = build_service(settings, row_store, allow_list=allow_list)
        start_audit_listener()
        log.info(
            "ShopWatch started",
            extra={"enabled": settings.enabled, "allowed_hosts": len(allow_list)},
        )
        try:
            yield
        finally:
            stop_audit_listener()
            if pools is not None:
                await pools.close()

    app = FastAPI(
        title="ShopWatch",
        description="Database state verification for end-to-end tests.",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(router)
    return app


__all__ = ["create_app", "client_address", "request_id_for"]
