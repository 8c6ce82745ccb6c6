"""
Request pipeline: authenticate -> parse -> execute -> audit -> respond.

`AssumptionService.handle_assumption` is the single operation exposed to the
HTTP shell. Every stage fails closed; the audit recorder always sees the final
outcome. Errors are translated to statuses here and nowhere else:

    ValidationError -> 400 {"error": <rule violated>}
    Unauthorized    -> 401 {"error": "Unauthorized"}
    anything else   -> 500 {"error": "Internal server error"}
"""

from __future__ import annotations

import asyncio
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from shopwatch.audit import AuditRecorder
from shopwatch.config import Settings, load_allow_list
from shopwatch.domain.errors import Unauthorized, ValidationError
from shopwatch.domain.models import AllowList
from shopwatch.operators.registry import OperatorRegistry, default_registry
from shopwatch.parser import AssumptionParser
from shopwatch.query.executor import QueryExecutor
from shopwatch.query.row_store import RowStore
from shopwatch.security.auth import AuthenticationGate
from shopwatch.security.identifiers import find_suspicious_values
from shopwatch.utils.logging import get_logger

log = get_logger(__name__)

RawBody = Union[bytes, bytearray, str, Mapping[str, Any], None]

UNAUTHORIZED_BODY = {"error": "Unauthorized"}
INTERNAL_ERROR_BODY = {"error": "Internal server error"}


@dataclass(frozen=True)
class ServiceResponse:
    status: int
    body: Dict[str, Any]
    request_id: str = field(default="")


def new_request_id() -> str:
    return f"swreq_{uuid.uuid4().hex}"


def _reject_constant(literal: str) -> Any:
    raise ValidationError("Invalid JSON")


def decode_body(raw_body: RawBody) -> Dict[str, Any]:
    """
    Decode the request body into a JSON object.

    Raises
    ------
    ValidationError
        For an empty body, invalid JSON (NaN and Infinity literals included)
        or a non-object document.
    """
    if isinstance(raw_body, Mapping):
        return dict(raw_body)
    if raw_body is None or (isinstance(raw_body, (bytes, bytearray, str)) and not raw_body.strip()):
        raise ValidationError("Empty request body")
    try:
        decoded = json.loads(raw_body, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Invalid JSON") from exc
    if not isinstance(decoded, dict):
        raise ValidationError("Request body must be a JSON object")
    return decoded


class AssumptionService:
    """
    Parameters
    ----------
    gate : AuthenticationGate
        Caller authentication against the immutable allow-list snapshot.
    executor : QueryExecutor
        Bounded single-row lookup and comparison.
    parser : AssumptionParser, optional
        Payload validation; defaults to the process operator registry.
    audit : AuditRecorder, optional
        Outcome sink; defaults to the `shopwatch.audit` logger.
    enabled : bool
        When False every request is rejected as unauthorized.
    """

    def __init__(
        self,
        gate: AuthenticationGate,
        executor: QueryExecutor,
        parser: Optional[AssumptionParser] = None,
        audit: Optional[AuditRecorder] = None,
        enabled: bool = True,
    ) -> None:
        self._gate = gate
        self._executor = executor
        self._parser = parser or AssumptionParser()
        self._audit = audit or AuditRecorder()
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def handle_assumption(
        self,
        address: str,
        credential: Optional[str],
        raw_body: RawBody,
        request_id: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> ServiceResponse:
        """
        Authenticate the caller, validate the assumption, evaluate it, respond.

        Parameters
        ----------
        address : str
            Caller's network address as resolved by the HTTP shell.
        credential : str, optional
            Value of the X-API-Key header.
        raw_body : bytes | str | Mapping | None
            Undecoded (or already decoded) request body.
        request_id : str, optional
            Correlation id; generated when absent.
        timeout_seconds : float, optional
            Bound on the row-store call, overriding the executor default.
        """
        request_id = request_id or new_request_id()

        try:
            if not self._enabled:
                raise Unauthorized("service disabled")
            label = self._gate.authenticate(address, credential)

            payload = decode_body(raw_body)
            suspicious = find_suspicious_values(payload)
            if suspicious:
                self._audit.suspicious_input(request_id, address, suspicious)
            assumption = self._parser.parse(payload)

            outcome = await self._executor.execute(assumption, timeout_seconds=timeout_seconds)
        except asyncio.CancelledError as exc:
            self._audit.internal_error(request_id, address, exc)
            raise
        except Unauthorized as exc:
            self._audit.authentication_failed(request_id, address, exc.reason, credential)
            return ServiceResponse(401, dict(UNAUTHORIZED_BODY), request_id)
        except ValidationError as exc:
            self._audit.validation_failed(request_id, address, str(exc))
            return ServiceResponse(400, {"error": str(exc)}, request_id)
        except Exception as exc:  # noqa: BLE001 - boundary: every fault becomes a generic 500
            log.exception("Assumption request failed", extra={"request_id": request_id})
            self._audit.internal_error(request_id, address, exc)
            return ServiceResponse(500, dict(INTERNAL_ERROR_BODY), request_id)

        self._audit.request_succeeded(
            request_id, address, credential or "", label, assumption, outcome
        )
        return ServiceResponse(200, outcome.to_response(), request_id)


def build_service(
    settings: Settings,
    row_store: RowStore,
    allow_list: Optional[AllowList] = None,
    registry: Optional[OperatorRegistry] = None,
) -> AssumptionService:
    """Wire the pipeline from settings and an opened row store."""
    registry = registry or default_registry()
    allow_list = allow_list if allow_list is not None else load_allow_list(settings)
    if settings.enabled and not len(allow_list):
        log.warning("ShopWatch is enabled but the allow-list is empty; every caller is rejected")
    return AssumptionService(
        gate=AuthenticationGate(allow_list),
        executor=QueryExecutor(
            row_store, registry=registry, timeout_seconds=settings.query_timeout_seconds
        ),
        parser=AssumptionParser(registry),
        enabled=settings.enabled,
    )


__all__ = [
    "build_service",
    "RawBody",
    "ServiceResponse",
    "AssumptionService",
    "decode_body",
    "new_request_id",
]
