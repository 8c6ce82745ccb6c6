"""
Audit trail for assumption requests.

Every request produces exactly one outcome record (succeeded, authentication
failed, validation failed or internal error), plus an optional suspicious-input
record. Records are written to the `shopwatch.audit` logger with structured
`extra` fields; the raw credential never leaves this module, only its redacted
prefix and suffix.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Dict, List, Optional

from shopwatch.domain.models import Assumption, AssumptionOutcome
from shopwatch.security.credentials import redact
from shopwatch.utils.logging import AUDIT_LOGGER_NAME, get_logger


class AuditEvent(str, enum.Enum):
    REQUEST_SUCCEEDED = "request_succeeded"
    AUTHENTICATION_FAILED = "authentication_failed"
    VALIDATION_FAILED = "validation_failed"
    INTERNAL_ERROR = "internal_error"
    SUSPICIOUS_INPUT = "suspicious_input"


class AuditRecorder:
    """
    Structured audit logging of request outcomes.

    Parameters
    ----------
    logger : logging.Logger, optional
        Sink logger. Defaults to the `shopwatch.audit` logger, which
        `start_audit_listener` routes through a non-blocking queue.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or get_logger(AUDIT_LOGGER_NAME)

    def _emit(self, level: int, event: AuditEvent, message: str, context: Dict[str, Any]) -> None:
        self._logger.log(level, message, extra={"event": event.value, **context})

    def request_succeeded(
        self,
        request_id: str,
        client_ip: str,
        credential: str,
        label: str,
        assumption: Assumption,
        outcome: AssumptionOutcome,
    ) -> None:
        self._emit(
            logging.INFO,
            AuditEvent.REQUEST_SUCCEEDED,
            f"Assumption checked: {assumption.field_path} {assumption.operator} "
            f"[match={str(outcome.matched).lower()}, time={outcome.elapsed_ms:.2f}ms]",
            {
                "request_id": request_id,
                "client_ip": client_ip,
                "caller": label,
                "api_key_partial": redact(credential),
                "table": assumption.table,
                "field": assumption.field,
                "operator": assumption.operator,
                "where_fields": list(assumption.filter),
                "matched": outcome.matched,
                "matched_rows": outcome.row_count,
                "query_time_ms": round(outcome.elapsed_ms, 3),
            },
        )

    def authentication_failed(
        self, request_id: str, client_ip: str, reason: str, credential: Optional[str] = None
    ) -> None:
        self._emit(
            logging.WARNING,
            AuditEvent.AUTHENTICATION_FAILED,
            f"Authentication failed: {reason} (IP: {client_ip})",
            {
                "request_id": request_id,
                "client_ip": client_ip,
                "reason": reason,
                "api_key_partial": redact(credential) if credential else None,
            },
        )

    def validation_failed(self, request_id: str, client_ip: str, error: str) -> None:
        self._emit(
            logging.WARNING,
            AuditEvent.VALIDATION_FAILED,
            f"Validation error: {error}",
            {"request_id": request_id, "client_ip": client_ip, "error": error},
        )

    def internal_error(self, request_id: str, client_ip: str, exc: BaseException) -> None:
        cause = exc.__cause__ or exc
        self._emit(
            logging.ERROR,
            AuditEvent.INTERNAL_ERROR,
            f"Internal error: {exc}",
            {
                "request_id": request_id,
                "client_ip": client_ip,
                "exception": type(cause).__name__,
                "error": str(cause),
            },
        )

    def suspicious_input(self, request_id: str, client_ip: str, values: List[str]) -> None:
        self._emit(
            logging.ERROR,
            AuditEvent.SUSPICIOUS_INPUT,
            f"SECURITY: possible SQL injection attempt from IP: {client_ip}",
            {
                "request_id": request_id,
                "client_ip": client_ip,
                "suspicious_input": values,
                "severity": "SECURITY",
            },
        )


__all__ = ["AuditEvent", "AuditRecorder"]
