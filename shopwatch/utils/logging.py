"""
Structured logging utilities for ShopWatch.

Centralizes logging configuration for the HTTP service, the CLI and the audit
trail. Standard library logging with a human-readable formatter by default and a
JSON formatter for log pipelines. Fields passed through `extra=` are promoted to
top-level JSON keys; keys that could carry a credential are masked.

The audit logger (`shopwatch.audit`) writes through a QueueHandler so request
handling never blocks on the sink; `start_audit_listener` drains the queue into
the configured handlers on a background thread.

Usage:
    from shopwatch.utils.logging import configure_logging, get_logger

    configure_logging(level="INFO", json_logs=True)
    log = get_logger(__name__)
    log.info("message", extra={"table": "oxorder"})
"""

from __future__ import annotations

import json
import logging
import logging.config
import logging.handlers
import queue
from typing import Any, Dict, Optional

from pydantic_core import to_jsonable_python

AUDIT_LOGGER_NAME = "shopwatch.audit"

_SENSITIVE_KEYS = frozenset({"credential", "api_key", "x_api_key", "password", "db_password"})

# Attributes present on every LogRecord; anything else came in through `extra=`.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}

_audit_listener: Optional[logging.handlers.QueueListener] = None


def _mask(key: str, value: Any) -> Any:
    if key.lower() in _SENSITIVE_KEYS:
        return "***"
    return value


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as JSON string."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    for key, value in record.__dict__.items():
        if key in _RESERVED_ATTRS or key.startswith("_") or key == "extra":
            continue
        payload[key] = _mask(key, value)
    # Legacy nested form: log.info("...", extra={"extra": {...}})
    nested = getattr(record, "extra", None)
    if isinstance(nested, dict):
        payload.update({key: _mask(key, value) for key, value in nested.items()})
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    return json.dumps(payload, default=lambda obj: to_jsonable_python(obj, fallback=str))


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    force: bool = True,
) -> None:
    """
    Configure root logging.

    Parameters
    ----------
    level : str
        Logging level name (e.g., "DEBUG", "INFO", "WARNING").
    json_logs : bool
        Whether to emit logs as JSON. If False, uses a concise human formatter.
    force : bool
        Whether to override existing logging configuration (recommended in CLI apps).
    """
    if not force and logging.getLogger().handlers:
        return
    formatter_name = "json" if json_logs else "console"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {
                    "()": JsonFormatter,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter_name,
                    "level": level,
                }
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
        }
    )


def start_audit_listener(*handlers: logging.Handler) -> logging.handlers.QueueListener:
    """
    Route the audit logger through a queue drained on a background thread.

    Parameters
    ----------
    handlers : logging.Handler
        Sinks for audit records. Defaults to the root logger's handlers.

    Returns
    -------
    QueueListener
        The running listener; stop it with `stop_audit_listener`.
    """
    global _audit_listener
    stop_audit_listener()

    sinks = handlers or tuple(logging.getLogger().handlers)
    audit_queue: "queue.SimpleQueue[logging.LogRecord]" = queue.SimpleQueue()
    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
    audit_logger.addHandler(logging.handlers.QueueHandler(audit_queue))
    audit_logger.propagate = False
    audit_logger.setLevel(logging.INFO)

    _audit_listener = logging.handlers.QueueListener(
        audit_queue, *sinks, respect_handler_level=True
    )
    _audit_listener.start()
    return _audit_listener


def stop_audit_listener() -> None:
    """Flush and stop the audit listener, restoring direct propagation."""
    global _audit_listener
    if _audit_listener is not None:
        _audit_listener.stop()
        _audit_listener = None
    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
    for existing in list(audit_logger.handlers):
        if isinstance(existing, logging.handlers.QueueHandler):
            audit_logger.removeHandler(existing)
    audit_logger.propagate = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the given name. If name is None, returns the root logger.
    """
    return logging.getLogger(name)


__all__ = [
    "AUDIT_LOGGER_NAME",
    "configure_logging",
    "start_audit_listener",
    "stop_audit_listener",
    "get_logger",
    "JsonFormatter",
]
