"""
Utilities package for ShopWatch.

Shared helpers for logging and other cross-cutting concerns.
"""

from shopwatch.utils.logging import (
    AUDIT_LOGGER_NAME,
    configure_logging,
    get_logger,
    start_audit_listener,
    stop_audit_listener,
)

__all__ = [
    "AUDIT_LOGGER_NAME",
    "configure_logging",
    "get_logger",
    "start_audit_listener",
    "stop_audit_listener",
]
