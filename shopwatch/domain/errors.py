"""
Error taxonomy for ShopWatch.

Every failure raised by the pipeline derives from ShopWatchError. The service
layer translates the three caller-facing families into HTTP statuses:

- ValidationError  -> 400, message describes the violated rule
- Unauthorized     -> 401, generic message; `reason` goes to the audit sink only
- InternalError    -> 500, generic message; detail goes to the error log only
"""

from __future__ import annotations


class ShopWatchError(Exception):
    """Base class for all ShopWatch errors."""


class ConfigurationError(ShopWatchError):
    """Raised at startup when configuration cannot be loaded or is invalid."""


class ValidationError(ShopWatchError):
    """Malformed payload, bad identifier, bad operator or malformed filter."""


class InvalidIdentifier(ValidationError):
    """An identifier failed the whitelist or keyword check."""


class UnknownOperator(ValidationError):
    """An operator token is not bound in the registry."""


class Unauthorized(ShopWatchError):
    """
    Caller could not be authenticated.

    `reason` is intended for the audit trail and is never returned to the caller.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidCredentialFormat(ShopWatchError):
    """A credential is not a 64 character hexadecimal string."""


class InternalError(ShopWatchError):
    """Row-store failure, timeout or unexpected fault."""


__all__ = [
    "ShopWatchError",
    "ConfigurationError",
    "ValidationError",
    "InvalidIdentifier",
    "UnknownOperator",
    "Unauthorized",
    "InvalidCredentialFormat",
    "InternalError",
]
