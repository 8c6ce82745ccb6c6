"""
Domain package for ShopWatch.

Exports the allow-list, assumption and outcome models plus the error
hierarchy. Keep this package focused on data definitions and validation.
"""

from shopwatch.domain.errors import (
    ConfigurationError,
    InternalError,
    InvalidCredentialFormat,
    InvalidIdentifier,
    ShopWatchError,
    Unauthorized,
    UnknownOperator,
    ValidationError,
)
from shopwatch.domain.models import AllowList, AllowListEntry, Assumption, AssumptionOutcome

__all__ = [
    "AllowList",
    "AllowListEntry",
    "Assumption",
    "AssumptionOutcome",
    "ShopWatchError",
    "ConfigurationError",
    "ValidationError",
    "InvalidIdentifier",
    "UnknownOperator",
    "Unauthorized",
    "InvalidCredentialFormat",
    "InternalError",
]
