"""
ShopWatch - database state verification for end-to-end test harnesses.

A test driver that has just exercised a shop through its UI asks ShopWatch
whether the resulting database state matches its assumptions:

- Caller authentication by network address and shared credential
- Strict validation of table, field and filter identifiers
- A closed set of comparison operators (equality, ordering, pattern, null checks)
- Single-row, read-only, parametrized lookups bounded by a timeout
- Structured audit trail for every request outcome

The HTTP shell lives in `shopwatch.http.app`; import it explicitly.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from shopwatch.config import Settings, get_settings, load_allow_list
from shopwatch.domain.errors import (
    ConfigurationError,
    InternalError,
    InvalidIdentifier,
    ShopWatchError,
    Unauthorized,
    UnknownOperator,
    ValidationError,
)
from shopwatch.domain.models import AllowList, AllowListEntry, Assumption, AssumptionOutcome
from shopwatch.operators.registry import OperatorRegistry, available_operators, default_registry
from shopwatch.service import AssumptionService, ServiceResponse, build_service
from shopwatch.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    "load_allow_list",
    # Domain
    "AllowList",
    "AllowListEntry",
    "Assumption",
    "AssumptionOutcome",
    # Errors
    "ShopWatchError",
    "ConfigurationError",
    "ValidationError",
    "InvalidIdentifier",
    "UnknownOperator",
    "Unauthorized",
    "InternalError",
    # Operators
    "OperatorRegistry",
    "available_operators",
    "default_registry",
    # Pipeline
    "AssumptionService",
    "ServiceResponse",
    "build_service",
    # Logging
    "configure_logging",
    "get_logger",
]
