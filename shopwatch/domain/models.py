"""
Domain models for ShopWatch.

AllowListEntry/AllowList are configuration-facing and validated by pydantic when
the process starts. Assumption and AssumptionOutcome are per-request value
objects created by the parser and the query executor respectively.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic_core import to_jsonable_python

from shopwatch.security import addresses, credentials

# Scalars accepted as expected values and filter values.
SCALAR_TYPES = (str, int, float, bool, type(None))


class AllowListEntry(BaseModel):
    """
    A configured (address-or-CIDR, credential, label) triple authorizing a caller.
    """

    address: str = Field(..., description="IPv4/IPv6 literal or literal/prefix.")
    credential: str = Field(..., repr=False, description="64 hexadecimal characters.")
    label: str = Field("", description="Human-readable description of the caller.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "forbid",
    }

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        value = value.strip()
        if not addresses.is_valid_address_spec(value):
            raise ValueError(
                f"Invalid address '{value}': expected an IP literal or literal/prefix "
                "with prefix in [0, 32] for IPv4 or [0, 128] for IPv6"
            )
        return value

    @field_validator("credential")
    @classmethod
    def _check_credential(cls, value: str) -> str:
        if not credentials.is_valid_format(value):
            raise ValueError("Credential must be 64 hexadecimal characters")
        return value


class AllowList(BaseModel):
    """Immutable snapshot of allow-list entries, loaded once at startup."""

    entries: Tuple[AllowListEntry, ...] = ()

    model_config = {"frozen": True}

    def __len__(self) -> int:
        return len(self.entries)

    def find_entry(self, address: str) -> Optional[AllowListEntry]:
        """
        Return the first entry whose address matches.

        Every entry is evaluated so the scan cost does not depend on the
        position of the match.
        """
        found: Optional[AllowListEntry] = None
        for entry in self.entries:
            if addresses.address_matches(address, entry.address) and found is None:
                found = entry
        return found


@dataclass(frozen=True)
class Assumption:
    """
    The caller's declared expectation about one field of one filtered row.
    """

    table: str
    field: str
    expected_value: Any
    operator: str = "=="
    filter: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "filter", MappingProxyType(dict(self.filter)))

    @property
    def field_path(self) -> str:
        return f"{self.table}.{self.field}"


@dataclass(frozen=True)
class AssumptionOutcome:
    """
    Result of evaluating an assumption against the row store.

    `actual_value` and `expected_value` are meaningful only when `row_found`.
    """

    matched: bool
    elapsed_ms: float
    row_count: int
    actual_value: Any = None
    expected_value: Any = None
    row_found: bool = False

    def __post_init__(self) -> None:
        if self.elapsed_ms < 0:
            raise ValueError("elapsed_ms cannot be negative")
        if self.row_count < 0:
            raise ValueError("row_count cannot be negative")
        if not self.row_found and (self.actual_value is not None or self.expected_value is not None):
            raise ValueError("actual/expected values require a fetched row")

    @classmethod
    def no_row(cls, elapsed_ms: float) -> "AssumptionOutcome":
        return cls(matched=False, elapsed_ms=elapsed_ms, row_count=0)

    def to_response(self) -> Dict[str, Any]:
        """Render the HTTP 200 body."""
        body: Dict[str, Any] = {
            "assumption": self.matched,
            "query_time_ms": round(self.elapsed_ms, 3),
            "matched_rows": self.row_count,
        }
        if self.row_found:
            body["actual_value"] = to_jsonable_python(self.actual_value)
            body["expected_value"] = to_jsonable_python(self.expected_value)
        return body


__all__ = [
    "SCALAR_TYPES",
    "AllowListEntry",
    "AllowList",
    "Assumption",
    "AssumptionOutcome",
]
