"""
Whitelist validation for table, field and filter identifiers.

Identifiers are the only user-supplied strings that end up in query text (quoted),
so they are restricted to `^[A-Za-z_][A-Za-z0-9_]*$` and may not spell a reserved
SQL keyword. Values are never validated here; they travel as bound parameters.

`detect_injection_patterns` is a secondary, non-blocking signal used to feed the
audit sink with suspicious raw values.
"""

from __future__ import annotations

import re
from typing import Any, FrozenSet, Iterator, List, Tuple

from shopwatch.domain.errors import InvalidIdentifier

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

SQL_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "SELECT",
        "INSERT",
        "UPDATE",
        "DELETE",
        "DROP",
        "CREATE",
        "ALTER",
        "TRUNCATE",
        "UNION",
        "JOIN",
        "WHERE",
        "FROM",
        "TABLE",
        "DATABASE",
        "EXEC",
        "EXECUTE",
        "DECLARE",
        "CAST",
        "CONVERT",
        "SCRIPT",
        "JAVASCRIPT",
        "EVAL",
        "EXPRESSION",
        "COMPILE",
    }
)

_INJECTION_PATTERNS: Tuple[re.Pattern[str], ...] = (
    re.compile(r";\s*(DROP|DELETE|TRUNCATE|ALTER)", re.IGNORECASE),
    re.compile(r"UNION\s+SELECT", re.IGNORECASE),
    re.compile(r"/\*.*\*/", re.DOTALL),
    re.compile(r"--\s*$"),
    re.compile(r"#\s*$"),
    re.compile(r"\bOR\b\s+\d+\s*=\s*\d+", re.IGNORECASE),
    re.compile(r"'.*\bOR\b.*'", re.IGNORECASE),
)


def _describe(role: str) -> str:
    return role[:1].upper() + role[1:]


def validate_identifier(identifier: Any, role: str = "identifier") -> str:
    """
    Validate a single identifier and return it unchanged.

    Parameters
    ----------
    identifier : Any
        Candidate table, field or filter key.
    role : str
        Human-readable role, used only to build the error message.

    Raises
    ------
    InvalidIdentifier
        If the identifier is empty, malformed or a reserved keyword.
    """
    if not isinstance(identifier, str):
        raise InvalidIdentifier(f"{_describe(role)} must be a string")
    if identifier == "":
        raise InvalidIdentifier(f"{_describe(role)} cannot be empty")
    if not IDENTIFIER_PATTERN.fullmatch(identifier):
        raise InvalidIdentifier(
            f'Invalid {role} format: "{identifier}". '
            "Only alphanumeric characters and underscores allowed."
        )
    if identifier.upper() in SQL_KEYWORDS:
        raise InvalidIdentifier(f'SQL keyword not allowed as {role}: "{identifier}"')
    return identifier


def detect_injection_patterns(value: str) -> bool:
    """Return True if a raw string value looks like an injection attempt."""
    return any(pattern.search(value) for pattern in _INJECTION_PATTERNS)


def _walk_strings(obj: Any) -> Iterator[str]:
    if isinstance(obj, str):
        yield obj
    elif isinstance(obj, dict):
        for key, value in obj.items():
            if isinstance(key, str):
                yield key
            yield from _walk_strings(value)
    elif isinstance(obj, (list, tuple)):
        for item in obj:
            yield from _walk_strings(item)


def find_suspicious_values(obj: Any, max_length: int = 100) -> List[str]:
    """
    Collect suspicious strings anywhere in a decoded payload.

    Results are truncated to `max_length` characters so they are safe to log.
    """
    return [value[:max_length] for value in _walk_strings(obj) if detect_injection_patterns(value)]


__all__ = [
    "IDENTIFIER_PATTERN",
    "SQL_KEYWORDS",
    "validate_identifier",
    "detect_injection_patterns",
    "find_suspicious_values",
]
