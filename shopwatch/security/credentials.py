"""
Credential format checking, constant-time comparison and provisioning.

Credentials are 64 character hexadecimal strings (32 random bytes). Comparison
goes through `hmac.compare_digest`, whose running time does not depend on the
position of the first differing byte.
"""

from __future__ import annotations

import hmac
import re
import secrets

from shopwatch.domain.errors import InvalidCredentialFormat

CREDENTIAL_LENGTH = 64
CREDENTIAL_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


def is_valid_format(value: object) -> bool:
    """True if `value` is a 64 character hex string."""
    return isinstance(value, str) and CREDENTIAL_PATTERN.fullmatch(value) is not None


def validate(provided: str, expected: str) -> bool:
    """
    Compare a provided credential with the expected one.

    The format check runs first and fails fast; format errors are not secrets.
    Both values are lower-cased before the timing-safe comparison.

    Raises
    ------
    InvalidCredentialFormat
        If `provided` is not 64 hexadecimal characters.
    """
    if not is_valid_format(provided):
        raise InvalidCredentialFormat(
            f"Invalid credential format. Must be {CREDENTIAL_LENGTH} hexadecimal characters."
        )
    return hmac.compare_digest(
        provided.lower().encode("ascii"),
        expected.lower().encode("ascii"),
    )


def generate() -> str:
    """Generate a fresh credential from a cryptographically secure source."""
    return secrets.token_hex(CREDENTIAL_LENGTH // 2)


def redact(value: str) -> str:
    """Keep only a short prefix and suffix, suitable for audit records."""
    if not isinstance(value, str) or len(value) < 12:
        return "***"
    return f"{value[:8]}...{value[-4:]}"


__all__ = [
    "CREDENTIAL_LENGTH",
    "CREDENTIAL_PATTERN",
    "is_valid_format",
    "validate",
    "generate",
    "redact",
]
