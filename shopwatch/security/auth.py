"""
Two-factor caller authentication: source address plus credential.

The gate looks up the allow-list entry for the caller's address and compares
the presented credential with that entry's credential. A malformed credential
and a wrong credential surface identically to the caller.
"""

from __future__ import annotations

from typing import Optional

from shopwatch.domain.errors import InvalidCredentialFormat, Unauthorized
from shopwatch.domain.models import AllowList, AllowListEntry
from shopwatch.security import credentials

# Compared against when no entry matches, so both failure paths pay for one
# constant-time comparison.
_DUMMY_CREDENTIAL = "0" * credentials.CREDENTIAL_LENGTH


class AuthenticationGate:
    """
    Authorize callers against an immutable AllowList snapshot.

    Parameters
    ----------
    allow_list : AllowList
        Entries loaded once at startup; never mutated afterwards.
    """

    def __init__(self, allow_list: AllowList) -> None:
        self._allow_list = allow_list

    @property
    def allow_list(self) -> AllowList:
        return self._allow_list

    def authenticate(self, address: str, credential: Optional[str]) -> str:
        """
        Authenticate a caller and return the matching entry's label.

        Raises
        ------
        Unauthorized
            With reason "address not allowed", "missing credential" or
            "invalid credential".
        """
        entry: Optional[AllowListEntry] = self._allow_list.find_entry(address)

        if not credential:
            raise Unauthorized("address not allowed" if entry is None else "missing credential")

        expected = entry.credential if entry is not None else _DUMMY_CREDENTIAL
        try:
            credential_ok = credentials.validate(credential, expected)
        except InvalidCredentialFormat:
            credential_ok = False

        if entry is None:
            raise Unauthorized("address not allowed")
        if not credential_ok:
            raise Unauthorized("invalid credential")
        return entry.label


__all__ = ["AuthenticationGate"]
