"""
Caller and input checks: address matching, credential handling, identifier
validation. The authentication gate lives in `shopwatch.security.auth`.
"""

from shopwatch.security import addresses, credentials, identifiers

__all__ = ["addresses", "credentials", "identifiers"]
