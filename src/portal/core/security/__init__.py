"""Security utilities.

Re-exports all security-related functions for convenience.
"""

from src.portal.core.security.crypto import (
    DUMMY_PASSWORD_HASH,
    create_access_token,
    decode_token,
    generate_temporary_secret,
    hash_password,
    verify_password,
)

__all__ = [
    "DUMMY_PASSWORD_HASH",
    "create_access_token",
    "decode_token",
    "generate_temporary_secret",
    "hash_password",
    "verify_password",
]
