"""Cryptographic utilities - secret hashing, temporary secrets and session tokens."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import argon2
from jose import JWTError, jwt

from src.portal.core.config import get_settings

# Characters guaranteed in every temporary secret so provider password policies accept it
_TEMPORARY_SECRET_SUFFIX_CLASSES = ("ABCDEFGHJKLMNPQRSTUVWXYZ", "23456789", "!#%+-=?@")


def _create_password_hasher() -> argon2.PasswordHasher:
    """Create password hasher with settings from config."""
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


_password_hasher = _create_password_hasher()


def hash_password(password: str) -> str:
    """Hash password using Argon2id."""
    return _password_hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash. Returns False on any error."""
    try:
        _password_hasher.verify(hashed, password)
        return True
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


# Pre-computed hash used to keep sign-in timing constant for unknown emails
DUMMY_PASSWORD_HASH = hash_password("dummy-password-for-timing")


def generate_temporary_secret(num_bytes: int | None = None) -> str:
    """Generate a one-off secret for an administratively provisioned identity.

    The account holder never sees this value; they set their own secret through
    the credential-reset message.
    """
    if num_bytes is None:
        num_bytes = get_settings().temporary_secret_bytes
    suffix = "".join(secrets.choice(chars) for chars in _TEMPORARY_SECRET_SUFFIX_CLASSES)
    return secrets.token_urlsafe(num_bytes) + suffix


def create_access_token(subject: str | UUID, expires_delta: timedelta | None = None) -> str:
    """Create a signed session token for the HTTP surface."""
    settings = get_settings()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate JWT token. Returns None on any error."""
    settings = get_settings()
    try:
        return jwt.decode(  # type: ignore[no-any-return]
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
