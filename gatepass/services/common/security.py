# gatepass/services/common/security.py
"""
Password hashing for the bundled identity provider.
"""
from __future__ import annotations

import hashlib
from functools import lru_cache

from passlib.context import CryptContext

from gatepass.config.settings import settings

from .errors import ValidationError


@lru_cache(maxsize=None)
def _pwd_context(rounds: int) -> CryptContext:
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=rounds,
    )


def _prepare_password_for_bcrypt(password: str) -> str:
    """
    Prepare a password for bcrypt by handling the 72-byte limit.

    Passwords that might exceed the limit are replaced by their SHA-256
    hex digest, which is well under it.
    """
    if len(password.encode('utf-8')) > 71:
        return hashlib.sha256(password.encode('utf-8')).hexdigest()
    return password


def hash_password(password: str, *, rounds: int | None = None) -> str:
    """
    Hash a plaintext password using bcrypt.

    Raises:
        ValidationError: If password is empty

    Example:
        >>> hashed = hash_password("secure_password123")
    """
    if not password:
        raise ValidationError("Password cannot be empty", field="password")

    context = _pwd_context(rounds or settings.PASSWORD_BCRYPT_ROUNDS)
    return context.hash(_prepare_password_for_bcrypt(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a stored hash.

    Returns:
        True if password matches, False otherwise
    """
    if not plain_password or not hashed_password:
        return False

    context = _pwd_context(settings.PASSWORD_BCRYPT_ROUNDS)
    try:
        return context.verify(_prepare_password_for_bcrypt(plain_password), hashed_password)
    except ValueError:
        # Malformed stored hash
        return False
