"""Security helpers (hashing and verification)."""

from __future__ import annotations

import secrets

import bcrypt
from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"
# hashes written by the old node tooling (bcrypt.hash(password, 10))
_LEGACY_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    """Create a modern Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def is_legacy_hash(stored_hash: str | None) -> bool:
    return (stored_hash or "").startswith(_LEGACY_PREFIXES)


def _verify_legacy(password: str, stored: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
    except ValueError:
        # malformed hash, or a password bcrypt refuses (over 72 bytes)
        return False


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if stored.startswith(_PREFIX):
        try:
            return _ph.verify(stored[len(_PREFIX) :], password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
    if is_legacy_hash(stored):
        return _verify_legacy(password, stored)
    return False


def new_token() -> str:
    return secrets.token_urlsafe(32)
