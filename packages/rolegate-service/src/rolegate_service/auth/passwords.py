"""Password hashing and verification using bcrypt."""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes
_MAX_BYTES = 72

# Verified against when the email is unknown so both login failures cost the same.
_DUMMY_HASH = bcrypt.hashpw(b"rolegate-dummy-password", bcrypt.gensalt()).decode("utf-8")


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt. Returns a utf-8 string."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str | None) -> bool:
    """Return True if password matches the stored bcrypt hash.

    A missing hash is checked against a dummy hash and always fails.
    """
    matched = bcrypt.checkpw(_encode(password), (hashed or _DUMMY_HASH).encode("utf-8"))
    return matched and hashed is not None
