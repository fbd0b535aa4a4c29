"""JWT token creation and verification.

Tokens carry identity only. The role is looked up from the database on every
request so that a role change is enforced server-side immediately.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

from rolegate_service.settings import settings


def _now_utc() -> datetime:
    return datetime.now(UTC)


def _encode(payload: dict) -> str:
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(
    user_id: UUID,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    now = _now_utc()
    return _encode(
        {
            "sub": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + expires_delta,
            "type": "access",
        }
    )


def create_refresh_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT refresh token."""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    now = _now_utc()
    return _encode(
        {
            "sub": str(user_id),
            "iat": now,
            "exp": now + expires_delta,
            "type": "refresh",
        }
    )


def create_token_pair(user_id: UUID, email: str) -> tuple[str, str]:
    return create_access_token(user_id, email), create_refresh_token(user_id)


@dataclass(frozen=True)
class TokenClaims:
    user_id: UUID
    email: str


def decode_token(token: str, expected_type: str) -> TokenClaims:
    """Verify *token* and return its claims.

    Raises jwt.PyJWTError for bad signatures, expiry, a wrong token type or
    a malformed subject.
    """
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Not an {expected_type} token")
    try:
        user_id = UUID(payload["sub"])
    except (KeyError, ValueError) as exc:
        raise jwt.InvalidTokenError("Malformed token payload") from exc
    return TokenClaims(user_id=user_id, email=payload.get("email", ""))
