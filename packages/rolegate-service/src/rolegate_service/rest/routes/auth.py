"""Auth endpoints: signup, login, refresh, /me."""

from __future__ import annotations

import jwt
import structlog
from fastapi import APIRouter, HTTPException

from rolegate.roles import Role
from rolegate_service.auth.deps import CurrentUserDep
from rolegate_service.auth.jwt import create_token_pair, decode_token
from rolegate_service.auth.passwords import verify_password
from rolegate_service.db.deps import RolesRepoDep, SessionDep, UsersRepoDep
from rolegate_service.rest.schemas import (
    IdentityResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    SignUpRequest,
    TokenResponse,
)
from rolegate_service.settings import settings

router = APIRouter(prefix="/auth", tags=["auth"])

log = structlog.get_logger(__name__)


def _identity(user) -> IdentityResponse:
    return IdentityResponse(
        id=str(user.id),
        email=user.email,
        display_name=user.display_name,
        created_at=user.created_at,
    )


@router.post("/signup", response_model=IdentityResponse, status_code=201)
async def signup(
    request: SignUpRequest, users: UsersRepoDep, roles: RolesRepoDep, session: SessionDep
) -> IdentityResponse:
    """Create a new account. No token is issued; the client signs in afterwards."""
    existing = await users.get_user_by_email(request.email)
    if existing:
        raise HTTPException(status_code=409, detail="Email already registered")

    user = await users.create_user(
        email=request.email,
        password=request.password,
        display_name=request.display_name,
    )
    bootstrap = settings.bootstrap_admin_email
    if bootstrap and bootstrap.strip().lower() == request.email:
        await roles.set_role(user.id, Role.ADMIN)
        log.info("bootstrap_admin_assigned", user_id=str(user.id))
    await session.commit()

    log.info("user_signed_up", user_id=str(user.id))
    return _identity(user)


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, users: UsersRepoDep) -> LoginResponse:
    """Verify credentials and return JWT tokens plus the identity."""
    user = await users.get_user_by_email(request.email)
    if not verify_password(request.password, user.password_hash if user else None):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    access, refresh = create_token_pair(user.id, user.email)
    return LoginResponse(access_token=access, refresh_token=refresh, user=_identity(user))


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshRequest, users: UsersRepoDep) -> TokenResponse:
    """Exchange a refresh token for a new token pair."""
    try:
        claims = decode_token(request.refresh_token, expected_type="refresh")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    user = await users.get_user(claims.user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    access, refresh = create_token_pair(user.id, user.email)
    return TokenResponse(access_token=access, refresh_token=refresh)


@router.get("/me", response_model=IdentityResponse)
async def me(current_user: CurrentUserDep, users: UsersRepoDep) -> IdentityResponse:
    """Return the identity behind the bearer token."""
    user = await users.get_user(current_user.user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return _identity(user)
