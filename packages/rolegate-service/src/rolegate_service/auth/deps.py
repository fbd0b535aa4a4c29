"""FastAPI auth dependencies."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

import jwt
import structlog
from fastapi import Depends, HTTPException, Request

from rolegate.capabilities import REQUIRED_ROLE, Capability
from rolegate.errors import StoreError
from rolegate.roles import Role, parse_role
from rolegate_service.auth.jwt import decode_token
from rolegate_service.auth.models import CurrentUser
from rolegate_service.db.deps import RolesRepoDep
from rolegate_service.db.repositories.roles import RolesRepo

log = structlog.get_logger(__name__)


async def resolve_role(user_id: UUID, roles: RolesRepo) -> Role:
    """Role of *user_id* from the database; no row (or a corrupt one) means ``user``."""
    raw = await roles.get_role(user_id)
    try:
        return parse_role(raw)
    except StoreError:
        log.warning("malformed_role_row", user_id=str(user_id), value=raw)
        return Role.default()


async def get_current_user(request: Request, roles: RolesRepoDep) -> CurrentUser:
    """
    Resolve the current authenticated user from ``Authorization: Bearer <token>``.

    The role is read from the database, never from the token.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authentication required")

    token = auth_header.removeprefix("Bearer ").strip()
    try:
        claims = decode_token(token, expected_type="access")
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid or expired token") from exc

    return CurrentUser(
        user_id=claims.user_id,
        email=claims.email,
        role=await resolve_role(claims.user_id, roles),
    )


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


def denial_detail(current_user: CurrentUser, capability: Capability, action: str) -> dict:
    return {
        "action": action,
        "required_role": REQUIRED_ROLE[capability],
        "current_role": current_user.role.value,
    }


def require_capability(capability: Capability, action: str):
    """Dependency factory mirroring the client-side capability check on the server."""

    async def _check(current_user: CurrentUserDep) -> CurrentUser:
        caps = current_user.capabilities
        allowed = {
            Capability.VIEW: caps.can_view,
            Capability.EDIT: caps.can_edit,
            Capability.DELETE: caps.can_delete,
            Capability.MANAGE_USERS: caps.can_manage_users,
        }[capability]
        if not allowed:
            log.info(
                "permission_denied",
                user_id=str(current_user.user_id),
                role=current_user.role.value,
                action=action,
            )
            raise HTTPException(
                status_code=403, detail=denial_detail(current_user, capability, action)
            )
        return current_user

    return Depends(_check)
