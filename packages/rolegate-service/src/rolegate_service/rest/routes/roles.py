"""Role assignment and profile endpoints.

Writes are admin-only here, independently of whatever the client checked.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, HTTPException

from rolegate.capabilities import Capability
from rolegate_service.auth.deps import CurrentUserDep, denial_detail, require_capability
from rolegate_service.auth.models import CurrentUser
from rolegate_service.db.deps import RolesRepoDep, SessionDep, UsersRepoDep
from rolegate_service.rest.schemas import ProfileResponse, RoleResponse, RoleUpdateRequest

router = APIRouter()

log = structlog.get_logger(__name__)

AdminDep = Annotated[CurrentUser, require_capability(Capability.MANAGE_USERS, "manage users")]
RoleWriterDep = Annotated[
    CurrentUser, require_capability(Capability.MANAGE_USERS, "change user roles")
]


@router.get("/roles/{user_id}", response_model=RoleResponse)
async def get_role(user_id: UUID, current_user: CurrentUserDep, roles: RolesRepoDep) -> RoleResponse:
    """Keyed read. ``role`` is null when the user has no row (default role)."""
    if user_id != current_user.user_id and not current_user.capabilities.can_manage_users:
        raise HTTPException(
            status_code=403,
            detail=denial_detail(current_user, Capability.MANAGE_USERS, "read other users' roles"),
        )
    return RoleResponse(user_id=str(user_id), role=await roles.get_role(user_id))


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(_admin: AdminDep, roles: RolesRepoDep) -> list[RoleResponse]:
    rows = await roles.list_roles()
    return [RoleResponse(user_id=str(r.user_id), role=r.role) for r in rows]


@router.put("/roles/{user_id}", response_model=RoleResponse)
async def set_role(
    user_id: UUID,
    request: RoleUpdateRequest,
    admin: RoleWriterDep,
    users: UsersRepoDep,
    roles: RolesRepoDep,
    session: SessionDep,
) -> RoleResponse:
    if not await users.get_user(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    await roles.set_role(user_id, request.role)
    await session.commit()
    log.info(
        "role_updated",
        user_id=str(user_id),
        role=request.role.value,
        by=str(admin.user_id),
    )
    return RoleResponse(user_id=str(user_id), role=request.role.value)


@router.get("/profiles", response_model=list[ProfileResponse])
async def list_profiles(_admin: AdminDep, users: UsersRepoDep) -> list[ProfileResponse]:
    profiles = await users.list_profiles()
    return [
        ProfileResponse(id=str(p.id), email=p.email, created_at=p.created_at) for p in profiles
    ]
