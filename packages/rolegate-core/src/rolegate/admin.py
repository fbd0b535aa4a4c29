"""Administration of other users' role assignments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog

from rolegate.capabilities import Capability
from rolegate.enforcement import PermissionEnforcer
from rolegate.errors import PermissionDenied, StoreError, ValidationError
from rolegate.providers.base import ProfileStore, RoleAssignmentStore
from rolegate.roles import Role, RoleAssignment, parse_role

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UserWithRole:
    user_id: str
    email: str
    role: Role
    created_at: datetime | None


class RoleAdministration:
    """List users with their roles and reassign roles.

    The client-side admin check is a convenience for the UI; the role store
    itself must refuse writes from non-admins.
    """

    def __init__(
        self,
        enforcer: PermissionEnforcer,
        profiles: ProfileStore,
        roles: RoleAssignmentStore,
    ) -> None:
        self._enforcer = enforcer
        self._profiles = profiles
        self._roles = roles

    async def list_users_with_roles(self, search: str | None = None) -> list[UserWithRole]:
        """Join every profile with its role row; users without a row are ``user``."""
        self._enforcer.check(Capability.MANAGE_USERS, "manage users")

        profiles = await self._profiles.list_profiles()
        role_rows = await self._roles.list_all_roles()

        role_map: dict[str, Role] = {}
        for user_id, raw in role_rows:
            try:
                role_map[user_id] = parse_role(raw)
            except StoreError:
                log.warning("malformed_role_row", user_id=user_id, value=raw)

        users = [
            UserWithRole(
                user_id=p.id,
                email=p.email or "Unknown",
                role=role_map.get(p.id, Role.default()),
                created_at=p.created_at,
            )
            for p in profiles
        ]
        if search:
            needle = search.lower()
            users = [u for u in users if needle in u.email.lower()]
        log.debug("users_listed", count=len(users))
        return users

    async def set_role(self, user_id: str, new_role: Role | str) -> RoleAssignment:
        """Assign *new_role* to *user_id*.

        The affected user's open session keeps its old capabilities until it
        resolves its role again.
        """
        self._enforcer.check(Capability.MANAGE_USERS, "change user roles")
        try:
            role = Role(new_role)
        except ValueError:
            raise ValidationError({"role": f"Unknown role: {new_role!r}"}) from None
        try:
            await self._roles.set_role(user_id, str(role))
        except PermissionDenied as exc:
            self._enforcer.report(exc)
            raise
        log.info("role_updated", user_id=user_id, role=str(role))
        return RoleAssignment(user_id=user_id, role=role)
