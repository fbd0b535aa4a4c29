"""Repository for role assignments."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.roles import Role
from rolegate_service.db.models import UserRoleModel


class RolesRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_role(self, user_id: UUID) -> str | None:
        """Stored role value, or None when the user has no row."""
        row = await self._session.get(UserRoleModel, user_id)
        return row.role if row else None

    async def list_roles(self) -> list[UserRoleModel]:
        result = await self._session.execute(select(UserRoleModel))
        return list(result.scalars().all())

    async def set_role(self, user_id: UUID, role: Role) -> UserRoleModel:
        """Insert or update the single role row of *user_id*."""
        row = await self._session.get(UserRoleModel, user_id)
        if row is None:
            row = UserRoleModel(user_id=user_id, role=role.value)
            self._session.add(row)
        else:
            row.role = role.value
        await self._session.flush()
        return row
