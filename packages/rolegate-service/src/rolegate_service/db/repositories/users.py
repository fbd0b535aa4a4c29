"""Repository for accounts and profiles."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate_service.auth.passwords import hash_password
from rolegate_service.db.models import UserModel


class UsersRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_user(self, email: str, password: str, display_name: str | None = None) -> UserModel:
        """Create a new user with a bcrypt-hashed password. No role row is written."""
        user = UserModel(
            email=email,
            password_hash=hash_password(password),
            display_name=display_name,
        )
        self._session.add(user)
        await self._session.flush()
        await self._session.refresh(user)
        return user

    async def get_user(self, user_id: UUID) -> UserModel | None:
        return await self._session.get(UserModel, user_id)

    async def get_user_by_email(self, email: str) -> UserModel | None:
        result = await self._session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalars().first()

    async def list_profiles(self) -> list[UserModel]:
        result = await self._session.execute(select(UserModel).order_by(UserModel.created_at))
        return list(result.scalars().all())
