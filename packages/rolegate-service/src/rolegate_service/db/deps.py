"""FastAPI dependency injection for database sessions and repositories."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate_service.db.engine import get_session_factory
from rolegate_service.db.repositories.projects import ProjectsRepo
from rolegate_service.db.repositories.roles import RolesRepo
from rolegate_service.db.repositories.users import UsersRepo


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an async DB session, auto-closing on exit."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_users_repo(session: SessionDep) -> UsersRepo:
    return UsersRepo(session)


def get_roles_repo(session: SessionDep) -> RolesRepo:
    return RolesRepo(session)


def get_projects_repo(session: SessionDep) -> ProjectsRepo:
    return ProjectsRepo(session)


UsersRepoDep = Annotated[UsersRepo, Depends(get_users_repo)]
RolesRepoDep = Annotated[RolesRepo, Depends(get_roles_repo)]
ProjectsRepoDep = Annotated[ProjectsRepo, Depends(get_projects_repo)]
