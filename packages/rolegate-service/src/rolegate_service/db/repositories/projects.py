"""Repository for projects."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate_service.db.models import ProjectModel


class ProjectsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, **kwargs) -> ProjectModel:
        project = ProjectModel(**kwargs)
        self._session.add(project)
        await self._session.commit()
        await self._session.refresh(project)
        return project

    async def get(self, project_id: UUID) -> ProjectModel | None:
        return await self._session.get(ProjectModel, project_id)

    async def list(self) -> list[ProjectModel]:
        result = await self._session.execute(
            select(ProjectModel).order_by(ProjectModel.updated_at.desc())
        )
        return list(result.scalars().all())

    async def update_code(self, project: ProjectModel, code: str) -> ProjectModel:
        project.code = code
        await self._session.commit()
        await self._session.refresh(project)
        return project

    async def delete(self, project: ProjectModel) -> None:
        await self._session.delete(project)
        await self._session.commit()
