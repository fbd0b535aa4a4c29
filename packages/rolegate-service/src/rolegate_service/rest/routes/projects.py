"""Project endpoints, each gated by the same capability the client checks."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Response

from rolegate.capabilities import Capability
from rolegate_service.auth.deps import CurrentUserDep, require_capability
from rolegate_service.auth.models import CurrentUser
from rolegate_service.db.deps import ProjectsRepoDep
from rolegate_service.rest.schemas import (
    ProjectCodeUpdate,
    ProjectCreateRequest,
    ProjectResponse,
)

router = APIRouter()

CreatorDep = Annotated[CurrentUser, require_capability(Capability.EDIT, "create projects")]
EditorDep = Annotated[CurrentUser, require_capability(Capability.EDIT, "edit code")]
DeleterDep = Annotated[CurrentUser, require_capability(Capability.DELETE, "delete projects")]


def _project_to_schema(project) -> ProjectResponse:
    return ProjectResponse(
        id=str(project.id),
        name=project.name,
        description=project.description,
        code=project.code or "",
        owner_id=str(project.owner_id) if project.owner_id else None,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


async def _get_or_404(repo, project_id: UUID):
    project = await repo.get(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.get("/projects", response_model=list[ProjectResponse])
async def list_projects(repo: ProjectsRepoDep, current_user: CurrentUserDep) -> list[ProjectResponse]:
    return [_project_to_schema(p) for p in await repo.list()]


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID, repo: ProjectsRepoDep, current_user: CurrentUserDep
) -> ProjectResponse:
    return _project_to_schema(await _get_or_404(repo, project_id))


@router.post("/projects", response_model=ProjectResponse, status_code=201)
async def create_project(
    request: ProjectCreateRequest, repo: ProjectsRepoDep, current_user: CreatorDep
) -> ProjectResponse:
    project = await repo.create(
        name=request.name,
        description=request.description,
        code=request.code,
        owner_id=current_user.user_id,
    )
    return _project_to_schema(project)


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
async def save_code(
    project_id: UUID,
    request: ProjectCodeUpdate,
    repo: ProjectsRepoDep,
    current_user: EditorDep,
) -> ProjectResponse:
    project = await _get_or_404(repo, project_id)
    return _project_to_schema(await repo.update_code(project, request.code))


@router.delete("/projects/{project_id}", status_code=204)
async def delete_project(
    project_id: UUID, repo: ProjectsRepoDep, current_user: DeleterDep
) -> Response:
    project = await _get_or_404(repo, project_id)
    await repo.delete(project)
    return Response(status_code=204)
