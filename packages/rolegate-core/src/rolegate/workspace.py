"""Project actions, each guarded by a capability check before it touches the store."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from rolegate.capabilities import Capability
from rolegate.enforcement import PermissionEnforcer
from rolegate.errors import PermissionDenied, StoreError
from rolegate.models import Project
from rolegate.providers.base import ProjectStore
from rolegate.session import SessionStore
from rolegate.validation import validate_project_name

log = structlog.get_logger(__name__)

T = TypeVar("T")

STARTER_CODE = """// Welcome to {name}

const App = () => {{
  return (
    <div>
      <h1>Hello, World!</h1>
    </div>
  );
}};

export default App;"""


class WorkspaceActions:
    def __init__(
        self,
        sessions: SessionStore,
        enforcer: PermissionEnforcer,
        projects: ProjectStore,
    ) -> None:
        self._sessions = sessions
        self._enforcer = enforcer
        self._projects = projects

    async def list_projects(self) -> list[Project]:
        """Projects, most recently updated first."""
        projects = await self._guarded(Capability.VIEW, "view projects", self._projects.list_projects)
        return sorted(projects, key=_updated_key, reverse=True)

    async def open_project(self, project_id: str) -> Project:
        project = await self._guarded(
            Capability.VIEW, "view projects", lambda: self._projects.get_project(project_id)
        )
        if project is None:
            raise StoreError(f"Project {project_id} not found")
        return project

    async def create_project(self, name: str, description: str | None = None) -> Project:
        self._enforcer.check(Capability.EDIT, "create projects")
        name = validate_project_name(name)
        description = (description or "").strip() or None
        identity = self._sessions.session.identity
        project = await self._call(
            lambda: self._projects.insert_project(
                name=name,
                description=description,
                code=STARTER_CODE.format(name=name),
                owner_id=identity.id if identity else None,
            )
        )
        log.info("project_created", project_id=project.id)
        return project

    async def save_code(self, project_id: str, code: str) -> Project:
        project = await self._guarded(
            Capability.EDIT, "edit code", lambda: self._projects.update_code(project_id, code)
        )
        log.info("project_code_saved", project_id=project_id)
        return project

    async def delete_project(self, project_id: str) -> None:
        await self._guarded(
            Capability.DELETE, "delete projects", lambda: self._projects.delete_project(project_id)
        )
        log.info("project_deleted", project_id=project_id)

    async def _guarded(
        self, capability: Capability, action: str, operation: Callable[[], Awaitable[T]]
    ) -> T:
        self._enforcer.check(capability, action)
        return await self._call(operation)

    async def _call(self, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await operation()
        except PermissionDenied as exc:
            # the service refused even though the local check passed
            self._enforcer.report(exc)
            raise


def _updated_key(project: Project) -> float:
    stamp = project.updated_at or project.created_at
    return stamp.timestamp() if stamp else 0.0
