"""Service test fixtures with in-memory fake repos."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rolegate.roles import Role
from rolegate_service.auth.jwt import create_access_token
from rolegate_service.auth.passwords import hash_password
from rolegate_service.db.deps import (
    get_projects_repo,
    get_roles_repo,
    get_session,
    get_users_repo,
)
from rolegate_service.rest.routes.auth import router as auth_router
from rolegate_service.rest.routes.health import router as health_router
from rolegate_service.rest.routes.projects import router as projects_router
from rolegate_service.rest.routes.roles import router as roles_router


class FakeUsersRepo:
    def __init__(self):
        self._users: dict[uuid.UUID, SimpleNamespace] = {}

    def add(self, email: str, password: str, display_name: str | None = None):
        user = SimpleNamespace(
            id=uuid.uuid4(),
            email=email,
            password_hash=hash_password(password),
            display_name=display_name,
            created_at=datetime.now(UTC),
        )
        self._users[user.id] = user
        return user

    async def create_user(self, email: str, password: str, display_name: str | None = None):
        return self.add(email, password, display_name)

    async def get_user(self, user_id):
        return self._users.get(user_id)

    async def get_user_by_email(self, email: str):
        return next((u for u in self._users.values() if u.email == email), None)

    async def list_profiles(self):
        return sorted(self._users.values(), key=lambda u: u.created_at)


class FakeRolesRepo:
    def __init__(self):
        self.rows: dict[uuid.UUID, str] = {}

    async def get_role(self, user_id):
        return self.rows.get(user_id)

    async def list_roles(self):
        return [SimpleNamespace(user_id=k, role=v) for k, v in self.rows.items()]

    async def set_role(self, user_id, role: Role):
        self.rows[user_id] = role.value
        return SimpleNamespace(user_id=user_id, role=role.value)


class FakeProjectsRepo:
    def __init__(self):
        self.projects: dict[uuid.UUID, SimpleNamespace] = {}

    async def create(self, **kwargs):
        now = datetime.now(UTC)
        project = SimpleNamespace(id=uuid.uuid4(), created_at=now, updated_at=now, **kwargs)
        self.projects[project.id] = project
        return project

    async def get(self, project_id):
        return self.projects.get(project_id)

    async def list(self):
        return sorted(self.projects.values(), key=lambda p: p.updated_at, reverse=True)

    async def update_code(self, project, code: str):
        project.code = code
        project.updated_at = datetime.now(UTC)
        return project

    async def delete(self, project):
        self.projects.pop(project.id, None)


class Harness:
    """Test client plus direct access to the fake repos behind it."""

    def __init__(self):
        self.users = FakeUsersRepo()
        self.roles = FakeRolesRepo()
        self.projects = FakeProjectsRepo()
        self.session = AsyncMock()

        app = FastAPI(title="Rolegate API (test)")
        app.include_router(health_router, tags=["health"])
        app.include_router(auth_router, prefix="/api/v1", tags=["auth"])
        app.include_router(roles_router, prefix="/api/v1", tags=["roles"])
        app.include_router(projects_router, prefix="/api/v1", tags=["projects"])

        app.dependency_overrides[get_session] = lambda: self.session
        app.dependency_overrides[get_users_repo] = lambda: self.users
        app.dependency_overrides[get_roles_repo] = lambda: self.roles
        app.dependency_overrides[get_projects_repo] = lambda: self.projects

        self.client = TestClient(app)

    def add_user(self, email: str, password: str = "secret123", role: Role | None = None):
        user = self.users.add(email, password)
        if role is not None:
            self.roles.rows[user.id] = role.value
        return user

    def headers_for(self, user) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def harness() -> Harness:
    return Harness()


@pytest.fixture
def client(harness: Harness) -> TestClient:
    return harness.client
