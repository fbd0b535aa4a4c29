"""In-memory collaborators for development and testing.

One InMemoryBackend plays the part of the hosted auth/database service and
can be shared by several clients, each with its own credential provider.
"""

from __future__ import annotations

import hashlib
import secrets
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from rolegate.errors import AuthError, AuthErrorKind, PermissionDenied, StoreError
from rolegate.models import Identity, Profile, Project
from rolegate.roles import Role, parse_role


def _digest(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


@dataclass
class _UserRecord:
    identity: Identity
    salt: str
    password_digest: str


@dataclass
class InMemoryBackend:
    """Shared state: users, role rows and projects."""

    users: dict[str, _UserRecord] = field(default_factory=dict)
    roles: dict[str, str] = field(default_factory=dict)
    projects: dict[str, Project] = field(default_factory=dict)

    def add_user(
        self,
        email: str,
        password: str,
        display_name: str | None = None,
        role: Role | None = None,
    ) -> Identity:
        """Create a user directly, optionally with an explicit role row."""
        if email.lower() in self.users:
            raise AuthError(AuthErrorKind.ALREADY_REGISTERED)
        identity = Identity(
            id=str(uuid.uuid4()),
            email=email,
            display_name=display_name,
            created_at=datetime.now(UTC),
        )
        salt = secrets.token_hex(8)
        self.users[email.lower()] = _UserRecord(identity, salt, _digest(password, salt))
        if role is not None:
            self.roles[identity.id] = str(role)
        return identity

    def authenticate(self, email: str, password: str) -> Identity:
        record = self.users.get(email.lower())
        if record is None or not secrets.compare_digest(
            record.password_digest, _digest(password, record.salt)
        ):
            raise AuthError(AuthErrorKind.INVALID_CREDENTIALS)
        return record.identity

    def identity_by_id(self, user_id: str) -> Identity | None:
        return next((r.identity for r in self.users.values() if r.identity.id == user_id), None)


class InMemoryCredentialProvider:
    """Credential provider holding this client's signed-in user id."""

    def __init__(self, backend: InMemoryBackend) -> None:
        self._backend = backend
        self._current_user_id: str | None = None

    @property
    def current_user_id(self) -> str | None:
        return self._current_user_id

    async def sign_up(self, email: str, password: str, display_name: str | None) -> Identity:
        return self._backend.add_user(email, password, display_name)

    async def sign_in(self, email: str, password: str) -> Identity:
        identity = self._backend.authenticate(email, password)
        self._current_user_id = identity.id
        return identity

    async def sign_out(self) -> None:
        self._current_user_id = None

    async def restore_session(self) -> Identity | None:
        if self._current_user_id is None:
            return None
        return self._backend.identity_by_id(self._current_user_id)


class InMemoryRoleStore:
    """Role rows, with the store-side admin check on writes.

    ``actor`` returns the user id the store should treat as the caller; when
    given, writes from anyone whose stored role is not admin are refused.
    """

    def __init__(
        self, backend: InMemoryBackend, actor: Callable[[], str | None] | None = None
    ) -> None:
        self._backend = backend
        self._actor = actor

    async def get_role(self, user_id: str) -> str | None:
        return self._backend.roles.get(user_id)

    async def list_all_roles(self) -> list[tuple[str, str]]:
        return list(self._backend.roles.items())

    async def set_role(self, user_id: str, role: str) -> None:
        if self._actor is not None:
            actor_id = self._actor()
            actor_role = parse_role(self._backend.roles.get(actor_id)) if actor_id else None
            if actor_role is not Role.ADMIN:
                raise PermissionDenied(
                    "change user roles",
                    "admin",
                    str(actor_role) if actor_role else None,
                )
        if self._backend.identity_by_id(user_id) is None:
            raise StoreError(f"User {user_id} not found")
        self._backend.roles[user_id] = str(Role(role))


class InMemoryProfileStore:
    def __init__(self, backend: InMemoryBackend) -> None:
        self._backend = backend

    async def list_profiles(self) -> list[Profile]:
        return [
            Profile(id=r.identity.id, email=r.identity.email, created_at=r.identity.created_at)
            for r in self._backend.users.values()
        ]


class InMemoryProjectStore:
    def __init__(self, backend: InMemoryBackend) -> None:
        self._backend = backend

    async def list_projects(self) -> list[Project]:
        return list(self._backend.projects.values())

    async def get_project(self, project_id: str) -> Project | None:
        return self._backend.projects.get(project_id)

    async def insert_project(
        self, name: str, description: str | None, code: str, owner_id: str | None
    ) -> Project:
        now = datetime.now(UTC)
        project = Project(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            code=code,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        self._backend.projects[project.id] = project
        return project

    async def update_code(self, project_id: str, code: str) -> Project:
        project = self._backend.projects.get(project_id)
        if project is None:
            raise StoreError(f"Project {project_id} not found")
        updated = replace(project, code=code, updated_at=datetime.now(UTC))
        self._backend.projects[project_id] = updated
        return updated

    async def delete_project(self, project_id: str) -> None:
        if self._backend.projects.pop(project_id, None) is None:
            raise StoreError(f"Project {project_id} not found")
