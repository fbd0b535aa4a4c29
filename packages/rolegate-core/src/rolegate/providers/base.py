"""Protocols for the external collaborators the core talks to."""

from __future__ import annotations

from typing import Protocol

from rolegate.models import Identity, Profile, Project


class CredentialProvider(Protocol):
    """Signs users up and in; raises AuthError with a classified kind."""

    async def sign_up(self, email: str, password: str, display_name: str | None) -> Identity: ...
    async def sign_in(self, email: str, password: str) -> Identity: ...
    async def sign_out(self) -> None: ...
    async def restore_session(self) -> Identity | None: ...


class RoleAssignmentStore(Protocol):
    """Authoritative role rows. ``get_role`` returns None when no row exists."""

    async def get_role(self, user_id: str) -> str | None: ...
    async def list_all_roles(self) -> list[tuple[str, str]]: ...
    async def set_role(self, user_id: str, role: str) -> None: ...


class ProfileStore(Protocol):
    async def list_profiles(self) -> list[Profile]: ...


class ProjectStore(Protocol):
    async def list_projects(self) -> list[Project]: ...
    async def get_project(self, project_id: str) -> Project | None: ...
    async def insert_project(
        self, name: str, description: str | None, code: str, owner_id: str | None
    ) -> Project: ...
    async def update_code(self, project_id: str, code: str) -> Project: ...
    async def delete_project(self, project_id: str) -> None: ...
