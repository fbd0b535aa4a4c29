"""Tests for guarded project actions and the denial surface."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from rolegate.capabilities import Capability
from rolegate.client import WorkspaceClient
from rolegate.enforcement import DENIAL_HINT, DenialNotice
from rolegate.errors import PermissionDenied, StoreError, ValidationError
from rolegate.providers.memory import InMemoryBackend
from rolegate.workspace import WorkspaceActions


@pytest.mark.asyncio
async def test_user_cannot_create_project(client: WorkspaceClient, backend: InMemoryBackend, sink):
    await client.sessions.sign_in("user@example.com", "user-secret")

    with pytest.raises(PermissionDenied) as excinfo:
        await client.workspace.create_project("Demo")

    assert backend.projects == {}
    assert len(sink.denials) == 1
    denial = sink.denials[0]
    assert denial is excinfo.value
    assert denial.required_role == "developer or admin"
    assert denial.current_role == "user"


@pytest.mark.asyncio
async def test_denied_action_never_reaches_store(client: WorkspaceClient):
    await client.sessions.sign_in("user@example.com", "user-secret")
    store = AsyncMock()
    actions = WorkspaceActions(client.sessions, client.enforcer, store)

    with pytest.raises(PermissionDenied):
        await actions.create_project("Demo")
    with pytest.raises(PermissionDenied):
        await actions.save_code("p1", "x")
    with pytest.raises(PermissionDenied):
        await actions.delete_project("p1")

    assert store.mock_calls == []


@pytest.mark.asyncio
async def test_signed_out_actor_cannot_view(client: WorkspaceClient, sink):
    with pytest.raises(PermissionDenied) as excinfo:
        await client.workspace.list_projects()
    assert excinfo.value.required_role == "any signed-in user"
    assert excinfo.value.current_role is None


@pytest.mark.asyncio
async def test_developer_creates_and_saves(client: WorkspaceClient):
    identity = await client.sessions.sign_in("dev@example.com", "dev-secret")

    project = await client.workspace.create_project("  Demo  ", "  first  ")
    assert project.name == "Demo"
    assert project.description == "first"
    assert project.owner_id == identity.id
    assert project.code.startswith("// Welcome to Demo")

    saved = await client.workspace.save_code(project.id, "print('hi')")
    assert saved.code == "print('hi')"
    assert (await client.workspace.open_project(project.id)).code == "print('hi')"


@pytest.mark.asyncio
async def test_create_project_requires_name(client: WorkspaceClient, backend: InMemoryBackend):
    await client.sessions.sign_in("dev@example.com", "dev-secret")
    with pytest.raises(ValidationError) as excinfo:
        await client.workspace.create_project("   ")
    assert excinfo.value.fields == {"name": "Please enter a project name"}
    assert backend.projects == {}


@pytest.mark.asyncio
async def test_developer_cannot_delete(client: WorkspaceClient, backend: InMemoryBackend, sink):
    await client.sessions.sign_in("dev@example.com", "dev-secret")
    project = await client.workspace.create_project("Demo")

    with pytest.raises(PermissionDenied) as excinfo:
        await client.workspace.delete_project(project.id)

    assert excinfo.value.required_role == "admin"
    assert project.id in backend.projects
    assert sink.denials == [excinfo.value]


@pytest.mark.asyncio
async def test_admin_deletes(client: WorkspaceClient, backend: InMemoryBackend):
    await client.sessions.sign_in("admin@example.com", "admin-secret")
    project = await client.workspace.create_project("Demo")

    await client.workspace.delete_project(project.id)

    assert backend.projects == {}
    with pytest.raises(StoreError):
        await client.workspace.open_project(project.id)


@pytest.mark.asyncio
async def test_list_projects_most_recent_first(client: WorkspaceClient):
    await client.sessions.sign_in("dev@example.com", "dev-secret")
    first = await client.workspace.create_project("First")
    second = await client.workspace.create_project("Second")
    await client.workspace.save_code(first.id, "touched")

    names = [p.name for p in await client.workspace.list_projects()]

    assert names[0] == "First"
    assert set(names) == {first.name, second.name}


@pytest.mark.asyncio
async def test_server_side_refusal_is_reported(client: WorkspaceClient, sink):
    await client.sessions.sign_in("dev@example.com", "dev-secret")
    store = AsyncMock()
    refusal = PermissionDenied("edit code", "developer or admin", "user")
    store.update_code.side_effect = refusal
    actions = WorkspaceActions(client.sessions, client.enforcer, store)

    with pytest.raises(PermissionDenied):
        await actions.save_code("p1", "x")

    assert sink.denials == [refusal]


@pytest.mark.asyncio
async def test_enforcer_run_executes_allowed_operation(client: WorkspaceClient):
    await client.sessions.sign_in("admin@example.com", "admin-secret")
    operation = AsyncMock(return_value="done")

    assert await client.enforcer.run(Capability.DELETE, "delete projects", operation) == "done"
    operation.assert_awaited_once()


def test_denial_notice_contents():
    notice = DenialNotice.from_denial(PermissionDenied("create projects", "developer or admin", None))

    assert notice.title == "Permission Denied"
    assert notice.message == "You don't have permission to create projects."
    assert notice.current_role == "user"
    assert notice.required_role == "developer or admin"
    assert notice.hint == DENIAL_HINT
