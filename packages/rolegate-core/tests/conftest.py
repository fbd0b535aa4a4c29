"""Shared test fixtures."""

from __future__ import annotations

import pytest

from rolegate.client import WorkspaceClient
from rolegate.errors import PermissionDenied
from rolegate.providers.memory import InMemoryBackend
from rolegate.roles import Role


class RecordingDenialSink:
    """Collects denials the way a UI would queue denial dialogs."""

    def __init__(self) -> None:
        self.denials: list[PermissionDenied] = []

    def permission_denied(self, denial: PermissionDenied) -> None:
        self.denials.append(denial)


@pytest.fixture
def backend() -> InMemoryBackend:
    backend = InMemoryBackend()
    backend.add_user("admin@example.com", "admin-secret", "Ada", role=Role.ADMIN)
    backend.add_user("dev@example.com", "dev-secret", "Dev", role=Role.DEVELOPER)
    backend.add_user("user@example.com", "user-secret", "Uma", role=Role.USER)
    # signed up but never given a role row
    backend.add_user("plain@example.com", "plain-secret")
    return backend


@pytest.fixture
def sink() -> RecordingDenialSink:
    return RecordingDenialSink()


@pytest.fixture
def client(backend: InMemoryBackend, sink: RecordingDenialSink) -> WorkspaceClient:
    return WorkspaceClient.in_memory(backend, sink=sink)


@pytest.fixture
def make_client(backend: InMemoryBackend):
    """Factory for additional clients sharing the same backend (other browser tabs)."""

    def _make(sink: RecordingDenialSink | None = None) -> WorkspaceClient:
        return WorkspaceClient.in_memory(backend, sink=sink or RecordingDenialSink())

    return _make
