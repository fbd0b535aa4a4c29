"""Composition root: one WorkspaceClient per running client process."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from rolegate.admin import RoleAdministration
from rolegate.capabilities import CapabilityFacade
from rolegate.config import RolegateConfig
from rolegate.enforcement import DenialSink, PermissionEnforcer
from rolegate.providers.base import (
    CredentialProvider,
    ProfileStore,
    ProjectStore,
    RoleAssignmentStore,
)
from rolegate.providers.http import (
    ApiClient,
    HttpCredentialProvider,
    HttpProfileStore,
    HttpProjectStore,
    HttpRoleStore,
)
from rolegate.providers.memory import (
    InMemoryBackend,
    InMemoryCredentialProvider,
    InMemoryProfileStore,
    InMemoryProjectStore,
    InMemoryRoleStore,
)
from rolegate.resolver import RoleResolver
from rolegate.session import SessionStore
from rolegate.tokens import FileTokenStore, MemoryTokenStore
from rolegate.workspace import WorkspaceActions


@dataclass
class WorkspaceClient:
    """The session and everything that reads it, wired by dependency passing."""

    sessions: SessionStore
    capabilities: CapabilityFacade
    enforcer: PermissionEnforcer
    admin: RoleAdministration
    workspace: WorkspaceActions
    api: ApiClient | None = None

    @classmethod
    def build(
        cls,
        credentials: CredentialProvider,
        roles: RoleAssignmentStore,
        profiles: ProfileStore,
        projects: ProjectStore,
        config: RolegateConfig | None = None,
        sink: DenialSink | None = None,
    ) -> WorkspaceClient:
        sessions = SessionStore(credentials, RoleResolver(roles), config)
        facade = CapabilityFacade(sessions)
        enforcer = PermissionEnforcer(facade, sink)
        return cls(
            sessions=sessions,
            capabilities=facade,
            enforcer=enforcer,
            admin=RoleAdministration(enforcer, profiles, roles),
            workspace=WorkspaceActions(sessions, enforcer, projects),
        )

    @classmethod
    def in_memory(
        cls,
        backend: InMemoryBackend,
        config: RolegateConfig | None = None,
        sink: DenialSink | None = None,
    ) -> WorkspaceClient:
        credentials = InMemoryCredentialProvider(backend)
        return cls.build(
            credentials=credentials,
            roles=InMemoryRoleStore(backend, actor=lambda: credentials.current_user_id),
            profiles=InMemoryProfileStore(backend),
            projects=InMemoryProjectStore(backend),
            config=config,
            sink=sink,
        )

    @classmethod
    def connect(
        cls,
        config: RolegateConfig | None = None,
        sink: DenialSink | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> WorkspaceClient:
        config = config or RolegateConfig()
        tokens = FileTokenStore(config.token_path) if config.token_path else MemoryTokenStore()
        api = ApiClient(config, tokens, transport=transport)
        client = cls.build(
            credentials=HttpCredentialProvider(api),
            roles=HttpRoleStore(api),
            profiles=HttpProfileStore(api),
            projects=HttpProjectStore(api),
            config=config,
            sink=sink,
        )
        client.api = api
        return client

    async def start(self) -> None:
        """Restore any existing session. Call once at startup."""
        await self.sessions.restore_session()

    async def aclose(self) -> None:
        if self.api is not None:
            await self.api.aclose()
