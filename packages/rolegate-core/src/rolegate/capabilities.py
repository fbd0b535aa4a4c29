"""Synchronous capability predicates derived from the current session."""

from __future__ import annotations

from enum import StrEnum

from rolegate.roles import NO_CAPABILITIES, Capabilities, Role, capabilities_of
from rolegate.session import SessionStore


class Capability(StrEnum):
    VIEW = "view"
    EDIT = "edit"
    DELETE = "delete"
    MANAGE_USERS = "manage_users"


REQUIRED_ROLE: dict[Capability, str] = {
    Capability.VIEW: "any signed-in user",
    Capability.EDIT: "developer or admin",
    Capability.DELETE: "admin",
    Capability.MANAGE_USERS: "admin",
}


class CapabilityFacade:
    """Answers "may the current actor do X?" without blocking or raising.

    Every predicate is False while no role is known (loading, signed out, or
    role resolution still in flight).
    """

    def __init__(self, sessions: SessionStore) -> None:
        self._sessions = sessions

    @property
    def role(self) -> Role | None:
        return self._sessions.session.role

    def capabilities(self) -> Capabilities:
        session = self._sessions.session
        if not session.is_authenticated or session.role is None:
            return NO_CAPABILITIES
        return capabilities_of(session.role)

    def allows(self, capability: Capability) -> bool:
        caps = self.capabilities()
        return {
            Capability.VIEW: caps.can_view,
            Capability.EDIT: caps.can_edit,
            Capability.DELETE: caps.can_delete,
            Capability.MANAGE_USERS: caps.can_manage_users,
        }[Capability(capability)]

    def can_view(self) -> bool:
        return self.allows(Capability.VIEW)

    def can_edit(self) -> bool:
        return self.allows(Capability.EDIT)

    def can_delete(self) -> bool:
        return self.allows(Capability.DELETE)

    def can_manage_users(self) -> bool:
        return self.allows(Capability.MANAGE_USERS)

    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def is_developer(self) -> bool:
        return self.role is Role.DEVELOPER
