"""Permission enforcement surface: the contract UI consumers render denials from."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, TypeVar

import structlog

from rolegate.capabilities import REQUIRED_ROLE, Capability, CapabilityFacade
from rolegate.errors import PermissionDenied

log = structlog.get_logger(__name__)

T = TypeVar("T")

DENIAL_TITLE = "Permission Denied"
DENIAL_HINT = "Contact your workspace administrator to request elevated permissions."


@dataclass(frozen=True)
class DenialNotice:
    """Everything a blocking dialog or an inline disabled state needs to show."""

    title: str
    message: str
    current_role: str
    required_role: str
    hint: str = DENIAL_HINT

    @classmethod
    def from_denial(cls, denial: PermissionDenied) -> DenialNotice:
        return cls(
            title=DENIAL_TITLE,
            message=f"You don't have permission to {denial.action}.",
            current_role=denial.current_role or "user",
            required_role=denial.required_role,
        )


class DenialSink(Protocol):
    def permission_denied(self, denial: PermissionDenied) -> None: ...


class LoggingDenialSink:
    """Default sink: records the denial in the structured log."""

    def permission_denied(self, denial: PermissionDenied) -> None:
        log.info(
            "permission_denied",
            action=denial.action,
            required_role=denial.required_role,
            current_role=denial.current_role,
        )


class PermissionEnforcer:
    """Runs the guard every mutating consumer goes through.

    The capability is checked first. On denial the sink is notified and
    PermissionDenied is raised; the guarded operation is never started.
    """

    def __init__(self, facade: CapabilityFacade, sink: DenialSink | None = None) -> None:
        self._facade = facade
        self._sink = sink or LoggingDenialSink()

    @property
    def facade(self) -> CapabilityFacade:
        return self._facade

    def check(self, capability: Capability, action: str) -> None:
        if self._facade.allows(capability):
            return
        role = self._facade.role
        denial = PermissionDenied(
            action=action,
            required_role=REQUIRED_ROLE[Capability(capability)],
            current_role=str(role) if role is not None else None,
        )
        self._sink.permission_denied(denial)
        raise denial

    async def run(
        self, capability: Capability, action: str, operation: Callable[[], Awaitable[T]]
    ) -> T:
        self.check(capability, action)
        return await operation()

    def report(self, denial: PermissionDenied) -> None:
        """Forward a denial that came back from the server."""
        self._sink.permission_denied(denial)
