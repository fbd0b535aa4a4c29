"""Auth domain models."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from rolegate.roles import Capabilities, Role, capabilities_of


@dataclass
class CurrentUser:
    user_id: UUID
    email: str
    role: Role  # resolved from user_roles on every request

    @property
    def capabilities(self) -> Capabilities:
        return capabilities_of(self.role)
