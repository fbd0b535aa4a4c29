"""Role hierarchy and the static role -> capability policy table."""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from rolegate.errors import StoreError


def _by_rank(op: Callable[[int, int], bool]) -> Callable[[Role, object], bool]:
    def compare(self: Role, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return op(self.rank, other.rank)

    return compare


class Role(StrEnum):
    """Global role of a user, ordered by privilege: user < developer < admin."""

    USER = "user"
    DEVELOPER = "developer"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @classmethod
    def default(cls) -> Role:
        return cls.USER

    # str ordering would compare the values alphabetically
    __lt__ = _by_rank(operator.lt)
    __le__ = _by_rank(operator.le)
    __gt__ = _by_rank(operator.gt)
    __ge__ = _by_rank(operator.ge)


_RANKS = {Role.USER: 0, Role.DEVELOPER: 1, Role.ADMIN: 2}


@dataclass(frozen=True)
class Capabilities:
    can_view: bool
    can_edit: bool
    can_delete: bool
    can_manage_users: bool


NO_CAPABILITIES = Capabilities(
    can_view=False, can_edit=False, can_delete=False, can_manage_users=False
)

_POLICY: dict[Role, Capabilities] = {
    Role.USER: Capabilities(can_view=True, can_edit=False, can_delete=False, can_manage_users=False),
    Role.DEVELOPER: Capabilities(can_view=True, can_edit=True, can_delete=False, can_manage_users=False),
    Role.ADMIN: Capabilities(can_view=True, can_edit=True, can_delete=True, can_manage_users=True),
}


def capabilities_of(role: Role) -> Capabilities:
    """Return the capability set granted to *role*.

    Total and pure: the same frozen object is returned for the same role, so
    it is safe to call on every render.
    """
    return _POLICY[Role(role)]


def parse_role(value: str | None) -> Role:
    """Convert a stored role value to a Role.

    A missing row (``None``) is the default role. A value outside the three
    known roles is corrupt data and raises StoreError.
    """
    if value is None:
        return Role.default()
    try:
        return Role(value)
    except ValueError as exc:
        raise StoreError(f"Malformed role value: {value!r}") from exc


@dataclass(frozen=True)
class RoleAssignment:
    user_id: str
    role: Role
