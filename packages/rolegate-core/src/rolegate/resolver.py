"""Role resolution against the authoritative role-assignment store."""

from __future__ import annotations

import structlog

from rolegate.providers.base import RoleAssignmentStore
from rolegate.roles import Role, parse_role

log = structlog.get_logger(__name__)


class RoleResolver:
    """Looks up the role of a user id.

    No caching happens here: every call reads the store. The session
    snapshot holding the result is the only cache, and it is refreshed only
    when the session re-resolves (sign-in, restore or refresh_role).
    """

    def __init__(self, store: RoleAssignmentStore) -> None:
        self._store = store

    async def resolve_role(self, user_id: str) -> Role:
        """Return the stored role for *user_id*, or ``Role.USER`` when no row exists.

        Raises StoreError if the store fails or holds a malformed value.
        """
        raw = await self._store.get_role(user_id)
        role = parse_role(raw)
        log.debug("role_resolved", user_id=user_id, role=str(role), defaulted=raw is None)
        return role
