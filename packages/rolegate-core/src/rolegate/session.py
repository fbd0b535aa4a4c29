"""Session lifecycle: who the current actor is and which role they hold."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import structlog

from rolegate.config import RolegateConfig
from rolegate.errors import AuthError, StoreError
from rolegate.models import Identity
from rolegate.providers.base import CredentialProvider
from rolegate.resolver import RoleResolver
from rolegate.roles import Role
from rolegate.validation import validate_credentials

log = structlog.get_logger(__name__)

__all__ = ["Identity", "Session", "SessionListener", "SessionState", "SessionStore"]


class SessionState(StrEnum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Session:
    """Immutable snapshot of (state, identity, role).

    identity is set exactly when the state is authenticated; role is never
    set outside the authenticated state.
    """

    state: SessionState = SessionState.LOADING
    identity: Identity | None = None
    role: Role | None = None

    def __post_init__(self) -> None:
        authenticated = self.state is SessionState.AUTHENTICATED
        if (self.identity is not None) != authenticated:
            raise ValueError(f"identity must be set iff authenticated (state={self.state})")
        if self.role is not None and not authenticated:
            raise ValueError(f"role must be None while {self.state}")

    @classmethod
    def loading(cls) -> Session:
        return cls(SessionState.LOADING)

    @classmethod
    def unauthenticated(cls) -> Session:
        return cls(SessionState.UNAUTHENTICATED)

    @classmethod
    def authenticated(cls, identity: Identity, role: Role) -> Session:
        return cls(SessionState.AUTHENTICATED, identity, role)

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED


SessionListener = Callable[[Session], None]


class SessionStore:
    """Owns the current Session and is its only writer.

    Every user-initiated operation (sign-in, sign-out, restore, refresh)
    starts a new action epoch. An asynchronous resolution commits its result
    only if no newer action started while it was in flight, so a slow
    response can never overwrite the outcome of a later action (for example
    resurrect a session after sign-out).
    """

    def __init__(
        self,
        provider: CredentialProvider,
        resolver: RoleResolver,
        config: RolegateConfig | None = None,
    ) -> None:
        self._provider = provider
        self._resolver = resolver
        self._config = config or RolegateConfig()
        self._session = Session.loading()
        self._epoch = 0
        self._ready = asyncio.Event()
        self._listeners: list[SessionListener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call *listener* with every new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def wait_ready(self) -> Session:
        """Wait until the initial loading phase has ended."""
        await self._ready.wait()
        return self._session

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str, display_name: str | None = None) -> Identity:
        """Register a new account. Does not sign the new user in."""
        credentials = validate_credentials(email, password, self._config.password_min_length)
        display_name = (display_name or "").strip() or None
        try:
            identity = await self._provider.sign_up(
                credentials.email, credentials.password, display_name
            )
        except AuthError as exc:
            log.info("sign_up_failed", kind=str(exc.kind))
            raise
        log.info("sign_up_succeeded", user_id=identity.id)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        """Authenticate, then resolve the role for the returned identity."""
        credentials = validate_credentials(email, password, self._config.password_min_length)
        epoch = self._begin_action()
        self._set(Session.loading())
        try:
            identity = await self._provider.sign_in(credentials.email, credentials.password)
        except AuthError as exc:
            log.info("sign_in_failed", kind=str(exc.kind))
            self._commit(Session.unauthenticated(), epoch)
            raise
        except Exception:
            log.exception("sign_in_failed_unexpectedly")
            self._commit(Session.unauthenticated(), epoch)
            raise

        if self._is_current(epoch):
            role = await self._settle_role(identity, epoch)
            if self._commit(Session.authenticated(identity, role), epoch):
                log.info("sign_in_succeeded", user_id=identity.id, role=str(role))
        else:
            log.info("sign_in_superseded", user_id=identity.id)
        return identity

    async def sign_out(self) -> None:
        """Clear identity and role. Calling it with no active session is a no-op."""
        was_active = self._session.state is not SessionState.UNAUTHENTICATED
        self._begin_action()
        if not was_active:
            return
        self._set(Session.unauthenticated())
        try:
            await self._provider.sign_out()
        except (AuthError, StoreError) as exc:
            log.warning("provider_sign_out_failed", error=str(exc))
        log.info("signed_out")

    async def restore_session(self) -> Session:
        """Pick up an existing credential at startup.

        Provider failures end in the unauthenticated state; access is never
        granted on an error path.
        """
        epoch = self._begin_action()
        self._set(Session.loading())
        try:
            identity = await self._provider.restore_session()
        except (AuthError, StoreError) as exc:
            log.warning("restore_session_failed", error=str(exc))
            self._commit(Session.unauthenticated(), epoch)
            return self._session
        except Exception:
            log.exception("restore_session_failed_unexpectedly")
            self._commit(Session.unauthenticated(), epoch)
            raise

        if identity is None:
            self._commit(Session.unauthenticated(), epoch)
            log.debug("no_existing_session")
            return self._session

        if self._is_current(epoch):
            role = await self._settle_role(identity, epoch)
            if self._commit(Session.authenticated(identity, role), epoch):
                log.info("session_restored", user_id=identity.id, role=str(role))
        return self._session

    async def refresh_role(self) -> Role | None:
        """Re-resolve the current user's role (a page reload without sign-out).

        The previous role stays in effect until the new one arrives.
        """
        identity = self._session.identity
        if identity is None:
            return None
        epoch = self._begin_action()
        role = await self._resolve_role(identity.id)
        self._commit(Session.authenticated(identity, role), epoch)
        return self._session.role

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _resolve_role(self, user_id: str) -> Role:
        try:
            return await self._resolver.resolve_role(user_id)
        except StoreError as exc:
            log.warning("role_fetch_failed", user_id=user_id, error=str(exc), fallback=str(Role.USER))
            return Role.default()

    async def _settle_role(self, identity: Identity, epoch: int) -> Role:
        """Resolve the role for a fresh identity; any other failure ends unauthenticated."""
        try:
            return await self._resolve_role(identity.id)
        except Exception:
            log.exception("role_resolution_failed_unexpectedly", user_id=identity.id)
            self._commit(Session.unauthenticated(), epoch)
            raise

    def _begin_action(self) -> int:
        self._epoch += 1
        return self._epoch

    def _is_current(self, epoch: int) -> bool:
        return epoch == self._epoch

    def _commit(self, session: Session, epoch: int) -> bool:
        if not self._is_current(epoch):
            log.info("stale_session_update_discarded", state=str(session.state))
            return False
        self._set(session)
        return True

    def _set(self, session: Session) -> None:
        self._session = session
        if session.state is not SessionState.LOADING:
            self._ready.set()
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                log.exception("session_listener_failed")
