"""HTTP collaborators talking to the rolegate service REST API."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

import httpx
import structlog

from rolegate.config import RolegateConfig
from rolegate.errors import AuthError, AuthErrorKind, PermissionDenied, StoreError
from rolegate.models import Identity, Profile, Project
from rolegate.tokens import MemoryTokenStore, TokenPair, TokenStore

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _detail(resp: httpx.Response) -> Any:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or None
    return data.get("detail") if isinstance(data, dict) else data


def _identity(data: dict[str, Any]) -> Identity:
    return Identity(
        id=data["id"],
        email=data["email"],
        display_name=data.get("display_name"),
        created_at=_parse_dt(data.get("created_at")),
    )


def _profile(data: dict[str, Any]) -> Profile:
    return Profile(id=data["id"], email=data.get("email"), created_at=_parse_dt(data.get("created_at")))


def _project(data: dict[str, Any]) -> Project:
    return Project(
        id=data["id"],
        name=data["name"],
        description=data.get("description"),
        code=data.get("code") or "",
        owner_id=data.get("owner_id"),
        created_at=_parse_dt(data.get("created_at")),
        updated_at=_parse_dt(data.get("updated_at")),
    )


def _raise_for_store(resp: httpx.Response, action: str) -> None:
    """Map an error response from a store endpoint onto the error taxonomy."""
    if resp.is_success:
        return
    detail = _detail(resp)
    if resp.status_code == 403:
        if isinstance(detail, dict):
            raise PermissionDenied(
                action=detail.get("action", action),
                required_role=detail.get("required_role", "admin"),
                current_role=detail.get("current_role"),
            )
        raise PermissionDenied(action=action, required_role="admin")
    raise StoreError(f"Failed to {action} ({resp.status_code}): {detail}")


def _decode(resp: httpx.Response, action: str, build: Callable[[Any], T]) -> T:
    """Parse a successful response body. A malformed body raises StoreError."""
    try:
        return build(resp.json())
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        log.warning("malformed_response", action=action, status=resp.status_code, error=str(exc))
        raise StoreError(f"Failed to {action}: malformed response") from exc


def _login_body(body: dict[str, Any]) -> tuple[TokenPair, Identity]:
    return TokenPair(body["access_token"], body["refresh_token"]), _identity(body["user"])


def _token_body(body: dict[str, Any]) -> TokenPair:
    return TokenPair(body["access_token"], body["refresh_token"])


class ApiClient:
    """Shared httpx client holding this process's bearer tokens.

    An expired access token is refreshed once per request, then the request
    is retried.

    Token writes are tied to a generation. Sign-in and sign-out start a new
    generation, and a login or refresh that started under an older one never
    writes its tokens.
    """

    def __init__(
        self,
        config: RolegateConfig | None = None,
        tokens: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or RolegateConfig()
        self.tokens = tokens or MemoryTokenStore()
        self._client = httpx.AsyncClient(
            base_url=f"{self._config.api_url.rstrip('/')}/api/v1",
            timeout=self._config.request_timeout,
            transport=transport,
        )
        self._token_generation = 0

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def token_generation(self) -> int:
        return self._token_generation

    def begin_token_change(self) -> int:
        """Start a new generation; writes from older requests are dropped."""
        self._token_generation += 1
        return self._token_generation

    def save_tokens(self, tokens: TokenPair, generation: int) -> bool:
        if generation != self._token_generation:
            log.info("stale_tokens_discarded", generation=generation, current=self._token_generation)
            return False
        self.tokens.save(tokens)
        return True

    def clear_tokens(self, generation: int | None = None) -> bool:
        if generation is not None and generation != self._token_generation:
            log.info("stale_token_clear_skipped", generation=generation, current=self._token_generation)
            return False
        self.tokens.clear()
        return True

    def _headers(self) -> dict[str, str]:
        pair = self.tokens.load()
        if pair:
            return {"Authorization": f"Bearer {pair.access_token}"}
        return {}

    async def request(
        self, method: str, path: str, *, json: Any = None, auth: bool = True
    ) -> httpx.Response:
        """Send a request. Transport failures raise StoreError."""
        try:
            resp = await self._client.request(
                method, path, json=json, headers=self._headers() if auth else {}
            )
            if resp.status_code == 401 and auth and await self._refresh():
                resp = await self._client.request(method, path, json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            log.warning("request_failed", method=method, path=path, error=str(exc))
            raise StoreError(f"{method} {path} failed: {exc}") from exc
        return resp

    async def _refresh(self) -> bool:
        pair = self.tokens.load()
        if pair is None:
            return False
        generation = self._token_generation
        resp = await self._client.post("/auth/refresh", json={"refresh_token": pair.refresh_token})
        if not resp.is_success:
            log.info("token_refresh_rejected", status=resp.status_code)
            return False
        try:
            refreshed = _decode(resp, "refresh tokens", _token_body)
        except StoreError:
            return False
        if not self.save_tokens(refreshed, generation):
            return False
        log.debug("token_refreshed")
        return True


class HttpCredentialProvider:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def sign_up(self, email: str, password: str, display_name: str | None) -> Identity:
        try:
            resp = await self._api.request(
                "POST",
                "/auth/signup",
                json={"email": email, "password": password, "display_name": display_name},
                auth=False,
            )
        except StoreError as exc:
            raise AuthError(AuthErrorKind.OTHER, str(exc)) from exc
        if resp.status_code == 409:
            raise AuthError(AuthErrorKind.ALREADY_REGISTERED)
        if not resp.is_success:
            raise AuthError(AuthErrorKind.OTHER, str(_detail(resp)))
        try:
            return _decode(resp, "sign up", _identity)
        except StoreError as exc:
            raise AuthError(AuthErrorKind.OTHER, str(exc)) from exc

    async def sign_in(self, email: str, password: str) -> Identity:
        generation = self._api.begin_token_change()
        try:
            resp = await self._api.request(
                "POST", "/auth/login", json={"email": email, "password": password}, auth=False
            )
        except StoreError as exc:
            raise AuthError(AuthErrorKind.OTHER, str(exc)) from exc
        if resp.status_code == 401:
            raise AuthError(AuthErrorKind.INVALID_CREDENTIALS)
        if not resp.is_success:
            raise AuthError(AuthErrorKind.OTHER, str(_detail(resp)))
        try:
            tokens, identity = _decode(resp, "sign in", _login_body)
        except StoreError as exc:
            raise AuthError(AuthErrorKind.OTHER, str(exc)) from exc
        self._api.save_tokens(tokens, generation)
        return identity

    async def sign_out(self) -> None:
        # tokens are stateless JWTs; forgetting them ends the session
        self._api.clear_tokens(self._api.begin_token_change())

    async def restore_session(self) -> Identity | None:
        if self._api.tokens.load() is None:
            return None
        generation = self._api.token_generation
        resp = await self._api.request("GET", "/auth/me")
        if resp.status_code == 401:
            self._api.clear_tokens(generation)
            return None
        if not resp.is_success:
            raise StoreError(f"Failed to restore session ({resp.status_code})")
        return _decode(resp, "restore session", _identity)


class HttpRoleStore:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def get_role(self, user_id: str) -> str | None:
        resp = await self._api.request("GET", f"/roles/{user_id}")
        _raise_for_store(resp, "read roles")
        return _decode(resp, "read roles", lambda body: body.get("role"))

    async def list_all_roles(self) -> list[tuple[str, str]]:
        resp = await self._api.request("GET", "/roles")
        _raise_for_store(resp, "manage users")
        return _decode(
            resp, "manage users", lambda rows: [(row["user_id"], row["role"]) for row in rows]
        )

    async def set_role(self, user_id: str, role: str) -> None:
        resp = await self._api.request("PUT", f"/roles/{user_id}", json={"role": role})
        _raise_for_store(resp, "change user roles")


class HttpProfileStore:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list_profiles(self) -> list[Profile]:
        resp = await self._api.request("GET", "/profiles")
        _raise_for_store(resp, "manage users")
        return _decode(resp, "manage users", lambda rows: [_profile(row) for row in rows])


class HttpProjectStore:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list_projects(self) -> list[Project]:
        resp = await self._api.request("GET", "/projects")
        _raise_for_store(resp, "view projects")
        return _decode(resp, "view projects", lambda rows: [_project(row) for row in rows])

    async def get_project(self, project_id: str) -> Project | None:
        resp = await self._api.request("GET", f"/projects/{project_id}")
        if resp.status_code == 404:
            return None
        _raise_for_store(resp, "view projects")
        return _decode(resp, "view projects", _project)

    async def insert_project(
        self, name: str, description: str | None, code: str, owner_id: str | None
    ) -> Project:
        # owner_id is taken from the bearer token server-side
        resp = await self._api.request(
            "POST", "/projects", json={"name": name, "description": description, "code": code}
        )
        _raise_for_store(resp, "create projects")
        return _decode(resp, "create projects", _project)

    async def update_code(self, project_id: str, code: str) -> Project:
        resp = await self._api.request("PATCH", f"/projects/{project_id}", json={"code": code})
        _raise_for_store(resp, "edit code")
        return _decode(resp, "edit code", _project)

    async def delete_project(self, project_id: str) -> None:
        resp = await self._api.request("DELETE", f"/projects/{project_id}")
        _raise_for_store(resp, "delete projects")
