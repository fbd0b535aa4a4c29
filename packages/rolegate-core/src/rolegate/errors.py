"""Error taxonomy shared by the session, role and workspace layers."""

from __future__ import annotations

from enum import StrEnum


class RolegateError(Exception):
    """Base class for every error raised by rolegate."""


class ValidationError(RolegateError):
    """Malformed local input, detected before any collaborator is called.

    ``fields`` maps a form field name to a human-readable message.
    """

    def __init__(self, fields: dict[str, str]) -> None:
        self.fields = dict(fields)
        super().__init__("; ".join(f"{name}: {msg}" for name, msg in self.fields.items()))


class AuthErrorKind(StrEnum):
    INVALID_CREDENTIALS = "invalid_credentials"
    ALREADY_REGISTERED = "already_registered"
    OTHER = "other"


_AUTH_MESSAGES = {
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorKind.ALREADY_REGISTERED: "This email is already registered. Try signing in.",
}


class AuthError(RolegateError):
    """Credential provider rejected a sign-up, sign-in or session restore."""

    def __init__(self, kind: AuthErrorKind | str, message: str | None = None) -> None:
        self.kind = AuthErrorKind(kind)
        self.message = message or _AUTH_MESSAGES.get(self.kind, "Authentication failed")
        super().__init__(self.message)


class PermissionDenied(RolegateError):
    """A capability check failed locally (or the service refused the write).

    Carries the structured reason consumers render in a denial dialog.
    """

    def __init__(self, action: str, required_role: str, current_role: str | None = None) -> None:
        self.action = action
        self.required_role = required_role
        self.current_role = current_role
        super().__init__(
            f"Permission denied: {action} requires {required_role}"
            f" (current role: {current_role or 'none'})"
        )


class StoreError(RolegateError):
    """Network or backend failure reading or writing profiles, roles or projects."""
