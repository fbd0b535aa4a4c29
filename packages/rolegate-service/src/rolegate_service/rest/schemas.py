"""Pydantic request/response models for REST API."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, field_validator

from rolegate.roles import Role
from rolegate_service.settings import settings

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if not _EMAIL_RE.match(v):
        raise ValueError("Please enter a valid email address")
    return v


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class SignUpRequest(BaseModel):
    email: str
    password: str
    display_name: str | None = None

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < settings.password_min_length:
            raise ValueError(
                f"Password must be at least {settings.password_min_length} characters"
            )
        return v

    @field_validator("display_name")
    @classmethod
    def blank_display_name(cls, v: str | None) -> str | None:
        return (v or "").strip() or None


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_lower(cls, v: str) -> str:
        return v.strip().lower()


class RefreshRequest(BaseModel):
    refresh_token: str


class IdentityResponse(BaseModel):
    id: str
    email: str
    display_name: str | None = None
    created_at: datetime | None = None


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(TokenResponse):
    user: IdentityResponse


# ---------------------------------------------------------------------------
# Roles and profiles
# ---------------------------------------------------------------------------


class RoleResponse(BaseModel):
    user_id: str
    role: str | None = None  # raw stored value; null when no row exists


class RoleUpdateRequest(BaseModel):
    role: Role


class ProfileResponse(BaseModel):
    id: str
    email: str | None = None
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class ProjectCreateRequest(BaseModel):
    name: str
    description: str | None = None
    code: str = ""

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter a project name")
        return v

    @field_validator("description")
    @classmethod
    def blank_description(cls, v: str | None) -> str | None:
        return (v or "").strip() or None


class ProjectCodeUpdate(BaseModel):
    code: str


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    code: str = ""
    owner_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
