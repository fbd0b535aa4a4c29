"""Records owned by external collaborators and read by the core."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    display_name: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Profile:
    id: str
    email: str | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    description: str | None
    code: str
    owner_id: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None
