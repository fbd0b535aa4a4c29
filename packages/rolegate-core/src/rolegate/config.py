"""Client configuration for the rolegate core."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class RolegateConfig(BaseModel):
    """Settings for a running client (one per process)."""

    api_url: str = Field(default="http://localhost:8080", description="Base URL of the rolegate service")
    request_timeout: float = Field(default=30.0, gt=0)
    password_min_length: int = Field(default=6, ge=1)
    token_path: Path | None = Field(
        default=None,
        description="Where persisted tokens live; None keeps them in memory only",
    )
