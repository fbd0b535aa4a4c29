"""Local form validation, run before any network call."""

from __future__ import annotations

import re

import pydantic
from pydantic import BaseModel, ValidationInfo, field_validator

from rolegate.errors import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

EMAIL_MESSAGE = "Please enter a valid email address"


class Credentials(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        v = v.strip()
        if not _EMAIL_RE.match(v):
            raise ValueError(EMAIL_MESSAGE)
        return v

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str, info: ValidationInfo) -> str:
        min_length = (info.context or {}).get("password_min_length", 6)
        if len(v) < min_length:
            raise ValueError(f"Password must be at least {min_length} characters")
        return v


def validate_credentials(email: str, password: str, password_min_length: int = 6) -> Credentials:
    """Validate both fields at once; every failing field is reported."""
    try:
        return Credentials.model_validate(
            {"email": email, "password": password},
            context={"password_min_length": password_min_length},
        )
    except pydantic.ValidationError as exc:
        fields: dict[str, str] = {}
        for error in exc.errors():
            name = str(error["loc"][0]) if error["loc"] else "form"
            fields.setdefault(name, error["msg"].removeprefix("Value error, "))
        raise ValidationError(fields) from None


def validate_project_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError({"name": "Please enter a project name"})
    return name
