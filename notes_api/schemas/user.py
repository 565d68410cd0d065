"""
User and Auth Schemas.

Pydantic schemas for authentication request/response bodies.
"""

from datetime import datetime
from typing import Any

from pydantic import field_serializer

from notes_api.core.utils import to_iso
from notes_api.schemas.base import CamelModel


class UserResponse(CamelModel):
    """Public profile. Never carries the password hash."""

    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("last_login", "created_at", "updated_at")
    def _serialize_timestamp(self, value: datetime | None) -> str | None:
        return to_iso(value) if value is not None else None


class RegisterRequest(CamelModel):
    username: Any = None
    email: Any = None
    password: Any = None
    first_name: Any = None
    last_name: Any = None


class LoginRequest(CamelModel):
    """`identifier` is an email address or a username."""

    identifier: Any = None
    password: Any = None


class RefreshRequest(CamelModel):
    refresh_token: Any = None


class ChangePasswordRequest(CamelModel):
    current_password: Any = None
    new_password: Any = None


def serialize_user(user: Any) -> dict[str, Any]:
    """Render a User entity as its public profile."""
    return UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)
