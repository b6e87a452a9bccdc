"""User-facing Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import EmailStr, Field, StringConstraints, field_validator

from ..models import UserRole
from ..models.common import ensure_utc
from .common import CamelModel, Pagination

NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class UserSummary(CamelModel):
    """Minimal projection embedded in task payloads."""

    id: int
    first_name: str
    last_name: str
    username: str


class UserPublic(CamelModel):
    """Public representation of a user account."""

    id: int
    email: EmailStr
    username: str
    first_name: str
    last_name: str
    full_name: str
    role: UserRole
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("last_login", "created_at", "updated_at", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class ProfileUpdate(CamelModel):
    """Fields a user may change on their own account."""

    first_name: NameStr | None = None
    last_name: NameStr | None = None


class UserAdminUpdate(ProfileUpdate):
    """Fields an administrator may change on any account."""

    role: UserRole | None = None
    is_active: bool | None = None


class UserListData(CamelModel):
    """Paginated collection of users."""

    users: list[UserPublic]
    pagination: Pagination


class UserStatistics(CamelModel):
    """Account totals grouped by activity and role."""

    total: int = Field(ge=0)
    active: int = Field(ge=0)
    inactive: int = Field(ge=0)
    by_role: dict[str, int] = Field(default_factory=dict)


__all__ = [
    "NameStr",
    "ProfileUpdate",
    "UserAdminUpdate",
    "UserListData",
    "UserPublic",
    "UserStatistics",
    "UserSummary",
]
