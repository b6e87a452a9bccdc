"""User domain models built with SQLModel."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin


class UserRole(str, Enum):
    """Roles supported by the authorization layer."""

    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"


class UserBase(SQLModel, table=False):
    """Shared attributes for user models."""

    email: str = Field(
        max_length=320,
        sa_column=sa.Column(sa.String(length=320), nullable=False, unique=True),
    )
    username: str = Field(
        max_length=20,
        sa_column=sa.Column(sa.String(length=20), nullable=False, unique=True),
    )
    first_name: str = Field(
        max_length=50,
        sa_column=sa.Column(sa.String(length=50), nullable=False),
    )
    last_name: str = Field(
        max_length=50,
        sa_column=sa.Column(sa.String(length=50), nullable=False),
    )
    is_active: bool = Field(
        default=True,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=sa.Column(
            sa.Enum(
                UserRole,
                name="user_role",
                native_enum=False,
                values_callable=lambda roles: [role.value for role in roles],
            ),
            nullable=False,
            server_default=UserRole.USER.value,
        ),
    )


class User(UserBase, TimestampMixin, table=True):
    """Persistent user model."""

    __tablename__ = "users"
    __table_args__ = (
        sa.Index("ix_users_email", "email"),
        sa.Index("ix_users_username", "username"),
    )

    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    last_login: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


__all__ = ["User", "UserBase", "UserRole"]
