"""Schemas describing authentication payloads."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

from ..core.security import TokenType
from .common import CamelModel
from .user import NameStr, UserPublic

UsernameStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=3, max_length=20, pattern=r"^[A-Za-z0-9_]+$"),
]

PASSWORD_MIN_LENGTH = 6
_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"\d"), "one number"),
)


class RegisterRequest(CamelModel):
    """Incoming payload for registering a new user."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "ada_l",
                "email": "ada@example.com",
                "password": "Secret123",
                "firstName": "Ada",
                "lastName": "Lovelace",
            }
        }
    )

    username: UsernameStr
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    first_name: NameStr
    last_name: NameStr

    @field_validator("email", mode="after")
    @classmethod
    def _normalise_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password", mode="after")
    @classmethod
    def _check_password_strength(cls, value: str) -> str:
        missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(value)]
        if missing:
            raise ValueError("Password must contain at least " + ", ".join(missing))
        return value


class RefreshRequest(CamelModel):
    """Request payload for refreshing JWT tokens."""

    refresh_token: str


class AuthTokens(CamelModel):
    """Access and refresh tokens returned to clients."""

    access_token: str
    refresh_token: str
    token_type: str = Field(default="bearer", frozen=True)
    expires_in: int
    refresh_expires_in: int


class AuthResponse(CamelModel):
    """Authentication response containing issued tokens and user metadata."""

    user: UserPublic
    tokens: AuthTokens


class TokenPayload(BaseModel):
    """Validated JWT payload."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    exp: datetime
    iat: datetime
    jti: str
    username: str
    role: str
    type: TokenType


__all__ = [
    "AuthResponse",
    "AuthTokens",
    "PASSWORD_MIN_LENGTH",
    "RefreshRequest",
    "RegisterRequest",
    "TokenPayload",
]
