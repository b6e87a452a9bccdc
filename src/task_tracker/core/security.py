"""Password hashing, JWT issuing and token revocation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from threading import Lock
from typing import Any
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenType(str, Enum):
    """Kinds of JWT issued by the service."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(slots=True)
class IssuedToken:
    """Encoded JWT plus the claims the caller needs to track it."""

    token: str
    jti: str
    expires_at: datetime


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def signing_key(token_type: TokenType, settings: Settings) -> str:
    """Access and refresh tokens are signed with separate secrets."""
    if token_type is TokenType.ACCESS:
        return settings.jwt_secret_key
    return settings.jwt_refresh_secret_key


def token_lifetime(token_type: TokenType, settings: Settings) -> timedelta:
    if token_type is TokenType.ACCESS:
        return timedelta(minutes=settings.access_token_expire_minutes)
    return timedelta(minutes=settings.refresh_token_expire_minutes)


def issue_token(
    claims: dict[str, Any],
    *,
    token_type: TokenType,
    settings: Settings,
    now: datetime | None = None,
) -> IssuedToken:
    """Sign ``claims`` as a ``token_type`` JWT with a fresh ``jti``.

    ``claims`` must carry ``sub``; ``iat``, ``exp``, ``type`` and ``jti`` are
    filled in here.
    """
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + token_lifetime(token_type, settings)
    jti = uuid4().hex
    payload = {
        **claims,
        "iat": issued_at,
        "exp": expires_at,
        "type": token_type.value,
        "jti": jti,
    }
    token = jwt.encode(payload, signing_key(token_type, settings), algorithm=settings.jwt_algorithm)
    return IssuedToken(token=token, jti=jti, expires_at=expires_at)


def read_token(token: str, *, token_type: TokenType, settings: Settings) -> dict[str, Any]:
    """Verify the signature and expiry of ``token`` and return its claims.

    Raises :class:`jose.ExpiredSignatureError` or :class:`jose.JWTError`.
    """
    return jwt.decode(
        token,
        signing_key(token_type, settings),
        algorithms=[settings.jwt_algorithm],
    )


class RevokedTokenRegistry:
    """Process-local record of revoked ``jti`` values.

    Entries are dropped once the token would have expired anyway, so the
    registry only ever holds tokens that could still verify.
    """

    def __init__(self) -> None:
        self._expiry_by_jti: dict[str, datetime] = {}
        self._lock = Lock()

    def revoke(self, jti: str, expires_at: datetime) -> None:
        with self._lock:
            self._expiry_by_jti[jti] = expires_at
            self._prune()

    def __contains__(self, jti: object) -> bool:
        with self._lock:
            self._prune()
            return jti in self._expiry_by_jti

    def __len__(self) -> int:
        with self._lock:
            self._prune()
            return len(self._expiry_by_jti)

    def clear(self) -> None:
        with self._lock:
            self._expiry_by_jti.clear()

    def _prune(self) -> None:
        now = datetime.now(timezone.utc)
        self._expiry_by_jti = {
            jti: expiry for jti, expiry in self._expiry_by_jti.items() if expiry > now
        }


revoked_tokens = RevokedTokenRegistry()


__all__ = [
    "ExpiredSignatureError",
    "IssuedToken",
    "JWTError",
    "RevokedTokenRegistry",
    "TokenType",
    "hash_password",
    "issue_token",
    "read_token",
    "revoked_tokens",
    "signing_key",
    "token_lifetime",
    "verify_password",
]
