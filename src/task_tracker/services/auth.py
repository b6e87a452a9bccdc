"""Authentication service encapsulating user registration and token flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings
from ..core.security import (
    ExpiredSignatureError,
    IssuedToken,
    JWTError,
    TokenType,
    issue_token,
    read_token,
    revoked_tokens,
    verify_password,
)
from ..errors import AuthenticationError, AuthorizationError, ServerError
from ..models import User
from ..models.common import ensure_utc, utcnow
from ..repositories import UserRepository
from ..schemas.auth import TokenPayload
from .users import UserService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TokenPair:
    """Container for access and refresh tokens."""

    access: IssuedToken
    refresh: IssuedToken


def decode_token_payload(token: str, *, token_type: TokenType, settings: Settings) -> TokenPayload:
    """Decode ``token`` and ensure it is an unrevoked token of ``token_type``."""
    try:
        claims = read_token(token, token_type=token_type, settings=settings)
    except ExpiredSignatureError as exc:
        raise AuthenticationError("Token has expired") from exc
    except JWTError as exc:
        raise AuthenticationError("Invalid token") from exc

    payload = TokenPayload.model_validate(claims)
    if payload.type is not token_type:
        raise AuthenticationError("Invalid token type")
    if payload.jti in revoked_tokens:
        raise AuthenticationError("Token has been revoked")
    return payload


class AuthService:
    """Registration, login and token lifecycle workflows."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._user_service = UserService(session)
        self._user_repository = UserRepository(session)

    async def register_user(
        self,
        *,
        email: str,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> User:
        return await self._user_service.create_user(
            email=email,
            username=username,
            password=password,
            first_name=first_name,
            last_name=last_name,
        )

    async def authenticate_user(self, email: str, password: str) -> User:
        user = await self._user_service.get_user_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning("Failed login attempt", extra={"email": email.strip().lower()})
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthorizationError("User account is inactive")
        user.last_login = utcnow()
        await self._session.commit()
        logger.info("User logged in", extra={"user_id": user.id})
        return user

    def build_token_pair(self, user: User) -> TokenPair:
        if user.id is None:
            raise ServerError("User must be persisted before issuing tokens")
        claims = {"sub": str(user.id), "username": user.username, "role": user.role.value}
        return TokenPair(
            access=issue_token(claims, token_type=TokenType.ACCESS, settings=self._settings),
            refresh=issue_token(claims, token_type=TokenType.REFRESH, settings=self._settings),
        )

    async def refresh_from_token(self, refresh_token: str) -> tuple[User, TokenPair]:
        payload = decode_token_payload(
            refresh_token,
            token_type=TokenType.REFRESH,
            settings=self._settings,
        )
        try:
            user_id = int(payload.sub)
        except ValueError as exc:
            raise AuthenticationError("Invalid token subject") from exc
        user = await self._user_repository.get(user_id)
        if user is None:
            raise AuthenticationError("User no longer exists")
        if not user.is_active:
            raise AuthorizationError("User account is inactive")

        revoked_tokens.revoke(payload.jti, ensure_utc(payload.exp))
        return user, self.build_token_pair(user)

    def logout(self, access_token: str) -> None:
        """Revoke ``access_token`` until it would have expired anyway."""
        payload = decode_token_payload(
            access_token,
            token_type=TokenType.ACCESS,
            settings=self._settings,
        )
        revoked_tokens.revoke(payload.jti, ensure_utc(payload.exp))
        logger.info("User logged out", extra={"user_id": payload.sub})


__all__ = ["AuthService", "TokenPair", "decode_token_payload"]
