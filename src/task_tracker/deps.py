"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Annotated, Awaitable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.security import TokenType
from .db.session import get_session
from .errors import AuthenticationError, AuthorizationError
from .models import User, UserRole
from .repositories import UserRepository
from .services.auth import decode_token_payload
from .services.filters import TaskFilterBuilder

SettingsDependency = Annotated[Settings, Depends(get_settings)]

# create_app() rewrites tokenUrl in the OpenAPI document for the configured prefix.
_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""

    async for session in get_session():
        yield session


DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]
AccessTokenDependency = Annotated[str, Depends(_oauth2_scheme)]


def get_task_filter_builder(settings: SettingsDependency) -> TaskFilterBuilder:
    """Build the task filter builder configured for this deployment."""

    return TaskFilterBuilder.from_settings(settings)


TaskFilterBuilderDependency = Annotated[TaskFilterBuilder, Depends(get_task_filter_builder)]


def require_current_user(*roles: UserRole) -> Callable[..., Awaitable[User]]:
    """Return a dependency enforcing authentication and, optionally, membership in ``roles``."""

    allowed = frozenset(roles)

    async def _dependency(
        token: AccessTokenDependency,
        session: DatabaseSessionDependency,
        settings: SettingsDependency,
    ) -> User:
        try:
            token_payload = decode_token_payload(token, token_type=TokenType.ACCESS, settings=settings)
            user_id = int(token_payload.sub)
        except (ValidationError, ValueError) as exc:
            raise AuthenticationError("Invalid token") from exc

        user = await UserRepository(session).get(user_id)
        if user is None:
            raise AuthenticationError("User no longer exists")
        if not user.is_active:
            raise AuthorizationError("User account is inactive")
        if allowed and user.role not in allowed:
            raise AuthorizationError(
                f"User role {user.role.value} is not authorized to access this resource"
            )
        return user

    return _dependency


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[User]]:
    """Dependency factory restricting a route to the given roles."""

    return require_current_user(*roles)


CurrentUserDependency = Annotated[User, Depends(require_current_user())]
PrivilegedUserDependency = Annotated[User, Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER))]
AdminUserDependency = Annotated[User, Depends(require_roles(UserRole.ADMIN))]


__all__ = [
    "AccessTokenDependency",
    "AdminUserDependency",
    "CurrentUserDependency",
    "DatabaseSessionDependency",
    "PrivilegedUserDependency",
    "SettingsDependency",
    "TaskFilterBuilderDependency",
    "get_db_session",
    "get_task_filter_builder",
    "require_current_user",
    "require_roles",
]
