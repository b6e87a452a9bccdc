"""Service layer orchestrating user-related repository operations."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.security import hash_password
from ..errors import AuthorizationError, ConflictError, NotFoundError
from ..models import User, UserRole
from ..repositories import UserRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserPage:
    """One page of users with the totals needed for pagination."""

    users: list[User]
    page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit) if self.limit else 0


@dataclass(slots=True)
class UserStatisticsResult:
    """Account totals grouped by activity and role."""

    total: int
    active: int
    by_role: dict[str, int]

    @property
    def inactive(self) -> int:
        return self.total - self.active


class UserService:
    """High-level business operations for ``User`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)

    async def create_user(
        self,
        *,
        email: str,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.USER,
        is_active: bool = True,
    ) -> User:
        """Create and persist a new user record."""
        if await self._repository.get_by_email(email) is not None:
            raise ConflictError("User with this email already exists")
        if await self._repository.get_by_username(username) is not None:
            raise ConflictError("User with this username already exists")
        user = User(
            email=email.strip().lower(),
            username=username,
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=is_active,
            hashed_password=hash_password(password),
        )
        await self._repository.add(user)
        await self._session.commit()
        await self._repository.refresh(user)
        logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
        return user

    async def get_user(self, user_id: int) -> User:
        """Fetch a user by primary key or raise :class:`NotFoundError`."""
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        """Fetch a user by their unique email address."""
        return await self._repository.get_by_email(email)

    async def list_users(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        role: UserRole | None = None,
        search: str | None = None,
    ) -> UserPage:
        """Return one page of users matching the optional filters."""
        page = max(page, 1)
        users, total = await self._repository.list_paginated(
            role=role,
            search=search,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return UserPage(users=users, page=page, limit=limit, total_count=total)

    async def update_user(
        self,
        user_id: int,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
    ) -> User:
        """Apply updates to a user record and persist the changes."""
        user = await self.get_user(user_id)
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if role is not None:
            user.role = role
        if is_active is not None:
            user.is_active = is_active
        await self._session.commit()
        await self._repository.refresh(user)
        logger.info("User updated", extra={"user_id": user.id})
        return user

    async def delete_user(self, user_id: int, *, acting_user_id: int) -> None:
        """Delete a user, removing their tasks and clearing their assignments."""
        if user_id == acting_user_id:
            raise AuthorizationError("You cannot delete your own account")
        user = await self.get_user(user_id)
        await self._repository.release_tasks(user_id)
        await self._repository.delete(user)
        await self._session.commit()
        logger.info("User deleted", extra={"user_id": user_id, "deleted_by": acting_user_id})

    async def get_statistics(self) -> UserStatisticsResult:
        """Return totals for all accounts."""
        by_role = {role.value: 0 for role in UserRole}
        for role, count in (await self._repository.count_by_role()).items():
            by_role[role.value] = count
        total = sum(by_role.values())
        active = await self._repository.count_active()
        return UserStatisticsResult(total=total, active=active, by_role=by_role)


__all__ = ["UserPage", "UserService", "UserStatisticsResult"]
