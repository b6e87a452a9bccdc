"""Repository for interacting with user persistence models."""

from __future__ import annotations

from sqlalchemy import delete, func, or_, update
from sqlmodel import select

from ..models import Task, User, UserRole
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Concrete repository for CRUD operations on ``User`` entities."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Return a user matching the supplied email if it exists."""
        result = await self.session.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        """Return a user matching the supplied username if it exists."""
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def list_paginated(
        self,
        *,
        role: UserRole | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        """Return users matching the filters along with the total count."""
        conditions = []
        if role is not None:
            conditions.append(User.role == role)
        if is_active is not None:
            conditions.append(User.is_active.is_(is_active))
        if search:
            conditions.append(
                or_(
                    User.username.icontains(search, autoescape=True),
                    User.email.icontains(search, autoescape=True),
                    User.first_name.icontains(search, autoescape=True),
                    User.last_name.icontains(search, autoescape=True),
                )
            )
        query = select(User).where(*conditions).order_by(User.created_at.desc(), User.id.desc())
        result = await self.session.execute(query.offset(offset).limit(limit))
        users = list(result.scalars().all())
        total = await self.count_where(conditions)
        return users, total

    async def count_by_role(self) -> dict[UserRole, int]:
        """Return the number of users per role."""
        result = await self.session.execute(select(User.role, func.count()).group_by(User.role))
        return {UserRole(role): int(count) for role, count in result.all()}

    async def count_active(self) -> int:
        return await self.count_where([User.is_active.is_(True)])

    async def release_tasks(self, user_id: int) -> None:
        """Drop tasks created by ``user_id`` and clear their assignments elsewhere."""
        await self.session.execute(delete(Task).where(Task.created_by_id == user_id))
        await self.session.execute(
            update(Task).where(Task.assignee_id == user_id).values(assignee_id=None)
        )
