from __future__ import annotations

import os
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from itertools import count
from typing import Any

os.environ.setdefault("ENVIRONMENT", "test")

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from task_tracker.core.config import get_settings
from task_tracker.core.security import revoked_tokens
from task_tracker.deps import get_db_session
from task_tracker.main import create_app
from task_tracker.models import Task, TaskPriority, TaskStatus, User, UserRole
from task_tracker.services import UserService

DEFAULT_PASSWORD = "StrongPass123"


@dataclass(slots=True)
class AuthenticatedUser:
    user: User
    email: str
    password: str
    tokens: dict[str, Any] | None

    @property
    def id(self) -> int:
        if self.user.id is None:  # pragma: no cover
            raise RuntimeError("Persisted user is missing an id.")
        return self.user.id

    @property
    def access_token(self) -> str:
        if not self.tokens:
            raise RuntimeError("User has not been authenticated.")
        return self.tokens["accessToken"]

    @property
    def refresh_token(self) -> str:
        if not self.tokens:
            raise RuntimeError("User has not been authenticated.")
        return self.tokens["refreshToken"]

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


UserFactory = Callable[..., Awaitable[AuthenticatedUser]]
TaskFactory = Callable[..., Awaitable[Task]]


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def app(session: AsyncSession) -> AsyncIterator[FastAPI]:
    get_settings.cache_clear()
    revoked_tokens.clear()
    application = create_app(get_settings())

    async def _override_db_session() -> AsyncIterator[AsyncSession]:
        yield session

    application.dependency_overrides[get_db_session] = _override_db_session
    try:
        yield application
    finally:
        application.dependency_overrides.clear()
        revoked_tokens.clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def authenticated_user(
    session: AsyncSession,
    client: AsyncClient,
) -> AsyncIterator[UserFactory]:
    user_service = UserService(session)
    counter = count()

    async def _factory(
        *,
        email: str | None = None,
        username: str | None = None,
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Test",
        last_name: str = "User",
        role: UserRole = UserRole.USER,
        is_active: bool = True,
        login: bool = True,
    ) -> AuthenticatedUser:
        index = next(counter)
        actual_email = email or f"user-{index}@example.com"
        user = await user_service.create_user(
            email=actual_email,
            username=username or f"user_{index}",
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=is_active,
        )
        tokens: dict[str, Any] | None = None
        if login:
            response = await client.post(
                "/api/auth/login",
                data={"username": actual_email, "password": password},
            )
            assert response.status_code == 200, response.text
            tokens = response.json()["data"]["tokens"]
        return AuthenticatedUser(user=user, email=actual_email, password=password, tokens=tokens)

    yield _factory


@pytest_asyncio.fixture
async def task_factory(session: AsyncSession) -> AsyncIterator[TaskFactory]:
    """Insert tasks directly, bypassing request validation (e.g. past due dates)."""

    async def _factory(
        owner: AuthenticatedUser,
        *,
        title: str = "Seeded task",
        description: str | None = None,
        status: TaskStatus = TaskStatus.PENDING,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: datetime | None = None,
        assignee: AuthenticatedUser | None = None,
        completed_at: datetime | None = None,
    ) -> Task:
        task = Task(
            title=title,
            description=description,
            priority=priority,
            due_date=due_date,
            created_by_id=owner.id,
        )
        task.transition_status(status)
        if completed_at is not None:
            task.completed_at = completed_at
        if assignee is not None:
            task.assignee_id = assignee.id
            task.assignee_name = assignee.user.full_name
        session.add(task)
        await session.commit()
        return task

    yield _factory
