from __future__ import annotations

from datetime import timedelta

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from task_tracker.errors import ConflictError, NotFoundError, ValidationError
from task_tracker.models import TaskPriority, TaskStatus, User, UserRole
from task_tracker.models.common import utcnow
from task_tracker.services import TaskQueryParams, TaskService, UserService

pytestmark = pytest.mark.asyncio


async def _create_user(session: AsyncSession, name: str, **kwargs) -> User:
    return await UserService(session).create_user(
        email=f"{name}@example.com",
        username=name,
        password="StrongPass123",
        first_name=name.title(),
        last_name="Tester",
        **kwargs,
    )


async def test_user_service_crud_flow(session: AsyncSession) -> None:
    user_service = UserService(session)

    created = await _create_user(session, "alice")
    assert created.id is not None
    assert created.role is UserRole.USER
    assert created.hashed_password != "StrongPass123"

    by_email = await user_service.get_user_by_email("ALICE@example.com ")
    assert by_email is not None
    assert by_email.id == created.id

    updated = await user_service.update_user(created.id, last_name="Updated", is_active=False)
    assert updated.full_name == "Alice Updated"
    assert updated.is_active is False

    page = await user_service.list_users(page=0, limit=5)
    assert page.page == 1
    assert [user.id for user in page.users] == [created.id]
    assert page.total_pages == 1

    stats = await user_service.get_statistics()
    assert (stats.total, stats.active, stats.inactive) == (1, 0, 1)

    with pytest.raises(ConflictError):
        await _create_user(session, "alice")
    with pytest.raises(NotFoundError):
        await user_service.get_user(9999)


async def test_task_service_resolves_assignees_by_email(session: AsyncSession) -> None:
    owner = await _create_user(session, "owner")
    helper = await _create_user(session, "helper")
    service = TaskService(session)

    known = await service.create_task(
        user_id=owner.id,
        title="Known assignee",
        assignee_email="helper@example.com",
    )
    unknown = await service.create_task(
        user_id=owner.id,
        title="Unknown assignee",
        assignee_email="ghost@example.com",
    )

    assert known.assignee_id == helper.id
    assert known.assignee_name == "Helper Tester"
    assert unknown.assignee_id is None
    assert unknown.assignee_name == "ghost@example.com"

    visible_to_helper = await service.get_task(known.id, user_id=helper.id)
    assert visible_to_helper.id == known.id
    with pytest.raises(NotFoundError):
        await service.update_task(known.id, user_id=helper.id, changes={"title": "Hijack"})


async def test_task_service_update_and_status_side_effect(session: AsyncSession) -> None:
    owner = await _create_user(session, "owner")
    service = TaskService(session)
    task = await service.create_task(user_id=owner.id, title="Draft", status=TaskStatus.COMPLETED)
    first_completion = task.completed_at
    assert first_completion is not None

    task = await service.update_task(
        task.id,
        user_id=owner.id,
        changes={"priority": TaskPriority.HIGH, "status": TaskStatus.COMPLETED},
    )
    assert task.priority is TaskPriority.HIGH
    assert task.completed_at == first_completion

    task = await service.update_task(task.id, user_id=owner.id, changes={"status": TaskStatus.PENDING})
    assert task.completed_at is None

    await service.delete_task(task.id, user_id=owner.id)
    with pytest.raises(NotFoundError):
        await service.get_task(task.id, user_id=owner.id)


async def test_task_service_list_and_statistics(session: AsyncSession) -> None:
    owner = await _create_user(session, "owner")
    service = TaskService(session)
    for index in range(3):
        await service.create_task(
            user_id=owner.id,
            title=f"Task {index}",
            priority=TaskPriority.HIGH if index == 0 else TaskPriority.LOW,
            due_date=utcnow() + timedelta(days=index + 1),
        )

    page = await service.list_tasks(
        TaskQueryParams(limit=2, sort_by="title", sort_order="asc"),
        user_id=owner.id,
    )
    assert [task.title for task in page.tasks] == ["Task 0", "Task 1"]
    assert (page.total_count, page.total_pages, page.count) == (3, 2, 2)

    stats = await service.get_statistics(user_id=owner.id, now=utcnow() + timedelta(days=10))
    assert stats.total == 3
    assert stats.overdue == 3
    assert stats.high_priority == 1
    assert stats.completion_rate == 0


async def test_task_service_bulk_update_refreshes_loaded_tasks(session: AsyncSession) -> None:
    owner = await _create_user(session, "owner", role=UserRole.MANAGER)
    service = TaskService(session)
    task = await service.create_task(user_id=owner.id, title="Bulk me")

    result = await service.bulk_update([task.id], user_id=owner.id, changes={"status": TaskStatus.COMPLETED})

    assert (result.matched_count, result.modified_count) == (1, 1)
    reloaded = await service.get_task(task.id, user_id=owner.id)
    assert reloaded.status is TaskStatus.COMPLETED
    assert reloaded.completed_at is not None

    with pytest.raises(ValidationError):
        await service.bulk_update([], user_id=owner.id, changes={"status": TaskStatus.PENDING})
    with pytest.raises(ValidationError):
        await service.bulk_update([task.id], user_id=owner.id, changes={})
