"""Service layer encapsulating task-related operations."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models import Task, TaskPriority, TaskStatus
from ..models.common import utcnow
from ..repositories import BulkUpdateResult, TaskRepository, UserRepository
from .filters import TaskFilterBuilder, TaskQueryParams, owner_scope, read_scope

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"


@dataclass(slots=True)
class TaskPage:
    """Tasks on the requested page plus the numbers behind the pagination block."""

    tasks: list[Task]
    page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit)

    @property
    def count(self) -> int:
        return len(self.tasks)


@dataclass(slots=True)
class TaskStatisticsResult:
    """Aggregate counts over every task visible to one user."""

    total: int
    completed: int
    pending: int
    in_progress: int
    overdue: int
    high_priority: int

    @property
    def completion_rate(self) -> int:
        """Percentage of completed tasks, rounded half up."""
        if not self.total:
            return 0
        return (200 * self.completed + self.total) // (2 * self.total)


@dataclass(slots=True)
class _Assignment:
    assignee_id: int | None
    assignee_name: str


class TaskService:
    """High-level business orchestration for ``Task`` entities.

    Every operation takes the acting user's id explicitly and scopes its
    query with it; tasks outside that scope are reported as missing.
    """

    def __init__(self, session: AsyncSession, filter_builder: TaskFilterBuilder | None = None) -> None:
        self._session = session
        self._repository = TaskRepository(session)
        self._user_repository = UserRepository(session)
        self._filter_builder = filter_builder or TaskFilterBuilder()

    async def _resolve_assignee(self, email: str) -> _Assignment:
        user = await self._user_repository.get_by_email(email)
        if user is None:
            return _Assignment(assignee_id=None, assignee_name=email)
        return _Assignment(assignee_id=user.id, assignee_name=user.full_name)

    async def _reload(self, task_id: int, user_id: int) -> Task:
        task = await self._repository.find_one(task_id, read_scope(user_id))
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return task

    async def list_tasks(self, params: TaskQueryParams, *, user_id: int) -> TaskPage:
        """Return one filtered, sorted page of tasks created by ``user_id``."""
        task_filter = self._filter_builder.build(params, user_id=user_id)
        tasks, total = await self._repository.find_page(
            conditions=task_filter.conditions,
            order_by=task_filter.order_by,
            offset=task_filter.offset,
            limit=task_filter.limit,
        )
        return TaskPage(tasks=tasks, page=task_filter.page, limit=task_filter.limit, total_count=total)

    async def get_task(self, task_id: int, *, user_id: int) -> Task:
        """Return a task the user created or is assigned to."""
        return await self._reload(task_id, user_id)

    async def create_task(
        self,
        *,
        user_id: int,
        title: str,
        description: str | None = None,
        status: TaskStatus = TaskStatus.PENDING,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: datetime | None = None,
        assignee_email: str | None = None,
        tags: Sequence[str] = (),
        estimated_hours: float | None = None,
        actual_hours: float | None = None,
    ) -> Task:
        """Create a new task owned by ``user_id``."""
        task = Task(
            title=title,
            description=description,
            priority=priority,
            due_date=due_date,
            tags=list(tags),
            estimated_hours=estimated_hours,
            actual_hours=actual_hours,
            created_by_id=user_id,
        )
        task.transition_status(status)
        if assignee_email:
            assignment = await self._resolve_assignee(assignee_email)
            task.assignee_id = assignment.assignee_id
            task.assignee_name = assignment.assignee_name

        await self._repository.add(task)
        await self._session.commit()
        logger.info(
            "Task created",
            extra={"task_id": task.id, "user_id": user_id, "status": task.status.value},
        )
        return await self._reload(task.id, user_id)

    async def update_task(self, task_id: int, *, user_id: int, changes: dict[str, Any]) -> Task:
        """Apply a partial update to a task created by ``user_id``."""
        task = await self._repository.find_one(task_id, owner_scope(user_id))
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)

        changes = dict(changes)
        status = changes.pop("status", None)
        assignee_email = changes.pop("assignee_email", None)
        for field, value in changes.items():
            setattr(task, field, value)
        if status is not None:
            task.transition_status(status)
        if assignee_email:
            assignment = await self._resolve_assignee(assignee_email)
            task.assignee_id = assignment.assignee_id
            task.assignee_name = assignment.assignee_name

        await self._session.commit()
        logger.info("Task updated", extra={"task_id": task_id, "user_id": user_id})
        return await self._reload(task_id, user_id)

    async def delete_task(self, task_id: int, *, user_id: int) -> None:
        """Delete a task created by ``user_id``."""
        task = await self._repository.find_one(task_id, owner_scope(user_id))
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        await self._repository.delete(task)
        await self._session.commit()
        logger.info("Task deleted", extra={"task_id": task_id, "user_id": user_id})

    async def get_statistics(self, *, user_id: int, now: datetime | None = None) -> TaskStatisticsResult:
        """Aggregate counts over every task the user created or is assigned to."""
        row = await self._repository.aggregate_statistics(read_scope(user_id), now=now or utcnow())
        return TaskStatisticsResult(
            total=row.total,
            completed=row.completed,
            pending=row.pending,
            in_progress=row.in_progress,
            overdue=row.overdue,
            high_priority=row.high_priority,
        )

    async def bulk_update(
        self,
        task_ids: Sequence[int],
        *,
        user_id: int,
        changes: dict[str, Any],
    ) -> BulkUpdateResult:
        """Overwrite ``changes`` on every listed task created by ``user_id``."""
        if not task_ids:
            raise ValidationError("Task IDs array is required")
        if not changes:
            raise ValidationError("At least one field must be provided for update")
        result = await self._repository.bulk_update(
            task_ids=task_ids,
            scope=owner_scope(user_id),
            changes=changes,
            now=utcnow(),
        )
        await self._session.commit()
        logger.info(
            "Tasks bulk updated",
            extra={
                "user_id": user_id,
                "requested": len(task_ids),
                "matched": result.matched_count,
                "modified": result.modified_count,
            },
        )
        return result

    async def export_tasks(self, *, user_id: int) -> list[Task]:
        """Return every task the user created or is assigned to."""
        return await self._repository.find_all(read_scope(user_id))


__all__ = ["TaskPage", "TaskService", "TaskStatisticsResult"]
