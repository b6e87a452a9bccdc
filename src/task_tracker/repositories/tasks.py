"""Repository for interacting with task persistence models."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import and_, case, func, or_, update
from sqlalchemy.sql import ColumnElement
from sqlmodel import select

from ..models import Task, TaskPriority, TaskStatus
from .base import BaseRepository


@dataclass(slots=True)
class TaskStatisticsRow:
    """Raw grouped counts produced by :meth:`TaskRepository.aggregate_statistics`."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    overdue: int = 0
    high_priority: int = 0


@dataclass(slots=True)
class BulkUpdateResult:
    """Outcome of a scoped multi-row update."""

    matched_count: int
    modified_count: int


def _count_if(condition: ColumnElement[bool]) -> ColumnElement[int]:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` persistence operations."""

    model = Task

    async def find_page(
        self,
        *,
        conditions: Sequence[ColumnElement[bool]],
        order_by: Sequence[Any],
        offset: int,
        limit: int,
    ) -> tuple[list[Task], int]:
        """Return one page of tasks matching ``conditions`` and the total match count."""
        query = (
            select(Task)
            .where(*conditions)
            .order_by(*order_by)
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        tasks = list(result.scalars().all())
        total = await self.count_where(conditions)
        return tasks, total

    async def find_one(self, task_id: int, scope: ColumnElement[bool]) -> Task | None:
        """Return the task with ``task_id`` if it falls inside ``scope``."""
        query = (
            select(Task)
            .where(Task.id == task_id, scope)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_all(self, scope: ColumnElement[bool]) -> list[Task]:
        """Return every task inside ``scope`` in insertion order."""
        query = (
            select(Task)
            .where(scope)
            .order_by(Task.id.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def aggregate_statistics(
        self,
        scope: ColumnElement[bool],
        *,
        now: datetime,
    ) -> TaskStatisticsRow:
        """Compute every grouped count for ``scope`` in a single aggregate query."""
        overdue = and_(
            Task.status != TaskStatus.COMPLETED,
            Task.due_date.is_not(None),
            Task.due_date < now,
        )
        query = select(
            func.count(Task.id).label("total"),
            _count_if(Task.status == TaskStatus.COMPLETED).label("completed"),
            _count_if(Task.status == TaskStatus.PENDING).label("pending"),
            _count_if(Task.status == TaskStatus.IN_PROGRESS).label("in_progress"),
            _count_if(overdue).label("overdue"),
            _count_if(Task.priority == TaskPriority.HIGH).label("high_priority"),
        ).where(scope)
        result = await self.session.execute(query)
        row = result.one()
        return TaskStatisticsRow(
            total=int(row.total or 0),
            completed=int(row.completed or 0),
            pending=int(row.pending or 0),
            in_progress=int(row.in_progress or 0),
            overdue=int(row.overdue or 0),
            high_priority=int(row.high_priority or 0),
        )

    async def bulk_update(
        self,
        *,
        task_ids: Sequence[int],
        scope: ColumnElement[bool],
        changes: Mapping[str, Any],
        now: datetime,
    ) -> BulkUpdateResult:
        """Overwrite ``changes`` on every task in ``task_ids`` that lies in ``scope``.

        ``modified_count`` only includes rows where at least one value differs
        from the payload. A status change recomputes ``completed_at`` in the
        same statement.
        """
        targeted = and_(Task.id.in_(list(task_ids)), scope)
        matched = await self.count_where([targeted])
        if not matched or not changes:
            return BulkUpdateResult(matched_count=matched, modified_count=0)

        differs = or_(
            *(getattr(Task, field).is_distinct_from(value) for field, value in changes.items())
        )
        values: dict[str, Any] = dict(changes)
        if "status" in changes:
            if changes["status"] == TaskStatus.COMPLETED:
                values["completed_at"] = func.coalesce(Task.completed_at, now)
            else:
                values["completed_at"] = None
        values["updated_at"] = now

        statement = (
            update(Task)
            .where(targeted, differs)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return BulkUpdateResult(matched_count=matched, modified_count=int(result.rowcount or 0))
