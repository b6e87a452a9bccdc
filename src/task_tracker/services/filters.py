"""Translate raw task query parameters into scoped, paginated SQL predicates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

import sqlalchemy as sa
from sqlalchemy.sql import ColumnElement

from ..core.config import Settings
from ..models import Task, TaskPriority, TaskStatus

ALL_VALUES = "all"
DEFAULT_SORT_FIELD = "createdAt"

SORTABLE_COLUMNS: dict[str, Any] = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "title": Task.title,
    "status": Task.status,
    "priority": Task.priority,
    "completedAt": Task.completed_at,
    "estimatedHours": Task.estimated_hours,
    "actualHours": Task.actual_hours,
}


def owner_scope(user_id: int) -> ColumnElement[bool]:
    """Tasks the user created. Used for listing and every write."""
    return Task.created_by_id == user_id


def read_scope(user_id: int) -> ColumnElement[bool]:
    """Tasks the user created or is assigned to."""
    return sa.or_(Task.created_by_id == user_id, Task.assignee_id == user_id)


@dataclass(frozen=True, slots=True)
class TaskQueryParams:
    """Raw list parameters as received from the HTTP layer."""

    page: int = 1
    limit: int | None = None
    status: str | None = None
    priority: str | None = None
    assignee: str | None = None
    search: str | None = None
    sort_by: str | None = None
    sort_order: str | None = None
    due_date: str | None = None


@dataclass(frozen=True, slots=True)
class TaskFilter:
    """Immutable query description consumed by the task repository."""

    conditions: tuple[ColumnElement[bool], ...]
    order_by: tuple[Any, ...]
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Return the configured zone, or ``None`` to use the host's local time."""
    if not name:
        return None
    return ZoneInfo(name)


def _is_filter_value(value: str | None) -> bool:
    return value is not None and value != "" and value != ALL_VALUES


def _parse_calendar_date(value: str, zone: tzinfo | None) -> date | None:
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(zone) if zone is not None else moment.astimezone()
    return moment.date()


def _start_of_day_utc(day: date, zone: tzinfo | None) -> datetime:
    if zone is None:
        local = datetime.combine(day, time.min).astimezone()
    else:
        local = datetime.combine(day, time.min, tzinfo=zone)
    return local.astimezone(timezone.utc)


class TaskFilterBuilder:
    """Build :class:`TaskFilter` instances for a given user.

    Unknown enum values, non-numeric assignee ids and unparseable dates never
    raise; they turn into predicates that match nothing.
    """

    def __init__(
        self,
        *,
        default_page_size: int = 10,
        max_page_size: int = 100,
        zone: tzinfo | None = None,
    ) -> None:
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size
        self._zone = zone

    @classmethod
    def from_settings(cls, settings: Settings) -> "TaskFilterBuilder":
        return cls(
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
            zone=resolve_timezone(settings.local_timezone),
        )

    def build(self, params: TaskQueryParams, *, user_id: int) -> TaskFilter:
        conditions: list[ColumnElement[bool]] = [owner_scope(user_id)]

        if _is_filter_value(params.status):
            conditions.append(self._status_condition(params.status))
        if _is_filter_value(params.priority):
            conditions.append(self._priority_condition(params.priority))
        if _is_filter_value(params.assignee):
            conditions.append(self._assignee_condition(params.assignee))
        if params.search:
            conditions.append(self._search_condition(params.search))
        if params.due_date:
            conditions.append(self.due_date_condition(params.due_date))

        return TaskFilter(
            conditions=tuple(conditions),
            order_by=self._order_by(params.sort_by, params.sort_order),
            page=max(params.page, 1),
            limit=self._clamp_limit(params.limit),
        )

    def due_date_condition(self, value: str) -> ColumnElement[bool]:
        """Match tasks due within the local calendar day named by ``value``."""
        day = _parse_calendar_date(value, self._zone)
        if day is None:
            return sa.false()
        start = _start_of_day_utc(day, self._zone)
        end = _start_of_day_utc(day + timedelta(days=1), self._zone)
        return sa.and_(Task.due_date >= start, Task.due_date < end)

    def _clamp_limit(self, limit: int | None) -> int:
        if limit is None:
            limit = self._default_page_size
        return min(max(limit, 1), self._max_page_size)

    @staticmethod
    def _status_condition(value: str) -> ColumnElement[bool]:
        try:
            status = TaskStatus(value)
        except ValueError:
            return sa.false()
        return Task.status == status

    @staticmethod
    def _priority_condition(value: str) -> ColumnElement[bool]:
        try:
            priority = TaskPriority(value)
        except ValueError:
            return sa.false()
        return Task.priority == priority

    @staticmethod
    def _assignee_condition(value: str) -> ColumnElement[bool]:
        try:
            assignee_id = int(value)
        except ValueError:
            return sa.false()
        return Task.assignee_id == assignee_id

    @staticmethod
    def _search_condition(term: str) -> ColumnElement[bool]:
        return sa.or_(
            Task.title.icontains(term, autoescape=True),
            Task.description.icontains(term, autoescape=True),
            Task.assignee_name.icontains(term, autoescape=True),
        )

    @staticmethod
    def _order_by(sort_by: str | None, sort_order: str | None) -> tuple[Any, ...]:
        column = SORTABLE_COLUMNS.get(sort_by or DEFAULT_SORT_FIELD, Task.created_at)
        if sort_order == "asc":
            return (column.asc(), Task.id.asc())
        return (column.desc(), Task.id.desc())


__all__ = [
    "SORTABLE_COLUMNS",
    "TaskFilter",
    "TaskFilterBuilder",
    "TaskQueryParams",
    "owner_scope",
    "read_scope",
    "resolve_timezone",
]
