"""Domain models exposed by the task tracker."""

from __future__ import annotations

from .common import TimestampMixin, ensure_utc, utcnow
from .task import (
    DESCRIPTION_MAX_LENGTH,
    ESTIMATED_HOURS_MAX,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Task,
    TaskBase,
    TaskPriority,
    TaskStatus,
    days_until_due,
    task_is_overdue,
)
from .user import User, UserBase, UserRole

__all__ = [
    "DESCRIPTION_MAX_LENGTH",
    "ESTIMATED_HOURS_MAX",
    "TAG_MAX_LENGTH",
    "TITLE_MAX_LENGTH",
    "Task",
    "TaskBase",
    "TaskPriority",
    "TaskStatus",
    "TimestampMixin",
    "User",
    "UserBase",
    "UserRole",
    "days_until_due",
    "ensure_utc",
    "task_is_overdue",
    "utcnow",
]
