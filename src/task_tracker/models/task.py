"""Task domain models built with SQLModel."""

import math
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .common import TimestampMixin, ensure_utc, utcnow

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .user import User

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
TAG_MAX_LENGTH = 20
ESTIMATED_HOURS_MAX = 1000


class TaskStatus(str, Enum):
    """Enumeration of possible task states."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Enumeration of task priorities."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _enum_values(enum_type: type[Enum]) -> list[str]:
    return [member.value for member in enum_type]


def task_is_overdue(
    due_date: datetime | None,
    status: TaskStatus,
    *,
    now: datetime | None = None,
) -> bool:
    """A task is overdue when it has a past due date and is not completed."""
    if due_date is None or status == TaskStatus.COMPLETED:
        return False
    return ensure_utc(due_date) < (now or utcnow())


def days_until_due(due_date: datetime | None, *, now: datetime | None = None) -> int | None:
    """Whole days (rounded up) between ``now`` and ``due_date``."""
    if due_date is None:
        return None
    remaining = ensure_utc(due_date) - (now or utcnow())
    return math.ceil(remaining / timedelta(days=1))


class TaskBase(SQLModel, table=False):
    """Shared attributes for task models."""

    title: str = Field(
        max_length=TITLE_MAX_LENGTH,
        sa_column=sa.Column(sa.String(length=TITLE_MAX_LENGTH), nullable=False),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=DESCRIPTION_MAX_LENGTH), nullable=True),
    )
    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        sa_column=sa.Column(
            sa.Enum(
                TaskStatus,
                name="task_status",
                native_enum=False,
                validate_strings=True,
                values_callable=_enum_values,
            ),
            nullable=False,
            server_default=TaskStatus.PENDING.value,
        ),
    )
    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        sa_column=sa.Column(
            sa.Enum(
                TaskPriority,
                name="task_priority",
                native_enum=False,
                validate_strings=True,
                values_callable=_enum_values,
            ),
            nullable=False,
            server_default=TaskPriority.MEDIUM.value,
        ),
    )
    due_date: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    assignee_name: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=320), nullable=True),
    )
    tags: list[str] = Field(
        default_factory=list,
        sa_column=sa.Column(sa.JSON(), nullable=False, default=list),
    )
    estimated_hours: float | None = Field(
        default=None,
        sa_column=sa.Column(sa.Float(), nullable=True),
    )
    actual_hours: float | None = Field(
        default=None,
        sa_column=sa.Column(sa.Float(), nullable=True),
    )


class Task(TaskBase, TimestampMixin, table=True):
    """Persistent task model."""

    __tablename__ = "tasks"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
        sa.Index("ix_tasks_created_by_status", "created_by_id", "status"),
        sa.Index("ix_tasks_assignee_status", "assignee_id", "status"),
        sa.Index("ix_tasks_due_date_status", "due_date", "status"),
        sa.Index("ix_tasks_priority_status", "priority", "status"),
    )

    id: int | None = Field(default=None, primary_key=True)
    created_by_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    assignee_id: int | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )
    completed_at: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )

    created_by: "User" = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Task.created_by_id]", "lazy": "selectin"},
    )
    assignee: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Task.assignee_id]", "lazy": "selectin"},
    )

    @property
    def is_overdue(self) -> bool:
        return task_is_overdue(self.due_date, self.status)

    def transition_status(self, status: TaskStatus, *, now: datetime | None = None) -> bool:
        """Move the task to ``status`` and keep ``completed_at`` consistent.

        Entering ``completed`` stamps ``completed_at`` unless it is already
        set; leaving it clears the stamp. Returns ``True`` when the status
        actually changed.
        """
        if status == self.status and self.id is not None:
            return False
        self.status = status
        if status == TaskStatus.COMPLETED:
            if self.completed_at is None:
                self.completed_at = now or utcnow()
        else:
            self.completed_at = None
        return True


__all__ = [
    "DESCRIPTION_MAX_LENGTH",
    "ESTIMATED_HOURS_MAX",
    "TAG_MAX_LENGTH",
    "TITLE_MAX_LENGTH",
    "Task",
    "TaskBase",
    "TaskPriority",
    "TaskStatus",
    "days_until_due",
    "task_is_overdue",
]
