"""Task-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    computed_field,
    field_validator,
    model_validator,
)

from ..models import (
    DESCRIPTION_MAX_LENGTH,
    ESTIMATED_HOURS_MAX,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TaskPriority,
    TaskStatus,
    days_until_due,
    task_is_overdue,
)
from ..models.common import ensure_utc, utcnow
from .common import CamelModel, Pagination
from .user import UserSummary

TitleStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=TITLE_MAX_LENGTH),
]
DescriptionStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, max_length=DESCRIPTION_MAX_LENGTH),
]
TagStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=TAG_MAX_LENGTH)]
EstimatedHours = Annotated[float, Field(ge=0, le=ESTIMATED_HOURS_MAX)]
ActualHours = Annotated[float, Field(ge=0)]


def _future_due_date(value: datetime) -> datetime:
    value = ensure_utc(value)
    if value < utcnow():
        raise ValueError("Due date must be in the future")
    return value


FutureDueDate = Annotated[datetime, AfterValidator(_future_due_date)]

TASK_READ_EXAMPLE = {
    "id": 1,
    "title": "Draft product documentation",
    "description": "Outline sections for the public API guide.",
    "status": TaskStatus.PENDING.value,
    "priority": TaskPriority.HIGH.value,
    "dueDate": "2030-01-15T17:00:00Z",
    "assignee": {"id": 7, "firstName": "Ada", "lastName": "Lovelace", "username": "ada"},
    "assigneeName": "Ada Lovelace",
    "createdById": 42,
    "tags": ["docs"],
    "completedAt": None,
    "estimatedHours": 4.0,
    "actualHours": None,
    "createdAt": "2029-12-01T12:00:00Z",
    "updatedAt": "2029-12-02T08:30:00Z",
    "isOverdue": False,
    "daysUntilDue": 44,
}


def _reject_nulls(model: CamelModel, *names: str) -> None:
    for name in names:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")


class TaskCreate(CamelModel):
    """Payload for creating a new task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Draft product documentation",
                "description": "Outline sections for the public API guide.",
                "priority": TaskPriority.HIGH.value,
                "dueDate": "2030-01-15T17:00:00Z",
                "assigneeEmail": "ada@example.com",
                "tags": ["docs"],
            }
        }
    )

    title: TitleStr
    description: DescriptionStr | None = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: FutureDueDate | None = None
    assignee_email: EmailStr | None = None
    tags: list[TagStr] = Field(default_factory=list)
    estimated_hours: EstimatedHours | None = None
    actual_hours: ActualHours | None = None


class TaskUpdate(CamelModel):
    """Payload for partially updating an existing task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": TaskStatus.IN_PROGRESS.value,
                "actualHours": 1.5,
            }
        }
    )

    title: TitleStr | None = None
    description: DescriptionStr | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: FutureDueDate | None = None
    assignee_email: EmailStr | None = None
    tags: list[TagStr] | None = None
    estimated_hours: EstimatedHours | None = None
    actual_hours: ActualHours | None = None

    @model_validator(mode="after")
    def _ensure_required_fields_kept(self) -> "TaskUpdate":
        _reject_nulls(self, "title", "status", "priority", "tags")
        return self


class BulkTaskChanges(CamelModel):
    """Fields that may be overwritten across many tasks at once."""

    model_config = ConfigDict(extra="forbid")

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: FutureDueDate | None = None
    estimated_hours: EstimatedHours | None = None
    actual_hours: ActualHours | None = None

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "BulkTaskChanges":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update.")
        _reject_nulls(self, "status", "priority")
        return self

    def as_changes(self) -> dict[str, Any]:
        """Return the explicitly supplied fields keyed by column name."""
        return self.model_dump(exclude_unset=True)


class BulkTaskUpdate(CamelModel):
    """Request body for the bulk update endpoint."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "taskIds": [1, 2, 3],
                "updates": {"status": TaskStatus.COMPLETED.value},
            }
        }
    )

    task_ids: list[int] = Field(min_length=1)
    updates: BulkTaskChanges


class BulkUpdateSummary(CamelModel):
    matched_count: int = Field(ge=0)
    modified_count: int = Field(ge=0)


class TaskRead(CamelModel):
    """Public representation of a task."""

    model_config = ConfigDict(json_schema_extra={"example": TASK_READ_EXAMPLE})

    id: int
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None = None
    assignee: UserSummary | None = None
    assignee_name: str | None = None
    created_by_id: int
    tags: list[str] = Field(default_factory=list)
    completed_at: datetime | None = None
    estimated_hours: float | None = None
    actual_hours: float | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("due_date", "completed_at", "created_at", "updated_at", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @computed_field(alias="isOverdue")  # type: ignore[prop-decorator]
    @property
    def is_overdue(self) -> bool:
        return task_is_overdue(self.due_date, self.status)

    @computed_field(alias="daysUntilDue")  # type: ignore[prop-decorator]
    @property
    def days_until_due(self) -> int | None:
        return days_until_due(self.due_date)


class TaskDetail(TaskRead):
    """Single task payload with its creator resolved."""

    created_by: UserSummary


class TaskListData(CamelModel):
    """Paginated collection of tasks."""

    tasks: list[TaskRead]
    pagination: Pagination


class TaskStatistics(CamelModel):
    """Aggregated counts over every task visible to the caller."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total": 4,
                "completed": 1,
                "pending": 2,
                "inProgress": 1,
                "overdue": 1,
                "highPriority": 2,
                "completionRate": 25,
            }
        }
    )

    total: int = Field(ge=0)
    completed: int = Field(ge=0)
    pending: int = Field(ge=0)
    in_progress: int = Field(ge=0)
    overdue: int = Field(ge=0)
    high_priority: int = Field(ge=0)
    completion_rate: int = Field(ge=0, le=100)


class TaskExport(CamelModel):
    """JSON export payload."""

    success: bool = True
    data: list[TaskDetail]
    count: int = Field(ge=0)


__all__ = [
    "BulkTaskChanges",
    "BulkTaskUpdate",
    "BulkUpdateSummary",
    "TaskCreate",
    "TaskDetail",
    "TaskExport",
    "TaskListData",
    "TaskRead",
    "TaskStatistics",
    "TaskUpdate",
]
