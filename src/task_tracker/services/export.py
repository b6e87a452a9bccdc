"""Serialise task collections for download."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from ..models import Task
from ..models.common import ensure_utc


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"

    @classmethod
    def parse(cls, value: str | None) -> "ExportFormat":
        """Return the matching format, falling back to JSON for anything unknown."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.JSON


CSV_HEADERS = (
    "Title",
    "Description",
    "Status",
    "Priority",
    "Due Date",
    "Assignee",
    "Created At",
    "Completed At",
)
CSV_MEDIA_TYPE = "text/csv"
CSV_FILENAME = "tasks.csv"


def _iso_date(value: datetime | None) -> str:
    if value is None:
        return ""
    return ensure_utc(value).date().isoformat()


def task_to_csv_row(task: Task) -> list[str]:
    return [
        task.title,
        task.description or "",
        task.status.value,
        task.priority.value,
        _iso_date(task.due_date),
        task.assignee_name or "",
        _iso_date(task.created_at),
        _iso_date(task.completed_at),
    ]


def tasks_to_csv(tasks: Iterable[Task]) -> str:
    """Render ``tasks`` as CSV with every field quoted.

    Embedded double quotes are escaped by doubling them.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for task in tasks:
        writer.writerow(task_to_csv_row(task))
    return buffer.getvalue()


__all__ = [
    "CSV_FILENAME",
    "CSV_HEADERS",
    "CSV_MEDIA_TYPE",
    "ExportFormat",
    "task_to_csv_row",
    "tasks_to_csv",
]
