"""Database repositories for encapsulating persistence logic."""

from __future__ import annotations

from .tasks import BulkUpdateResult, TaskRepository, TaskStatisticsRow
from .users import UserRepository

__all__ = ["BulkUpdateResult", "TaskRepository", "TaskStatisticsRow", "UserRepository"]
