"""Service layer for the task tracker application."""

from __future__ import annotations

from .auth import AuthService, TokenPair
from .filters import TaskFilter, TaskFilterBuilder, TaskQueryParams
from .tasks import TaskPage, TaskService, TaskStatisticsResult
from .users import UserPage, UserService, UserStatisticsResult

__all__ = [
    "AuthService",
    "TaskFilter",
    "TaskFilterBuilder",
    "TaskPage",
    "TaskQueryParams",
    "TaskService",
    "TaskStatisticsResult",
    "TokenPair",
    "UserPage",
    "UserService",
    "UserStatisticsResult",
]
