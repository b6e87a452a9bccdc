"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .auth import AuthResponse, AuthTokens, RefreshRequest, RegisterRequest, TokenPayload
from .common import CamelModel, Envelope, MessageResponse, Pagination
from .system import ErrorResponse, HealthCheckResponse, RootResponse
from .task import (
    BulkTaskChanges,
    BulkTaskUpdate,
    BulkUpdateSummary,
    TaskCreate,
    TaskDetail,
    TaskExport,
    TaskListData,
    TaskRead,
    TaskStatistics,
    TaskUpdate,
)
from .user import (
    ProfileUpdate,
    UserAdminUpdate,
    UserListData,
    UserPublic,
    UserStatistics,
    UserSummary,
)

__all__ = [
    "AuthResponse",
    "AuthTokens",
    "BulkTaskChanges",
    "BulkTaskUpdate",
    "BulkUpdateSummary",
    "CamelModel",
    "Envelope",
    "ErrorResponse",
    "HealthCheckResponse",
    "MessageResponse",
    "Pagination",
    "ProfileUpdate",
    "RefreshRequest",
    "RegisterRequest",
    "RootResponse",
    "TaskCreate",
    "TaskDetail",
    "TaskExport",
    "TaskListData",
    "TaskRead",
    "TaskStatistics",
    "TaskUpdate",
    "TokenPayload",
    "UserAdminUpdate",
    "UserListData",
    "UserPublic",
    "UserStatistics",
    "UserSummary",
]
