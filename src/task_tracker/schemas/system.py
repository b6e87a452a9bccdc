"""Common system-level response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .common import CamelModel


class RootResponse(CamelModel):
    """Metadata payload returned by the root endpoint."""

    name: str = Field(description="Human-friendly service name")
    environment: str = Field(description="Deployment environment identifier")
    version: str = Field(description="Semantic version of the service")
    api_prefix: str = Field(description="Base path for API routes")


class HealthCheckResponse(BaseModel):
    """Payload returned by the health check endpoint."""

    status: str = Field(default="ok", description="Service health indicator")


class ErrorResponse(CamelModel):
    """Failure envelope returned by every exception handler."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "code": "not_found",
                "message": "Task not found",
                "requestId": "5f2b7c9e0d8a4c1e9b3f6a7d2e1c0b9a",
            }
        }
    )

    success: bool = False
    code: str = Field(description="Machine-readable error identifier")
    message: str = Field(description="Human-readable error message")
    errors: list[Any] | None = Field(
        default=None,
        description="Field-level validation failures, when available.",
    )
    request_id: str | None = None
