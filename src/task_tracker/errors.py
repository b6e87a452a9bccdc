"""Application-level exception taxonomy and the HTTP error boundary."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Mapping

from fastapi import FastAPI, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER, request_id_scope
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for domain-specific errors."""

    default_message = "Application error."
    default_code = "application_error"
    default_status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        errors: list[Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status_code
        self.errors = errors
        self.headers = dict(headers) if headers else None


class ValidationError(ApplicationError):
    """Malformed or out-of-range input."""

    default_message = "Validation failed"
    default_code = "validation_error"
    default_status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ApplicationError):
    """Missing or invalid credentials."""

    default_message = "Authentication required"
    default_code = "unauthorized"
    default_status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class AuthorizationError(ApplicationError):
    """Valid identity lacking the required role or account state."""

    default_message = "Not authorized to access this resource"
    default_code = "forbidden"
    default_status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApplicationError):
    """Missing resources, including those outside the caller's scope."""

    default_message = "Resource not found"
    default_code = "not_found"
    default_status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApplicationError):
    """Duplicate values for unique fields."""

    default_message = "Resource already exists"
    default_code = "conflict"
    default_status_code = status.HTTP_409_CONFLICT


class ServerError(ApplicationError):
    """Unexpected server failures."""

    default_message = "Internal server error"
    default_code = "server_error"
    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


_HTTP_STATUS_CODE_MAP: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def _validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Strip raw input and internals from pydantic error entries."""
    cleaned: list[dict[str, Any]] = []
    for error in exc.errors():
        location = error.get("loc", ("body",))
        cleaned.append(
            {
                "field": ".".join(str(part) for part in location[1:]),
                "location": location[0],
                "message": error.get("msg", ""),
                "type": error.get("type", ""),
            }
        )
    return cleaned


def _http_exception_message(status_code: int, detail: Any) -> str:
    if isinstance(detail, str):
        return detail
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _respond(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    errors: list[Any] | None = None,
    headers: Mapping[str, str] | None = None,
    log_message: str,
    exc_info: BaseException | None = None,
) -> JSONResponse:
    """Log the failure under the request's id and render the error envelope."""
    request_id: str | None = getattr(request.state, "request_id", None)
    with request_id_scope(request_id):
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(log_message, exc_info=exc_info, extra={"code": code})
        else:
            logger.warning(
                log_message,
                extra={"code": code, "status_code": status_code, "path": request.url.path},
            )

    payload = ErrorResponse(code=code, message=message, errors=errors, request_id=request_id)
    response = JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(payload.model_dump(by_alias=True, exclude_none=True)),
        headers=dict(headers) if headers else None,
    )
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
    return _respond(
        request,
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        errors=exc.errors,
        headers=exc.headers,
        log_message="Application error encountered",
    )


async def _handle_request_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return _respond(
        request,
        status_code=status.HTTP_400_BAD_REQUEST,
        code=ValidationError.default_code,
        message=ValidationError.default_message,
        errors=_validation_errors(exc),
        log_message="Request validation failed",
    )


async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    return _respond(
        request,
        status_code=status.HTTP_409_CONFLICT,
        code=ConflictError.default_code,
        message=ConflictError.default_message,
        log_message="Database integrity error encountered",
    )


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _respond(
        request,
        status_code=exc.status_code,
        code=_HTTP_STATUS_CODE_MAP.get(exc.status_code, "http_error"),
        message=_http_exception_message(exc.status_code, exc.detail),
        headers=exc.headers or None,
        log_message="HTTP exception raised",
    )


async def _handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    return _respond(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ServerError.default_code,
        message=ServerError.default_message,
        log_message="Unhandled application error",
        exc_info=exc,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the provided FastAPI app."""

    app.add_exception_handler(ApplicationError, _handle_application_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
    app.add_exception_handler(IntegrityError, _handle_integrity_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(Exception, _handle_unhandled_exception)


__all__ = [
    "ApplicationError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "NotFoundError",
    "ServerError",
    "ValidationError",
    "register_exception_handlers",
]
