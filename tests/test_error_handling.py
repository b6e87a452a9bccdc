from __future__ import annotations

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from task_tracker.errors import ApplicationError, ConflictError, NotFoundError

pytestmark = pytest.mark.asyncio


class ExamplePayload(BaseModel):
    name: str


async def test_application_error_response_schema(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/application")
    async def trigger_application_error() -> None:  # pragma: no cover - defined in test
        raise ApplicationError(
            "Example failure",
            code="example_error",
            status_code=status.HTTP_418_IM_A_TEAPOT,
            errors=[{"field": "foo"}],
        )

    response = await client.get("/error/application")

    assert response.status_code == status.HTTP_418_IM_A_TEAPOT
    request_id = response.headers["X-Request-ID"]
    assert response.json() == {
        "success": False,
        "code": "example_error",
        "message": "Example failure",
        "errors": [{"field": "foo"}],
        "requestId": request_id,
    }


@pytest.mark.parametrize(
    ("error", "expected_status", "expected_code"),
    [
        (NotFoundError("Task not found"), status.HTTP_404_NOT_FOUND, "not_found"),
        (ConflictError(), status.HTTP_409_CONFLICT, "conflict"),
    ],
)
async def test_domain_errors_map_to_status_codes(
    app: FastAPI,
    client: AsyncClient,
    error: ApplicationError,
    expected_status: int,
    expected_code: str,
) -> None:
    @app.get("/error/domain")
    async def trigger_domain_error() -> None:  # pragma: no cover - defined in test
        raise error

    response = await client.get("/error/domain")

    assert response.status_code == expected_status
    assert response.json()["code"] == expected_code
    assert response.json()["message"] == error.message


async def test_validation_error_response_schema(app: FastAPI, client: AsyncClient) -> None:
    @app.post("/error/validation")
    async def create_item(_: ExamplePayload) -> None:  # pragma: no cover - defined in test
        return None

    response = await client.post("/error/validation", json={})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["message"] == "Validation failed"
    assert payload["errors"] == [
        {"field": "name", "location": "body", "message": "Field required", "type": "missing"}
    ]
    assert payload["requestId"] == response.headers["X-Request-ID"]


async def test_not_found_route_uses_error_envelope(client: AsyncClient) -> None:
    response = await client.get("/error/not-found")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    payload = response.json()
    assert payload["success"] is False
    assert payload["code"] == "not_found"
    assert payload["message"] == "Not Found"


async def test_integrity_error_response_schema(app: FastAPI, client: AsyncClient) -> None:
    @app.get("/error/database")
    async def trigger_integrity_error() -> None:  # pragma: no cover - defined in test
        raise IntegrityError("statement", {}, Exception("constraint"))

    response = await client.get("/error/database")

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "conflict"
    assert "statement" not in response.text


async def test_unhandled_error_hides_internal_details(app: FastAPI) -> None:
    @app.get("/error/unhandled")
    async def trigger_unhandled_error() -> None:  # pragma: no cover - defined in test
        raise RuntimeError("Sensitive detail")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/error/unhandled")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {
        "success": False,
        "code": "server_error",
        "message": "Internal server error",
        "requestId": response.headers["X-Request-ID"],
    }
    assert "Sensitive" not in response.text


async def test_request_id_header_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/healthz", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-123"


async def test_request_id_is_generated_when_missing(client: AsyncClient) -> None:
    response = await client.get("/healthz")

    assert len(response.headers["X-Request-ID"]) == 32
