from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from task_tracker import __version__
from task_tracker.core.config import Settings
from task_tracker.main import create_app

pytestmark = pytest.mark.asyncio


async def test_healthz_reports_ok(client: AsyncClient) -> None:
    response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_root_exposes_service_metadata(client: AsyncClient) -> None:
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {
        "name": "Task Tracker API",
        "environment": "test",
        "version": __version__,
        "apiPrefix": "/api",
    }


async def test_openapi_schema_is_served_under_api_prefix(client: AsyncClient) -> None:
    response = await client.get("/api/openapi.json")

    assert response.status_code == 200
    schema = response.json()
    paths = schema["paths"]
    assert "/api/tasks" in paths
    assert "/api/tasks/bulk" in paths
    assert "/api/auth/login" in paths
    password_flow = schema["components"]["securitySchemes"]["OAuth2PasswordBearer"]["flows"]["password"]
    assert password_flow["tokenUrl"] == "/api/auth/login"


async def test_openapi_login_url_follows_configured_prefix() -> None:
    application = create_app(Settings(environment="test", api_prefix="/v2/"))
    transport = ASGITransport(app=application)

    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        response = await http_client.get("/v2/openapi.json")

    assert response.status_code == 200
    schema = response.json()
    assert "/v2/auth/login" in schema["paths"]
    password_flow = schema["components"]["securitySchemes"]["OAuth2PasswordBearer"]["flows"]["password"]
    assert password_flow["tokenUrl"] == "/v2/auth/login"
