from __future__ import annotations

from typing import Any, Callable

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


def _registration_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "username": "ada_l",
        "email": "Ada@Example.com",
        "password": "Secret123",
        "firstName": "Ada",
        "lastName": "Lovelace",
    }
    payload.update(overrides)
    return payload


async def test_register_returns_user_and_tokens(client: AsyncClient) -> None:
    response = await client.post("/api/auth/register", json=_registration_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    user = body["data"]["user"]
    assert user["email"] == "ada@example.com"
    assert user["fullName"] == "Ada Lovelace"
    assert user["role"] == "user"
    assert user["isActive"] is True
    assert "hashedPassword" not in user
    tokens = body["data"]["tokens"]
    assert tokens["tokenType"] == "bearer"
    assert tokens["accessToken"]
    assert tokens["refreshToken"]


@pytest.mark.parametrize(
    ("password", "missing"),
    [
        ("secret123", "one uppercase letter"),
        ("SECRET123", "one lowercase letter"),
        ("SecretPass", "one number"),
    ],
)
async def test_register_enforces_password_strength(
    client: AsyncClient,
    password: str,
    missing: str,
) -> None:
    response = await client.post("/api/auth/register", json=_registration_payload(password=password))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "validation_error"
    assert any(missing in error["message"] for error in body["errors"])


@pytest.mark.parametrize(
    "overrides",
    [
        {"password": "Ab1"},
        {"username": "ab"},
        {"username": "has space"},
        {"email": "not-an-email"},
        {"firstName": ""},
    ],
)
async def test_register_rejects_malformed_payloads(
    client: AsyncClient,
    overrides: dict[str, Any],
) -> None:
    response = await client.post("/api/auth/register", json=_registration_payload(**overrides))

    assert response.status_code == 400


async def test_register_rejects_duplicate_email_and_username(client: AsyncClient) -> None:
    first = await client.post("/api/auth/register", json=_registration_payload())
    assert first.status_code == 201

    same_email = await client.post(
        "/api/auth/register",
        json=_registration_payload(username="someone_else", email="ada@example.com"),
    )
    same_username = await client.post(
        "/api/auth/register",
        json=_registration_payload(email="other@example.com"),
    )

    assert same_email.status_code == 409
    assert same_email.json()["code"] == "conflict"
    assert same_username.status_code == 409


async def test_login_with_wrong_password_is_rejected(
    client: AsyncClient,
    authenticated_user: Callable[..., Any],
) -> None:
    user = await authenticated_user(login=False)

    response = await client.post(
        "/api/auth/login",
        data={"username": user.email, "password": "WrongPass123"},
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


async def test_login_reports_inactive_accounts(
    client: AsyncClient,
    authenticated_user: Callable[..., Any],
) -> None:
    user = await authenticated_user(is_active=False, login=False)

    response = await client.post(
        "/api/auth/login",
        data={"username": user.email, "password": user.password},
    )

    assert response.status_code == 403


async def test_login_records_last_login(
    client: AsyncClient,
    authenticated_user: Callable[..., Any],
) -> None:
    user = await authenticated_user()

    response = await client.get("/api/auth/profile", headers=user.headers)

    assert response.status_code == 200
    assert response.json()["data"]["lastLogin"] is not None


async def test_refresh_rotates_tokens(
    client: AsyncClient,
    authenticated_user: Callable[..., Any],
) -> None:
    user = await authenticated_user()

    response = await client.post("/api/auth/refresh", json={"refreshToken": user.refresh_token})

    assert response.status_code == 200
    tokens = response.json()["data"]["tokens"]
    assert tokens["refreshToken"] != user.refresh_token

    replay = await client.post("/api/auth/refresh", json={"refreshToken": user.refresh_token})
    assert replay.status_code == 401
    assert replay.json()["message"] == "Token has been revoked"

    rotated = await client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert rotated.status_code == 200


async def test_refresh_rejects_access_tokens(
    client: AsyncClient,
    authenticated_user: Callable[..., Any],
) -> None:
    user = await authenticated_user()

    response = await client.post("/api/auth/refresh", json={"refreshToken": user.access_token})

    assert response.status_code == 401


async def test_logout_revokes_access_token(
    client: AsyncClient,
    authenticated_user: Callable[..., Any],
) -> None:
    user = await authenticated_user()

    response = await client.post("/api/auth/logout", headers=user.headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Logged out successfully"}

    after = await client.get("/api/auth/profile", headers=user.headers)
    assert after.status_code == 401
    assert after.headers["WWW-Authenticate"] == "Bearer"


async def test_profile_requires_authentication(client: AsyncClient) -> None:
    missing = await client.get("/api/auth/profile")
    garbage = await client.get("/api/auth/profile", headers={"Authorization": "Bearer nope"})

    assert missing.status_code == 401
    assert missing.json()["code"] == "unauthorized"
    assert garbage.status_code == 401


async def test_update_profile_changes_names_only(
    client: AsyncClient,
    authenticated_user: Callable[..., Any],
) -> None:
    user = await authenticated_user(first_name="Grace", last_name="Hopper")

    response = await client.put(
        "/api/auth/profile",
        json={"firstName": "  Amazing ", "role": "admin"},
        headers=user.headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Profile updated successfully"
    assert body["data"]["firstName"] == "Amazing"
    assert body["data"]["lastName"] == "Hopper"
    assert body["data"]["fullName"] == "Amazing Hopper"
    assert body["data"]["role"] == "user"
