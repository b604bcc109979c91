"""Tests for login and bearer-token authentication."""

import pytest
from httpx import AsyncClient

from app.infrastructure.security.password import get_password_hash
from tests.fakes import Org

PASSWORD = "pallets-and-crates"


@pytest.fixture
def with_password(org: Org) -> Org:
    hashed = get_password_hash(PASSWORD)
    org.users.passwords["u-x"] = hashed
    org.users.passwords["u-y"] = hashed
    org.users.passwords["u-off"] = hashed
    return org


async def test_login_missing_body_returns_422(client: AsyncClient) -> None:
    """POST /api/v1/auth/login with no body returns 422."""
    response = await client.post("/api/v1/auth/login", json={})
    assert response.status_code == 422
    assert response.json()["error"] == "REQUEST_VALIDATION_ERROR"


async def test_login_by_email_returns_token(client: AsyncClient, with_password: Org) -> None:
    response = await client.post(
        "/api/v1/auth/login", json={"login": "x@corp.test", "password": PASSWORD}
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == "u-x"


async def test_login_by_whatsapp(client: AsyncClient, with_password: Org) -> None:
    response = await client.post(
        "/api/v1/auth/login", json={"login": "+15550001111", "password": PASSWORD}
    )
    assert response.status_code == 200


@pytest.mark.parametrize(
    ("login", "password"),
    [
        ("x@corp.test", "wrong-password"),
        ("nobody@corp.test", PASSWORD),
        ("off@corp.test", PASSWORD),
    ],
)
async def test_login_failures_are_generic_401(
    client: AsyncClient, with_password: Org, login: str, password: str
) -> None:
    """Unknown user, wrong password and inactive user all look the same."""
    response = await client.post(
        "/api/v1/auth/login", json={"login": login, "password": password}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


async def test_protected_route_requires_token(client: AsyncClient) -> None:
    response = await client.get("/api/v1/tasks")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_garbage_token_is_401(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/tasks", headers={"Authorization": "Bearer not.a.token"}
    )
    assert response.status_code == 401


async def test_token_for_inactive_user_is_401(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/v1/users/me", headers=auth_headers("inactive"))
    assert response.status_code == 401
