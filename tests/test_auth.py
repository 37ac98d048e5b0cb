"""
Auth and system endpoint tests.

Verifies:
1. Login issues a token pair and mirrors it into HttpOnly cookies
2. Header and cookie credentials both authenticate
3. Refresh tokens cannot be used as access tokens (and vice versa)
4. The authorization check endpoint reports the same decisions the routes enforce
"""

import pytest
from httpx import AsyncClient

from app.core.security import create_access_token, create_refresh_token

PASSWORD = "password123"


async def _login(client: AsyncClient, email: str, password: str = PASSWORD):
    return await client.post(
        "/api/v1/auth/login",
        data={"username": email, "password": password},
    )


@pytest.mark.asyncio
async def test_login_sets_httponly_cookies(async_client: AsyncClient, employee):
    resp = await _login(async_client, employee.email)
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"] and data["refresh_token"]

    cookies = resp.headers.get_list("set-cookie")
    access = next(c for c in cookies if c.startswith("access_token="))
    refresh = next(c for c in cookies if c.startswith("refresh_token="))
    assert "httponly" in access.lower()
    assert "httponly" in refresh.lower()
    assert "samesite=lax" in access.lower()


@pytest.mark.asyncio
async def test_login_is_case_insensitive_on_email(async_client: AsyncClient, employee):
    resp = await _login(async_client, f"  {employee.email.upper()} ")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials(async_client: AsyncClient, employee):
    resp = await _login(async_client, employee.email, "wrong-password")
    assert resp.status_code == 401
    resp = await _login(async_client, "nobody@test.com")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_with_header_and_cookie(async_client: AsyncClient, manager):
    resp = await async_client.get("/api/v1/auth/me", headers=manager.headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == manager.id
    assert resp.json()["role"] == "manager"

    token = create_access_token(manager.id, role="manager")
    resp = await async_client.get(
        "/api/v1/auth/me", headers={"Cookie": f'access_token="Bearer {token}"'}
    )
    assert resp.status_code == 200
    assert resp.json()["id"] == manager.id


@pytest.mark.asyncio
async def test_refresh_issues_new_pair(async_client: AsyncClient, coworker):
    login = await _login(async_client, coworker.email)
    resp = await async_client.post(
        "/api/v1/auth/refresh", json={"refresh_token": login.json()["refresh_token"]}
    )
    assert resp.status_code == 200
    new_access = resp.json()["access_token"]
    resp = await async_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {new_access}"})
    assert resp.json()["id"] == coworker.id


@pytest.mark.asyncio
async def test_token_types_are_not_interchangeable(async_client: AsyncClient, employee):
    refresh = create_refresh_token(employee.id)
    resp = await async_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {refresh}"})
    assert resp.status_code == 401

    access = create_access_token(employee.id)
    resp = await async_client.post("/api/v1/auth/refresh", json={"refresh_token": access})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_refresh_without_token(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/refresh")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_cookies(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/logout")
    assert resp.status_code == 200
    cookies = resp.headers.get_list("set-cookie")
    assert any(c.startswith("access_token=") for c in cookies)
    assert any(c.startswith("refresh_token=") for c in cookies)


@pytest.mark.asyncio
async def test_token_for_deleted_user_rejected(async_client: AsyncClient, manager, employee):
    await async_client.delete(f"/api/v1/users/{employee.id}", headers=manager.headers)
    resp = await async_client.get("/api/v1/auth/me", headers=employee.headers)
    assert resp.status_code == 401


# ── Authorization check ───────────────────────────────────────────────
@pytest.mark.asyncio
async def test_authorize_endpoint_capability_without_resource(async_client: AsyncClient, manager, coworker):
    body = {"action": "create", "resource_type": "user"}
    resp = await async_client.post("/api/v1/policy/authorize", json=body, headers=manager.headers)
    assert resp.json() == {"allowed": True}

    resp = await async_client.post("/api/v1/policy/authorize", json=body, headers=coworker.headers)
    assert resp.json() == {"allowed": False, "reason": "forbidden"}


@pytest.mark.asyncio
async def test_authorize_endpoint_against_stored_records(async_client: AsyncClient, make_account, manager, employee):
    other = await make_account("employee")
    item = await async_client.post("/api/v1/data-items", json={"title": "t"}, headers=other.headers)
    body = {"action": "update", "resource_type": "data_item", "resource_id": item.json()["id"]}

    resp = await async_client.post("/api/v1/policy/authorize", json=body, headers=employee.headers)
    assert resp.json() == {"allowed": False, "reason": "not owner"}

    resp = await async_client.post("/api/v1/policy/authorize", json=body, headers=other.headers)
    assert resp.json() == {"allowed": True}

    body = {"action": "delete", "resource_type": "user", "resource_id": manager.id}
    resp = await async_client.post("/api/v1/policy/authorize", json=body, headers=manager.headers)
    assert resp.json() == {"allowed": False, "reason": "cannot self-delete"}


@pytest.mark.asyncio
async def test_authorize_endpoint_unknown_vocabulary(async_client: AsyncClient, manager):
    resp = await async_client.post(
        "/api/v1/policy/authorize",
        json={"action": "archive", "resource_type": "data_item"},
        headers=manager.headers,
    )
    assert resp.status_code == 200
    assert resp.json() == {"allowed": False, "reason": "unrecognized"}

    resp = await async_client.post(
        "/api/v1/policy/authorize",
        json={"action": "read", "resource_type": "invoice", "resource_id": 1},
        headers=manager.headers,
    )
    assert resp.json() == {"allowed": False, "reason": "unrecognized"}


@pytest.mark.asyncio
async def test_authorize_endpoint_missing_record_is_404(async_client: AsyncClient, manager):
    resp = await async_client.post(
        "/api/v1/policy/authorize",
        json={"action": "read", "resource_type": "data_item", "resource_id": 31337},
        headers=manager.headers,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_health_is_public(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["database"] == "ok"


@pytest.mark.asyncio
async def test_refresh_for_deleted_user_rejected(async_client: AsyncClient, manager, employee):
    refresh = create_refresh_token(employee.id)
    await async_client.delete(f"/api/v1/users/{employee.id}", headers=manager.headers)
    resp = await async_client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User not found"


@pytest.mark.asyncio
async def test_me_has_no_deactivation_state(async_client: AsyncClient, coworker):
    resp = await async_client.get("/api/v1/auth/me", headers=coworker.headers)
    assert set(resp.json()) == {"id", "email", "name", "role", "created_at"}


@pytest.mark.asyncio
async def test_authorize_endpoint_hides_records_the_actor_cannot_read(
    async_client: AsyncClient, manager, employee, coworker
):
    item = await async_client.post("/api/v1/data-items", json={"title": "gone"}, headers=employee.headers)
    item_id = item.json()["id"]
    await async_client.delete(f"/api/v1/data-items/{item_id}", headers=employee.headers)
    body = {"action": "update", "resource_type": "data_item", "resource_id": item_id}

    resp = await async_client.post("/api/v1/policy/authorize", json=body, headers=coworker.headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Resource not found"

    resp = await async_client.post("/api/v1/policy/authorize", json=body, headers=manager.headers)
    assert resp.status_code == 200
    assert resp.json() == {"allowed": False, "reason": "deleted"}

    body["action"] = "restore"
    resp = await async_client.post("/api/v1/policy/authorize", json=body, headers=employee.headers)
    assert resp.json() == {"allowed": True}
