"""
Tests for authentication endpoints.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from jose import jwt

from rbac_admin.models.user import User

PASSWORD = "secret123"


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, admin_user: User):
    """Login returns a token plus the user's roles and permissions."""
    response = await client.post(
        "/api/auth/login",
        json={"email": "admin@example.com", "password": PASSWORD},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == 0
    assert body["message"] == "Login successful"

    data = body["data"]
    assert data["token"]
    assert data["token_type"] == "Bearer"
    assert data["user"]["email"] == "admin@example.com"
    assert data["user"]["last_login_ip"] == "127.0.0.1"
    assert data["user"]["last_login_at"].endswith("Z")
    assert "password_hash" not in data["user"]
    assert [r["code"] for r in data["roles"]] == ["super_admin"]
    assert len(data["permissions"]) == 12


@pytest.mark.asyncio
async def test_login_token_authenticates(client: AsyncClient, test_user: User):
    """The issued token is accepted by protected endpoints."""
    login = await client.post(
        "/api/auth/login",
        json={"email": "plain@example.com", "password": PASSWORD},
    )
    token = login.json()["data"]["token"]

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == test_user.id


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user: User):
    response = await client.post(
        "/api/auth/login",
        json={"email": "plain@example.com", "password": "wrong-password"},
    )

    assert response.status_code == 401
    body = response.json()
    assert body["code"] == 401
    assert body["message"] == "Invalid email or password"
    assert body["data"] is None


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient):
    """Unknown emails get the same answer as wrong passwords."""
    response = await client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": PASSWORD},
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_disabled_user(client: AsyncClient, factory):
    await factory.user("frozen", email="frozen@example.com", status=0)

    response = await client.post(
        "/api/auth/login",
        json={"email": "frozen@example.com", "password": PASSWORD},
    )

    assert response.status_code == 401
    assert response.json()["message"] == "User is disabled"


@pytest.mark.asyncio
async def test_login_invalid_payload(client: AsyncClient):
    response = await client.post("/api/auth/login", json={"email": "not-an-email"})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == 400
    assert body["message"].startswith("Validation failed")


@pytest.mark.asyncio
async def test_me_without_token(client: AsyncClient):
    response = await client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["message"] == "Not authenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_with_malformed_token(client: AsyncClient):
    response = await client.get(
        "/api/auth/me",
        headers={"Authorization": "Bearer invalid-token"},
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


@pytest.mark.asyncio
async def test_me_with_expired_token(client: AsyncClient, app, test_user: User):
    token = app.state.container.token_service.issue(
        test_user.id,
        test_user.username,
        test_user.email,
        expires_in=timedelta(seconds=-10),
    )

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token has expired"


@pytest.mark.asyncio
async def test_me_with_foreign_issuer(client: AsyncClient, test_user: User):
    """A token signed with the right key but another issuer is rejected."""
    token = jwt.encode(
        {"sub": str(test_user.id), "iss": "someone-else"},
        "test-secret-key",
        algorithm="HS256",
    )

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


@pytest.mark.asyncio
async def test_disabled_user_token_rejected(client: AsyncClient, factory, make_auth_headers):
    """A still-valid token stops working once the account is disabled."""
    user = await factory.user("frozen", status=0)

    response = await client.get("/api/auth/me", headers=make_auth_headers(user))

    assert response.status_code == 401
    assert response.json()["message"] == "User is disabled"


@pytest.mark.asyncio
async def test_deleted_user_token_rejected(client: AsyncClient, app):
    token = app.state.container.token_service.issue(9999, "ghost", "ghost@example.com")

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "User not found"


@pytest.mark.asyncio
async def test_me_returns_effective_permissions(client: AsyncClient, factory, make_auth_headers):
    read = await factory.permission("post:read")
    edit = await factory.permission("post:edit")
    editor = await factory.role("editor", permissions=[read, edit])
    viewer = await factory.role("viewer", permissions=[read])
    user = await factory.user("alice", roles=[editor, viewer])

    response = await client.get("/api/auth/me", headers=make_auth_headers(user))

    data = response.json()["data"]
    assert [r["code"] for r in data["roles"]] == ["editor", "viewer"]
    assert [p["code"] for p in data["permissions"]] == ["post:read", "post:edit"]


@pytest.mark.asyncio
async def test_register(client: AsyncClient):
    """Registration creates an enabled user without roles and logs it in."""
    response = await client.post(
        "/api/auth/register",
        json={
            "username": "newuser",
            "email": "newuser@example.com",
            "password": "securepassword123",
            "real_name": "New User",
        },
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["username"] == "newuser"
    assert data["user"]["status"] == 1
    assert "password_hash" not in data["user"]

    me = await client.get(
        "/api/auth/me",
        headers={"Authorization": f"Bearer {data['token']}"},
    )
    assert me.status_code == 200
    assert me.json()["data"]["roles"] == []
    assert me.json()["data"]["permissions"] == []


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user: User):
    response = await client.post(
        "/api/auth/register",
        json={"username": "another", "email": test_user.email, "password": "anotherpassword"},
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Email already exists"


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    response = await client.post(
        "/api/auth/register",
        json={"username": "weakling", "email": "weak@example.com", "password": "123"},
    )

    assert response.status_code == 400
    assert "password" in response.json()["message"]


@pytest.mark.asyncio
async def test_change_password(client: AsyncClient, test_user: User, auth_headers: dict):
    response = await client.post(
        "/api/auth/change-password",
        headers=auth_headers,
        json={"old_password": PASSWORD, "new_password": "brand-new-pass"},
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Password changed"

    old = await client.post(
        "/api/auth/login",
        json={"email": test_user.email, "password": PASSWORD},
    )
    new = await client.post(
        "/api/auth/login",
        json={"email": test_user.email, "password": "brand-new-pass"},
    )
    assert old.status_code == 401
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_change_password_wrong_current(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/auth/change-password",
        headers=auth_headers,
        json={"old_password": "not-it", "new_password": "brand-new-pass"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Current password is incorrect"


@pytest.mark.asyncio
async def test_logout_keeps_token_valid(client: AsyncClient, auth_headers: dict):
    """Logout is client-side; the token expires on its own."""
    response = await client.post("/api/auth/logout", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Logged out"

    me = await client.get("/api/auth/me", headers=auth_headers)
    assert me.status_code == 200
