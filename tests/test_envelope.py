"""
Tests for the response envelope and error handling.
"""

from datetime import datetime

import pytest
from httpx import AsyncClient, ASGITransport

from rbac_admin.core.exceptions import Conflict


@pytest.mark.asyncio
async def test_success_envelope(client: AsyncClient, auth_headers: dict):
    response = await client.get("/api/auth/me", headers=auth_headers)

    body = response.json()
    assert set(body) == {"code", "message", "data", "timestamp"}
    assert body["code"] == 0
    assert body["message"] == "Success"
    assert body["timestamp"].endswith("Z")
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


@pytest.mark.asyncio
async def test_unknown_route(client: AsyncClient):
    response = await client.get("/api/nope")

    assert response.status_code == 404
    body = response.json()
    assert body["code"] == 404
    assert body["data"] is None


@pytest.mark.asyncio
async def test_method_not_allowed(client: AsyncClient):
    response = await client.patch("/api/auth/login")

    assert response.status_code == 405
    assert response.json()["code"] == 405


@pytest.mark.asyncio
async def test_app_error_carries_data(app, client: AsyncClient):
    @app.get("/boom/conflict")
    async def conflict():
        raise Conflict("Already there", data={"field": "code"})

    response = await client.get("/boom/conflict")

    assert response.status_code == 409
    assert response.json()["data"] == {"field": "code"}


@pytest.mark.asyncio
async def test_unexpected_error_is_masked(app):
    @app.get("/boom/crash")
    async def crash():
        raise RuntimeError("database password is hunter2")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/boom/crash")

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == 500
    assert body["message"] == "Internal server error"
    assert "hunter2" not in response.text


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    generated = await client.get("/health")
    echoed = await client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert generated.headers["X-Request-ID"]
    assert echoed.headers["X-Request-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["environment"] == "testing"
