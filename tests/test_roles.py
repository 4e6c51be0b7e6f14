"""
Tests for role management endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_and_get_role(client: AsyncClient, admin_headers: dict):
    created = await client.post(
        "/api/roles",
        headers=admin_headers,
        json={"name": "Editor", "code": "editor", "description": "Edits content"},
    )

    assert created.status_code == 201
    role = created.json()["data"]
    assert role["code"] == "editor"
    assert role["status"] == 1

    detail = await client.get(f"/api/roles/{role['id']}", headers=admin_headers)
    assert detail.status_code == 200
    assert detail.json()["data"]["role"]["name"] == "Editor"
    assert detail.json()["data"]["permissions"] == []


@pytest.mark.asyncio
async def test_create_role_duplicate_code(client: AsyncClient, admin_headers: dict):
    # super_admin already exists via the admin fixture
    response = await client.post(
        "/api/roles",
        headers=admin_headers,
        json={"name": "Again", "code": "super_admin"},
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Role code already exists"


@pytest.mark.asyncio
async def test_list_roles_filter_by_code(client: AsyncClient, admin_headers: dict, factory):
    await factory.role("editor")
    await factory.role("viewer")

    response = await client.get("/api/roles", headers=admin_headers, params={"code": "edit"})

    data = response.json()["data"]
    assert [r["code"] for r in data["list"]] == ["editor"]
    assert data["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_update_role(client: AsyncClient, admin_headers: dict, factory):
    role = await factory.role("editor")

    response = await client.put(
        f"/api/roles/{role.id}",
        headers=admin_headers,
        json={"description": "Edits posts", "status": 0},
    )

    assert response.status_code == 200
    assert response.json()["data"]["description"] == "Edits posts"
    assert response.json()["data"]["status"] == 0
    assert response.json()["data"]["code"] == "editor"


@pytest.mark.asyncio
async def test_update_missing_role(client: AsyncClient, admin_headers: dict):
    response = await client.put("/api/roles/9999", headers=admin_headers, json={"name": "Nope"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_role_in_use(client: AsyncClient, admin_headers: dict, factory):
    role = await factory.role("editor")
    await factory.user("bob", roles=[role])

    response = await client.delete(f"/api/roles/{role.id}", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["code"] == 409


@pytest.mark.asyncio
async def test_delete_unused_role(client: AsyncClient, admin_headers: dict, factory):
    role = await factory.role("editor")

    response = await client.delete(f"/api/roles/{role.id}", headers=admin_headers)
    missing = await client.get(f"/api/roles/{role.id}", headers=admin_headers)

    assert response.status_code == 200
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_assign_permissions_round_trip(client: AsyncClient, admin_headers: dict, factory):
    read = await factory.permission("post:read", sort_order=2)
    edit = await factory.permission("post:edit", sort_order=1)
    role = await factory.role("editor")

    response = await client.post(
        f"/api/roles/{role.id}/permissions",
        headers=admin_headers,
        json={"permission_ids": [read.id, edit.id]},
    )
    detail = await client.get(f"/api/roles/{role.id}", headers=admin_headers)

    assert response.status_code == 200
    assert [p["id"] for p in response.json()["data"]] == [edit.id, read.id]
    assert [p["id"] for p in detail.json()["data"]["permissions"]] == [edit.id, read.id]


@pytest.mark.asyncio
async def test_assign_missing_permission(client: AsyncClient, admin_headers: dict, factory):
    read = await factory.permission("post:read")
    role = await factory.role("editor", permissions=[read])

    response = await client.post(
        f"/api/roles/{role.id}/permissions",
        headers=admin_headers,
        json={"permission_ids": [read.id, 4242]},
    )
    detail = await client.get(f"/api/roles/{role.id}", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Permission 4242 not found"
    assert [p["code"] for p in detail.json()["data"]["permissions"]] == ["post:read"]
