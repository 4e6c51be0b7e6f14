"""
Tests for permission and role gates.
"""

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.core.auth import (
    Authorizer,
    SuperAdmin,
    require_permission,
    require_role,
)
from rbac_admin.core.auth.service import decide
from rbac_admin.core.exceptions import PermissionDenied, Unauthenticated
from rbac_admin.schemas.common import success
from rbac_admin.services.resolver import PermissionResolver


@pytest_asyncio.fixture
async def guarded_app(app: FastAPI) -> FastAPI:
    """App with a few extra routes behind the gates."""

    @app.get("/posts", dependencies=[Depends(require_permission("post:edit"))])
    async def edit_posts():
        return success({"posts": []})

    @app.delete("/posts", dependencies=[Depends(require_permission("post:delete"))])
    async def delete_posts():
        return success(message="Deleted")

    @app.get(
        "/reports",
        dependencies=[Depends(require_permission("report:view", "report:export"))],
    )
    async def reports():
        return success()

    @app.get("/audit", dependencies=[Depends(require_role("auditor", "super_admin"))])
    async def audit():
        return success()

    @app.get("/danger")
    async def danger(user: SuperAdmin):
        return success({"id": user.id})

    return app


def test_decide_is_or_over_codes():
    assert decide(["a", "b"], {"b"}, "permission").allowed
    assert not decide(["a", "b"], {"c"}, "permission").allowed
    assert not decide(["a"], set(), "role").allowed


def test_decide_reason_names_required_codes():
    decision = decide(["a", "b"], set(), "permission")

    assert decision.reason == "Missing required permission: a or b"
    assert decision.metadata["required"] == ["a", "b"]


def test_gate_factories_need_codes():
    with pytest.raises(ValueError):
        require_permission()
    with pytest.raises(ValueError):
        require_role()


@pytest.mark.asyncio
async def test_authorizer_fails_closed_without_user(db: AsyncSession):
    authorizer = Authorizer(PermissionResolver(db))

    with pytest.raises(Unauthenticated):
        await authorizer.require_permission(None, ("user:list",))
    with pytest.raises(Unauthenticated):
        await authorizer.require_role(None, ("super_admin",))


@pytest.mark.asyncio
async def test_authorizer_denies_missing_permission(db: AsyncSession, factory):
    user = await factory.user()
    authorizer = Authorizer(PermissionResolver(db))

    with pytest.raises(PermissionDenied, match="user:list"):
        await authorizer.require_permission(user, ("user:list",))


@pytest.mark.asyncio
async def test_editor_scenario(guarded_app, client: AsyncClient, factory, make_auth_headers):
    """alice -> editor -> post:edit may edit posts but not delete them."""
    post_edit = await factory.permission("post:edit")
    await factory.permission("post:delete")
    editor = await factory.role("editor", permissions=[post_edit])
    alice = await factory.user("alice", roles=[editor])
    headers = make_auth_headers(alice)

    allowed = await client.get("/posts", headers=headers)
    denied = await client.delete("/posts", headers=headers)

    assert allowed.status_code == 200
    assert allowed.json()["data"] == {"posts": []}
    assert denied.status_code == 403
    assert denied.json()["code"] == 403
    assert denied.json()["message"] == "Missing required permission: post:delete"


@pytest.mark.asyncio
async def test_gate_requires_authentication(guarded_app, client: AsyncClient):
    response = await client.get("/posts")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_any_listed_permission_is_enough(
    guarded_app, client: AsyncClient, factory, make_auth_headers
):
    export = await factory.permission("report:export")
    role = await factory.role("exporter", permissions=[export])
    user = await factory.user(roles=[role])

    response = await client.get("/reports", headers=make_auth_headers(user))

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_revoked_grant_applies_on_next_request(
    guarded_app, client: AsyncClient, factory, make_auth_headers, admin_headers
):
    """No permission caching: removing the role's grant denies immediately."""
    post_edit = await factory.permission("post:edit")
    editor = await factory.role("editor", permissions=[post_edit])
    alice = await factory.user("alice", roles=[editor])
    headers = make_auth_headers(alice)

    assert (await client.get("/posts", headers=headers)).status_code == 200

    response = await client.post(
        f"/api/roles/{editor.id}/permissions",
        headers=admin_headers,
        json={"permission_ids": []},
    )
    assert response.status_code == 200

    assert (await client.get("/posts", headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_disabled_role_grants_nothing(
    guarded_app, client: AsyncClient, factory, make_auth_headers
):
    post_edit = await factory.permission("post:edit")
    editor = await factory.role("editor", permissions=[post_edit], status=0)
    alice = await factory.user("alice", roles=[editor])

    response = await client.get("/posts", headers=make_auth_headers(alice))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_role_gate(guarded_app, client: AsyncClient, factory, make_auth_headers):
    auditor = await factory.role("auditor")
    user = await factory.user(roles=[auditor])
    outsider = await factory.user()

    assert (await client.get("/audit", headers=make_auth_headers(user))).status_code == 200
    denied = await client.get("/audit", headers=make_auth_headers(outsider))
    assert denied.status_code == 403
    assert denied.json()["message"] == "Missing required role: auditor or super_admin"


@pytest.mark.asyncio
async def test_super_admin_gate(
    guarded_app, client: AsyncClient, admin_user, admin_headers, auth_headers
):
    allowed = await client.get("/danger", headers=admin_headers)
    denied = await client.get("/danger", headers=auth_headers)

    assert allowed.status_code == 200
    assert allowed.json()["data"] == {"id": admin_user.id}
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_management_routes_are_gated(client: AsyncClient, auth_headers: dict):
    """A user without roles cannot reach any management endpoint."""
    for method, path in [
        ("GET", "/api/users"),
        ("POST", "/api/users"),
        ("GET", "/api/roles"),
        ("DELETE", "/api/roles/1"),
        ("GET", "/api/permissions/tree"),
        ("PUT", "/api/permissions/1"),
    ]:
        response = await client.request(method, path, headers=auth_headers, json={})
        assert response.status_code == 403, (method, path)
