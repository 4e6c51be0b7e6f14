"""
Permission service.
"""

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.core.exceptions import Conflict, InvalidArgument, NotFound
from rbac_admin.models.rbac import Permission
from rbac_admin.repositories.permission import PermissionRepository
from rbac_admin.schemas.permission import (
    PermissionCreate,
    PermissionFilter,
    PermissionResponse,
    PermissionUpdate,
)
from rbac_admin.utils.pagination import Page, PageParams

from .resolver import ROOT_PARENT_ID, build_permission_tree

logger = structlog.get_logger()


class PermissionService:
    """Permission management service."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.permissions = PermissionRepository(db)

    async def get(self, permission_id: int) -> Permission:
        permission = await self.permissions.get_by_id(permission_id)
        if not permission:
            raise NotFound("Permission not found")
        return permission

    async def list_permissions(
        self,
        filters: PermissionFilter,
        params: PageParams,
    ) -> Page[Permission]:
        return await self.permissions.search(filters, params)

    async def get_tree(self) -> list[dict[str, Any]]:
        """Forest of enabled permissions, serialized for the API."""
        permissions = await self.permissions.list_enabled()
        return build_permission_tree(
            PermissionResponse.model_validate(p).model_dump(mode="json")
            for p in permissions
        )

    async def create(self, data: PermissionCreate) -> Permission:
        """
        Raises:
            Conflict: code already taken
            InvalidArgument: parent_id references a missing permission
        """
        if not await self.permissions.is_code_unique(data.code):
            raise Conflict("Permission code already exists")

        if data.parent_id != ROOT_PARENT_ID:
            if not await self.permissions.get_by_id(data.parent_id):
                raise InvalidArgument("Parent permission does not exist")

        permission = await self.permissions.create(**data.model_dump())
        logger.info("Permission created", permission_id=permission.id, code=permission.code)
        return permission

    async def update(self, permission_id: int, data: PermissionUpdate) -> Permission:
        permission = await self.get(permission_id)

        update_data = data.model_dump(exclude_unset=True)
        for field in ("name", "code", "type", "parent_id", "sort_order", "status"):
            if field in update_data and update_data[field] is None:
                del update_data[field]

        code = update_data.get("code")
        if code and not await self.permissions.is_code_unique(code, exclude_id=permission_id):
            raise Conflict("Permission code already exists")

        parent_id = update_data.get("parent_id")
        if parent_id is not None and parent_id != ROOT_PARENT_ID:
            await self._validate_parent(permission_id, parent_id)

        return await self.permissions.update(permission, **update_data)

    async def _validate_parent(self, permission_id: int, parent_id: int) -> None:
        """Reject self-parenting, missing parents and parents that would close a cycle."""
        if parent_id == permission_id:
            raise InvalidArgument("A permission cannot be its own parent")

        if not await self.permissions.get_by_id(parent_id):
            raise InvalidArgument("Parent permission does not exist")

        # Walk up from the new parent; reaching this permission means the
        # new parent is one of its descendants.
        seen = set()
        current = parent_id
        while current and current != ROOT_PARENT_ID and current not in seen:
            if current == permission_id:
                raise InvalidArgument("A permission cannot be moved under its own descendant")
            seen.add(current)
            current = await self.permissions.get_parent_id(current)

    async def delete(self, permission_id: int) -> None:
        """
        Delete a permission; role grants cascade.

        Raises:
            Conflict: the permission still has child permissions
        """
        permission = await self.get(permission_id)

        if await self.permissions.get_children_count(permission_id) > 0:
            raise Conflict("Permission has child permissions and cannot be deleted")

        await self.permissions.delete(permission)
        logger.info("Permission deleted", permission_id=permission_id)
