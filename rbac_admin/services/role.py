"""
Role service.
"""

from typing import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.core.exceptions import Conflict, NotFound
from rbac_admin.models.rbac import Permission, Role
from rbac_admin.repositories.permission import PermissionRepository
from rbac_admin.repositories.role import RoleRepository
from rbac_admin.schemas.role import RoleCreate, RoleFilter, RoleUpdate
from rbac_admin.utils.pagination import Page, PageParams

logger = structlog.get_logger()


class RoleService:
    """Role management service."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.roles = RoleRepository(db)
        self.permissions = PermissionRepository(db)

    async def get(self, role_id: int) -> Role:
        role = await self.roles.get_by_id(role_id)
        if not role:
            raise NotFound("Role not found")
        return role

    async def get_with_permissions(self, role_id: int) -> tuple[Role, list[Permission]]:
        role = await self.get(role_id)
        return role, await self.roles.get_permissions(role_id)

    async def get_permissions(self, role_id: int) -> list[Permission]:
        """Enabled permissions granted to the role."""
        await self.get(role_id)
        return await self.roles.get_permissions(role_id)

    async def list_roles(self, filters: RoleFilter, params: PageParams) -> Page[Role]:
        return await self.roles.search(filters, params)

    async def create(self, data: RoleCreate) -> Role:
        if not await self.roles.is_code_unique(data.code):
            raise Conflict("Role code already exists")

        role = await self.roles.create(**data.model_dump())
        logger.info("Role created", role_id=role.id, role_code=role.code)
        return role

    async def update(self, role_id: int, data: RoleUpdate) -> Role:
        role = await self.get(role_id)

        update_data = data.model_dump(exclude_unset=True)
        for field in ("name", "code", "status"):
            if field in update_data and update_data[field] is None:
                del update_data[field]

        code = update_data.get("code")
        if code and not await self.roles.is_code_unique(code, exclude_id=role_id):
            raise Conflict("Role code already exists")

        return await self.roles.update(role, **update_data)

    async def delete(self, role_id: int) -> None:
        """
        Delete a role.

        Raises:
            Conflict: the role is still assigned to at least one user
        """
        role = await self.get(role_id)

        user_count = await self.roles.get_user_count(role_id)
        if user_count > 0:
            raise Conflict(
                f"Role is assigned to {user_count} user(s) and cannot be deleted"
            )

        await self.roles.delete(role)
        logger.info("Role deleted", role_id=role_id)

    async def assign_permissions(
        self,
        role_id: int,
        permission_ids: Sequence[int],
    ) -> list[Permission]:
        """Replace the role's permissions with ``permission_ids``."""
        await self.get(role_id)

        found = {perm.id for perm in await self.permissions.get_by_ids(permission_ids)}
        for permission_id in permission_ids:
            if permission_id not in found:
                raise NotFound(f"Permission {permission_id} not found")

        await self.roles.replace_permissions(role_id, permission_ids)
        logger.info(
            "Role permissions assigned",
            role_id=role_id,
            permission_ids=list(permission_ids),
        )
        return await self.roles.get_permissions(role_id)
