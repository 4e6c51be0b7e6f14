"""
Permission repository.
"""

from sqlalchemy import select

from rbac_admin.models.base import Status
from rbac_admin.models.rbac import Permission, Role, RolePermission, UserRole
from rbac_admin.schemas.permission import PermissionFilter
from rbac_admin.utils.pagination import Page, PageParams

from .base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):
    model = Permission

    def _default_order(self):
        return (Permission.sort_order, Permission.id)

    async def get_by_code(self, code: str) -> Permission | None:
        return await self.get_one(code=code)

    async def search(self, filters: PermissionFilter, params: PageParams) -> Page[Permission]:
        """Paginated listing ordered by (sort_order, id)."""
        conditions = []
        if filters.name:
            conditions.append(Permission.name.contains(filters.name, autoescape=True))
        if filters.code:
            conditions.append(Permission.code.contains(filters.code, autoescape=True))
        if filters.type is not None:
            conditions.append(Permission.type == filters.type)
        if filters.parent_id is not None:
            conditions.append(Permission.parent_id == filters.parent_id)
        if filters.status is not None:
            conditions.append(Permission.status == filters.status)
        return await self.paginate(params, conditions)

    async def list_enabled(self) -> list[Permission]:
        return await self.all(Permission.status == Status.ENABLED)

    async def is_code_unique(self, code: str, exclude_id: int | None = None) -> bool:
        conditions = [Permission.code == code]
        if exclude_id is not None:
            conditions.append(Permission.id != exclude_id)
        return not await self.exists(*conditions)

    async def get_children_count(self, permission_id: int) -> int:
        return await self.count(parent_id=permission_id)

    async def get_parent_id(self, permission_id: int) -> int | None:
        stmt = select(Permission.parent_id).where(Permission.id == permission_id)
        return await self.db.scalar(stmt)

    async def get_user_permissions(self, user_id: int) -> list[Permission]:
        """
        Effective permissions of a user.

        user -> user_roles -> enabled role -> role_permissions -> enabled
        permission, deduplicated by permission id.
        """
        granted = (
            select(RolePermission.permission_id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .join(Role, Role.id == RolePermission.role_id)
            .where(UserRole.user_id == user_id, Role.status == Status.ENABLED)
        )
        stmt = (
            select(Permission)
            .where(
                Permission.id.in_(granted),
                Permission.status == Status.ENABLED,
            )
            .order_by(Permission.sort_order, Permission.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
