"""
Role repository.
"""

from typing import Sequence
from sqlalchemy import delete, func, insert, select

from rbac_admin.models.base import Status
from rbac_admin.models.rbac import Permission, Role, RolePermission, UserRole
from rbac_admin.schemas.role import RoleFilter
from rbac_admin.utils.pagination import Page, PageParams

from .base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    model = Role

    def _default_order(self):
        return (Role.created_at.desc(), Role.id.desc())

    async def get_by_code(self, code: str) -> Role | None:
        return await self.get_one(code=code)

    async def search(self, filters: RoleFilter, params: PageParams) -> Page[Role]:
        """Paginated listing, newest first."""
        conditions = []
        if filters.name:
            conditions.append(Role.name.contains(filters.name, autoescape=True))
        if filters.code:
            conditions.append(Role.code.contains(filters.code, autoescape=True))
        if filters.status is not None:
            conditions.append(Role.status == filters.status)
        return await self.paginate(params, conditions)

    async def is_code_unique(self, code: str, exclude_id: int | None = None) -> bool:
        conditions = [Role.code == code]
        if exclude_id is not None:
            conditions.append(Role.id != exclude_id)
        return not await self.exists(*conditions)

    async def get_user_count(self, role_id: int) -> int:
        """Number of users assigned this role."""
        stmt = select(func.count()).select_from(UserRole).where(UserRole.role_id == role_id)
        return await self.db.scalar(stmt) or 0

    async def get_permissions(self, role_id: int, enabled_only: bool = True) -> list[Permission]:
        """Permissions granted to a role, ordered by (sort_order, id)."""
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.sort_order, Permission.id)
        )
        if enabled_only:
            stmt = stmt.where(Permission.status == Status.ENABLED)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def replace_permissions(self, role_id: int, permission_ids: Sequence[int]) -> None:
        """Replace the role's permission set within the caller's transaction."""
        await self.db.execute(
            delete(RolePermission).where(RolePermission.role_id == role_id)
        )
        unique_ids = list(dict.fromkeys(permission_ids))
        with self.constraint_guard("Permission assignment conflicts with a concurrent change"):
            if unique_ids:
                await self.db.execute(
                    insert(RolePermission),
                    [
                        {"role_id": role_id, "permission_id": permission_id}
                        for permission_id in unique_ids
                    ],
                )
            await self.db.flush()
