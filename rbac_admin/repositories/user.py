"""
User repository.
"""

from typing import Sequence
from sqlalchemy import delete, insert, select

from rbac_admin.models.base import Status
from rbac_admin.models.rbac import Role, UserRole
from rbac_admin.models.user import User
from rbac_admin.schemas.user import UserFilter
from rbac_admin.utils.pagination import Page, PageParams

from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    def _default_order(self):
        return (User.created_at.desc(), User.id.desc())

    async def get_by_username(self, username: str) -> User | None:
        return await self.get_one(username=username)

    async def get_by_email(self, email: str) -> User | None:
        return await self.get_one(email=email)

    async def search(self, filters: UserFilter, params: PageParams) -> Page[User]:
        """Paginated listing, newest first."""
        conditions = []
        if filters.username:
            conditions.append(User.username.contains(filters.username, autoescape=True))
        if filters.email:
            conditions.append(User.email.contains(filters.email, autoescape=True))
        if filters.status is not None:
            conditions.append(User.status == filters.status)
        return await self.paginate(params, conditions)

    async def get_roles(self, user_id: int, enabled_only: bool = True) -> list[Role]:
        """Roles assigned to a user, ordered by id."""
        stmt = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.id)
        )
        if enabled_only:
            stmt = stmt.where(Role.status == Status.ENABLED)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def replace_roles(self, user_id: int, role_ids: Sequence[int]) -> None:
        """
        Replace the user's role set.

        Runs inside the caller's transaction, so the delete and insert
        commit or roll back together.
        """
        await self.db.execute(delete(UserRole).where(UserRole.user_id == user_id))
        unique_ids = list(dict.fromkeys(role_ids))
        with self.constraint_guard("Role assignment conflicts with a concurrent change"):
            if unique_ids:
                await self.db.execute(
                    insert(UserRole),
                    [{"user_id": user_id, "role_id": role_id} for role_id in unique_ids],
                )
            await self.db.flush()
