"""
User service.
"""

from typing import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.core.exceptions import Conflict, NotFound, PermissionDenied
from rbac_admin.core.security import PasswordHasher
from rbac_admin.models.rbac import Role
from rbac_admin.models.user import User
from rbac_admin.repositories.role import RoleRepository
from rbac_admin.repositories.user import UserRepository
from rbac_admin.schemas.user import UserCreate, UserFilter, UserUpdate
from rbac_admin.utils.pagination import Page, PageParams

logger = structlog.get_logger()


class UserService:
    """User management service."""

    def __init__(self, db: AsyncSession, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)

    async def get(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if not user:
            raise NotFound("User not found")
        return user

    async def get_with_roles(self, user_id: int) -> tuple[User, list[Role]]:
        user = await self.get(user_id)
        return user, await self.users.get_roles(user_id)

    async def list_users(self, filters: UserFilter, params: PageParams) -> Page[User]:
        return await self.users.search(filters, params)

    async def create(self, data: UserCreate) -> User:
        """
        Create a user with a hashed password.

        Raises:
            Conflict: username or email already taken
        """
        if await self.users.get_by_username(data.username):
            raise Conflict("Username already exists")
        if await self.users.get_by_email(data.email):
            raise Conflict("Email already exists")

        fields = data.model_dump(exclude={"password"})
        user = await self.users.create(
            **fields,
            password_hash=self.hasher.hash(data.password),
        )
        logger.info("User created", target_user_id=user.id, username=user.username)
        return user

    async def update(self, user_id: int, data: UserUpdate) -> User:
        user = await self.get(user_id)

        update_data = data.model_dump(exclude_unset=True)
        # email and status are required columns; null means "leave as is"
        for field in ("email", "status"):
            if field in update_data and update_data[field] is None:
                del update_data[field]

        email = update_data.get("email")
        if email and email != user.email and await self.users.get_by_email(email):
            raise Conflict("Email already exists")

        return await self.users.update(user, **update_data)

    async def delete(self, user_id: int, acting_user_id: int) -> None:
        """
        Delete a user; role assignments cascade.

        Raises:
            PermissionDenied: an administrator tried to delete their own account
        """
        if user_id == acting_user_id:
            raise PermissionDenied("You cannot delete your own account")

        user = await self.get(user_id)
        await self.users.delete(user)
        logger.info("User deleted", target_user_id=user_id)

    async def assign_roles(self, user_id: int, role_ids: Sequence[int]) -> list[Role]:
        """
        Replace the user's roles with ``role_ids``.

        Every id is checked before anything is written; an empty list
        removes all roles.
        """
        await self.get(user_id)

        found = {role.id for role in await self.roles.get_by_ids(role_ids)}
        for role_id in role_ids:
            if role_id not in found:
                raise NotFound(f"Role {role_id} not found")

        await self.users.replace_roles(user_id, role_ids)
        logger.info("User roles assigned", target_user_id=user_id, role_ids=list(role_ids))
        return await self.users.get_roles(user_id)

    async def reset_password(self, user_id: int, new_password: str) -> None:
        user = await self.get(user_id)
        await self.users.update(user, password_hash=self.hasher.hash(new_password))
        logger.info("User password reset", target_user_id=user_id)
