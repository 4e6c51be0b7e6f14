"""
Service dependencies.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.core.container import Container
from rbac_admin.services.auth import AuthService
from rbac_admin.services.permission import PermissionService
from rbac_admin.services.role import RoleService
from rbac_admin.services.user import UserService

from .database import get_container, get_db


async def get_user_service(
    db: AsyncSession = Depends(get_db),
    container: Container = Depends(get_container),
) -> UserService:
    """Get user service instance."""
    return UserService(db, container.password_hasher)


async def get_role_service(db: AsyncSession = Depends(get_db)) -> RoleService:
    """Get role service instance."""
    return RoleService(db)


async def get_permission_service(db: AsyncSession = Depends(get_db)) -> PermissionService:
    """Get permission service instance."""
    return PermissionService(db)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    container: Container = Depends(get_container),
) -> AuthService:
    """Get auth service instance (login, register, password changes)."""
    return AuthService(db, container.password_hasher, container.token_service)
