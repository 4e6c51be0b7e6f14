"""
Repository pattern for data access.
"""

from rbac_admin.repositories.base import BaseRepository
from rbac_admin.repositories.permission import PermissionRepository
from rbac_admin.repositories.role import RoleRepository
from rbac_admin.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRepository",
]
