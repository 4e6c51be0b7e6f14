"""
Database models.
"""

from .base import Base, Status, TimestampMixin
from .user import User
from .rbac import Permission, PermissionType, Role, RolePermission, UserRole

__all__ = [
    # Base
    "Base",
    "Status",
    "TimestampMixin",
    # Models
    "User",
    "Role",
    "Permission",
    "PermissionType",
    "UserRole",
    "RolePermission",
]
