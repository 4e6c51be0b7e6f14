"""
Authentication and authorization.

Request flow: rate limit -> ``get_current_user`` (bearer token to enabled
user) -> ``require_permission`` / ``require_role`` (OR over codes) -> handler.

Usage:
    from rbac_admin.core.auth import CurrentUser, SuperAdmin, require_permission

    @router.get("/me")
    async def handler(user: CurrentUser):
        ...

    @router.post("", dependencies=[Depends(require_permission("role:create"))])
    async def create_role(...):
        ...
"""

from .dependencies import (
    CurrentUser,
    SuperAdmin,
    get_authorizer,
    get_current_user,
    require_permission,
    require_role,
    require_super_admin,
)
from .interfaces import PolicyDecision
from .service import Authorizer

__all__ = [
    "Authorizer",
    "CurrentUser",
    "PolicyDecision",
    "SuperAdmin",
    "get_authorizer",
    "get_current_user",
    "require_permission",
    "require_role",
    "require_super_admin",
]
