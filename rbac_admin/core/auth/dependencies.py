"""
FastAPI dependencies for authentication and authorization.

Usage:
    from rbac_admin.core.auth import CurrentUser, require_permission

    @router.get("/me")
    async def handler(user: CurrentUser):
        ...

    @router.delete("/{user_id}")
    async def handler(user: User = Depends(require_permission("user:delete"))):
        ...
"""

from typing import Annotated, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_admin.api.dependencies.database import get_container, get_db
from rbac_admin.core.container import Container
from rbac_admin.core.exceptions import Unauthenticated
from rbac_admin.core.security import extract_bearer_token
from rbac_admin.models.user import User
from rbac_admin.repositories.user import UserRepository
from rbac_admin.services.resolver import PermissionResolver
from rbac_admin.utils.context import set_context_user

from .service import Authorizer


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    container: Container = Depends(get_container),
) -> User:
    """
    Resolve the bearer token to an enabled user.

    The user is also stored on ``request.state.user`` for downstream code.

    Raises:
        Unauthenticated: missing token, bad signature/issuer, expired token,
            unknown user or disabled user
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if not token:
        raise Unauthenticated("Not authenticated")

    payload = container.token_service.decode(token)

    user = await UserRepository(db).get_by_id(int(payload["sub"]))
    if not user:
        raise Unauthenticated("User not found")

    # A valid token does not outlive the account being disabled
    if not user.is_active:
        raise Unauthenticated("User is disabled")

    request.state.user = user
    request.state.user_id = user.id
    set_context_user(user.id)

    return user


async def get_authorizer(db: AsyncSession = Depends(get_db)) -> Authorizer:
    return Authorizer(PermissionResolver(db))


def require_permission(*codes: str) -> Callable:
    """
    Dependency factory: allow if the user holds any of ``codes``.

    Usage:
    ```python
    @router.get("", dependencies=[Depends(require_permission("user:list"))])
    async def list_users(): ...
    ```
    """
    if not codes:
        raise ValueError("require_permission needs at least one permission code")

    async def check_permission(
        current_user: User = Depends(get_current_user),
        authorizer: Authorizer = Depends(get_authorizer),
    ) -> User:
        await authorizer.require_permission(current_user, codes)
        return current_user

    return check_permission


def require_role(*codes: str) -> Callable:
    """Dependency factory: allow if the user has any of the role ``codes``."""
    if not codes:
        raise ValueError("require_role needs at least one role code")

    async def check_role(
        current_user: User = Depends(get_current_user),
        authorizer: Authorizer = Depends(get_authorizer),
    ) -> User:
        await authorizer.require_role(current_user, codes)
        return current_user

    return check_role


async def require_super_admin(
    request: Request,
    current_user: User = Depends(get_current_user),
    authorizer: Authorizer = Depends(get_authorizer),
) -> User:
    """Allow only holders of the configured super admin role."""
    role = request.app.state.container.settings.auth.super_admin_role
    await authorizer.require_role(current_user, (role,))
    return current_user


# Authenticated user (required)
CurrentUser = Annotated[User, Depends(get_current_user)]

# Super admin (required)
SuperAdmin = Annotated[User, Depends(require_super_admin)]
