"""
User management routes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from rbac_admin.api.dependencies.services import get_user_service
from rbac_admin.api.middleware.rate_limit import rate_limit
from rbac_admin.core.auth import require_permission
from rbac_admin.models.user import User
from rbac_admin.schemas.common import ApiResponse, success
from rbac_admin.schemas.role import RoleResponse
from rbac_admin.schemas.user import (
    AssignRolesRequest,
    ResetPasswordRequest,
    UserCreate,
    UserDetailResponse,
    UserFilter,
    UserResponse,
    UserUpdate,
)
from rbac_admin.services.user import UserService
from rbac_admin.utils.pagination import PageData, PageParams, page_params, paginated

router = APIRouter()

moderate_limit = Depends(rate_limit("moderate"))


@router.get(
    "",
    response_model=ApiResponse[PageData[UserResponse]],
    dependencies=[Depends(require_permission("user:list"))],
)
async def list_users(
    filters: Annotated[UserFilter, Query()],
    params: PageParams = Depends(page_params),
    user_service: UserService = Depends(get_user_service),
):
    """List users, newest first."""
    page = await user_service.list_users(filters, params)
    return success(paginated(page, [UserResponse.model_validate(u) for u in page.items]))


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserDetailResponse],
    dependencies=[Depends(require_permission("user:list"))],
)
async def get_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
):
    """Get a user with its roles."""
    user, roles = await user_service.get_with_roles(user_id)
    return success(
        UserDetailResponse(
            user=UserResponse.model_validate(user),
            roles=[RoleResponse.model_validate(r) for r in roles],
        )
    )


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[moderate_limit, Depends(require_permission("user:create"))],
)
async def create_user(
    data: UserCreate,
    user_service: UserService = Depends(get_user_service),
):
    """Create a user."""
    user = await user_service.create(data)
    return success(UserResponse.model_validate(user), message="User created")


@router.put(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    dependencies=[moderate_limit, Depends(require_permission("user:update"))],
)
async def update_user(
    user_id: int,
    data: UserUpdate,
    user_service: UserService = Depends(get_user_service),
):
    """Update a user's profile or status."""
    user = await user_service.update(user_id, data)
    return success(UserResponse.model_validate(user), message="User updated")


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    dependencies=[moderate_limit],
)
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_permission("user:delete")),
    user_service: UserService = Depends(get_user_service),
):
    """Delete a user (not yourself)."""
    await user_service.delete(user_id, acting_user_id=current_user.id)
    return success(message="User deleted")


@router.post(
    "/{user_id}/roles",
    response_model=ApiResponse[list[RoleResponse]],
    dependencies=[moderate_limit, Depends(require_permission("user:update"))],
)
async def assign_roles(
    user_id: int,
    data: AssignRolesRequest,
    user_service: UserService = Depends(get_user_service),
):
    """Replace the user's roles."""
    roles = await user_service.assign_roles(user_id, data.role_ids)
    return success([RoleResponse.model_validate(r) for r in roles], message="Roles assigned")


@router.post(
    "/{user_id}/reset-password",
    response_model=ApiResponse[None],
    dependencies=[moderate_limit, Depends(require_permission("user:update"))],
)
async def reset_password(
    user_id: int,
    data: ResetPasswordRequest,
    user_service: UserService = Depends(get_user_service),
):
    """Set a new password for a user."""
    await user_service.reset_password(user_id, data.new_password)
    return success(message="Password reset")
