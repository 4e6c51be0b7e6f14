"""
Role management routes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from rbac_admin.api.dependencies.services import get_role_service
from rbac_admin.api.middleware.rate_limit import rate_limit
from rbac_admin.core.auth import require_permission
from rbac_admin.schemas.common import ApiResponse, success
from rbac_admin.schemas.permission import PermissionResponse
from rbac_admin.schemas.role import (
    AssignPermissionsRequest,
    RoleCreate,
    RoleDetailResponse,
    RoleFilter,
    RoleResponse,
    RoleUpdate,
)
from rbac_admin.services.role import RoleService
from rbac_admin.utils.pagination import PageData, PageParams, page_params, paginated

router = APIRouter()

moderate_limit = Depends(rate_limit("moderate"))


@router.get(
    "",
    response_model=ApiResponse[PageData[RoleResponse]],
    dependencies=[Depends(require_permission("role:list"))],
)
async def list_roles(
    filters: Annotated[RoleFilter, Query()],
    params: PageParams = Depends(page_params),
    role_service: RoleService = Depends(get_role_service),
):
    """List roles, newest first."""
    page = await role_service.list_roles(filters, params)
    return success(paginated(page, [RoleResponse.model_validate(r) for r in page.items]))


@router.get(
    "/{role_id}",
    response_model=ApiResponse[RoleDetailResponse],
    dependencies=[Depends(require_permission("role:list"))],
)
async def get_role(
    role_id: int,
    role_service: RoleService = Depends(get_role_service),
):
    """Get a role with its permissions."""
    role, permissions = await role_service.get_with_permissions(role_id)
    return success(
        RoleDetailResponse(
            role=RoleResponse.model_validate(role),
            permissions=[PermissionResponse.model_validate(p) for p in permissions],
        )
    )


@router.post(
    "",
    response_model=ApiResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[moderate_limit, Depends(require_permission("role:create"))],
)
async def create_role(
    data: RoleCreate,
    role_service: RoleService = Depends(get_role_service),
):
    """Create a role."""
    role = await role_service.create(data)
    return success(RoleResponse.model_validate(role), message="Role created")


@router.put(
    "/{role_id}",
    response_model=ApiResponse[RoleResponse],
    dependencies=[moderate_limit, Depends(require_permission("role:update"))],
)
async def update_role(
    role_id: int,
    data: RoleUpdate,
    role_service: RoleService = Depends(get_role_service),
):
    """Update a role."""
    role = await role_service.update(role_id, data)
    return success(RoleResponse.model_validate(role), message="Role updated")


@router.delete(
    "/{role_id}",
    response_model=ApiResponse[None],
    dependencies=[moderate_limit, Depends(require_permission("role:delete"))],
)
async def delete_role(
    role_id: int,
    role_service: RoleService = Depends(get_role_service),
):
    """Delete a role that no user holds."""
    await role_service.delete(role_id)
    return success(message="Role deleted")


@router.post(
    "/{role_id}/permissions",
    response_model=ApiResponse[list[PermissionResponse]],
    dependencies=[moderate_limit, Depends(require_permission("role:update"))],
)
async def assign_permissions(
    role_id: int,
    data: AssignPermissionsRequest,
    role_service: RoleService = Depends(get_role_service),
):
    """Replace the role's permissions."""
    permissions = await role_service.assign_permissions(role_id, data.permission_ids)
    return success(
        [PermissionResponse.model_validate(p) for p in permissions],
        message="Permissions assigned",
    )
