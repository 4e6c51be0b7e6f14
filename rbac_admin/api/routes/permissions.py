"""
Permission management routes.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from rbac_admin.api.dependencies.services import get_permission_service
from rbac_admin.api.middleware.rate_limit import rate_limit
from rbac_admin.core.auth import require_permission
from rbac_admin.schemas.common import ApiResponse, success
from rbac_admin.schemas.permission import (
    PermissionCreate,
    PermissionFilter,
    PermissionResponse,
    PermissionUpdate,
)
from rbac_admin.services.permission import PermissionService
from rbac_admin.utils.pagination import PageData, PageParams, page_params, paginated

router = APIRouter()

moderate_limit = Depends(rate_limit("moderate"))


@router.get(
    "",
    response_model=ApiResponse[PageData[PermissionResponse]],
    dependencies=[Depends(require_permission("permission:list"))],
)
async def list_permissions(
    filters: Annotated[PermissionFilter, Query()],
    params: PageParams = Depends(page_params),
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Flat permission listing ordered by (sort_order, id)."""
    page = await permission_service.list_permissions(filters, params)
    return success(
        paginated(page, [PermissionResponse.model_validate(p) for p in page.items])
    )


@router.get(
    "/tree",
    response_model=ApiResponse[list[dict[str, Any]]],
    dependencies=[Depends(require_permission("permission:list"))],
)
async def get_permission_tree(
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Enabled permissions as a forest; leaves carry no ``children`` key."""
    return success(await permission_service.get_tree())


@router.get(
    "/{permission_id}",
    response_model=ApiResponse[PermissionResponse],
    dependencies=[Depends(require_permission("permission:list"))],
)
async def get_permission(
    permission_id: int,
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Get a permission."""
    permission = await permission_service.get(permission_id)
    return success(PermissionResponse.model_validate(permission))


@router.post(
    "",
    response_model=ApiResponse[PermissionResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[moderate_limit, Depends(require_permission("permission:create"))],
)
async def create_permission(
    data: PermissionCreate,
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Create a permission."""
    permission = await permission_service.create(data)
    return success(PermissionResponse.model_validate(permission), message="Permission created")


@router.put(
    "/{permission_id}",
    response_model=ApiResponse[PermissionResponse],
    dependencies=[moderate_limit, Depends(require_permission("permission:update"))],
)
async def update_permission(
    permission_id: int,
    data: PermissionUpdate,
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Update a permission (parent changes are checked for cycles)."""
    permission = await permission_service.update(permission_id, data)
    return success(PermissionResponse.model_validate(permission), message="Permission updated")


@router.delete(
    "/{permission_id}",
    response_model=ApiResponse[None],
    dependencies=[moderate_limit, Depends(require_permission("permission:delete"))],
)
async def delete_permission(
    permission_id: int,
    permission_service: PermissionService = Depends(get_permission_service),
):
    """Delete a permission without children."""
    await permission_service.delete(permission_id)
    return success(message="Permission deleted")
