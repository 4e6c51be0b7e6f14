"""
Authentication routes.
"""

from fastapi import APIRouter, Depends, Request, status

from rbac_admin.api.dependencies.services import get_auth_service
from rbac_admin.api.middleware.rate_limit import endpoint_key, get_client_ip, ip_key, rate_limit
from rbac_admin.core.auth import CurrentUser
from rbac_admin.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
)
from rbac_admin.schemas.common import ApiResponse, success
from rbac_admin.schemas.permission import PermissionResponse
from rbac_admin.schemas.role import RoleResponse
from rbac_admin.schemas.user import UserResponse
from rbac_admin.services.auth import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    dependencies=[Depends(rate_limit("strict", ip_key))],
)
async def login(
    data: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login with email and password; returns a bearer token."""
    result = await auth_service.login(
        email=data.email,
        password=data.password,
        client_ip=get_client_ip(request),
    )
    return success(
        LoginResponse(
            user=UserResponse.model_validate(result.user),
            roles=[RoleResponse.model_validate(r) for r in result.roles],
            permissions=[PermissionResponse.model_validate(p) for p in result.permissions],
            token=result.token,
        ),
        message="Login successful",
    )


@router.post(
    "/register",
    response_model=ApiResponse[RegisterResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("strict", ip_key))],
)
async def register(
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new account (no roles until an administrator assigns some)."""
    user, token = await auth_service.register(data)
    return success(
        RegisterResponse(user=UserResponse.model_validate(user), token=token),
        message="Registration successful",
    )


@router.get("/me", response_model=ApiResponse[ProfileResponse])
async def get_me(
    current_user: CurrentUser,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Current user with effective roles and permissions."""
    profile = await auth_service.get_profile(current_user)
    return success(
        ProfileResponse(
            user=UserResponse.model_validate(profile.user),
            roles=[RoleResponse.model_validate(r) for r in profile.roles],
            permissions=[PermissionResponse.model_validate(p) for p in profile.permissions],
        )
    )


@router.post(
    "/change-password",
    response_model=ApiResponse[None],
    dependencies=[Depends(rate_limit("moderate", endpoint_key))],
)
async def change_password(
    data: ChangePasswordRequest,
    current_user: CurrentUser,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Change the current user's password (existing tokens stay valid)."""
    await auth_service.change_password(current_user, data.old_password, data.new_password)
    return success(message="Password changed")


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    current_user: CurrentUser,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Acknowledge logout; the client discards its token."""
    await auth_service.logout(current_user)
    return success(message="Logged out")
