"""
Authentication schemas.
"""

from pydantic import BaseModel, EmailStr, Field

from .permission import PermissionResponse
from .role import RoleResponse
from .user import UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=50)


class RegisterRequest(BaseModel):
    """Self-service registration."""
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=50)
    real_name: str | None = Field(None, max_length=50)
    phone: str | None = Field(None, max_length=20)


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(min_length=1, max_length=50)
    new_password: str = Field(min_length=6, max_length=50)


class ProfileResponse(BaseModel):
    """The current user with its effective roles and permissions."""
    user: UserResponse
    roles: list[RoleResponse]
    permissions: list[PermissionResponse]


class LoginResponse(ProfileResponse):
    token: str
    token_type: str = "Bearer"


class RegisterResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "Bearer"
