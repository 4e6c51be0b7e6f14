"""
User schemas.
"""

from pydantic import BaseModel, EmailStr, Field, ConfigDict

from .common import StatusValue, Timestamp
from .role import RoleResponse


class UserResponse(BaseModel):
    """User response schema (never carries the password hash)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    real_name: str | None = None
    phone: str | None = None
    avatar: str | None = None
    status: int
    last_login_at: Timestamp | None = None
    last_login_ip: str | None = None
    created_at: Timestamp
    updated_at: Timestamp


class UserCreate(BaseModel):
    """Administrative user creation."""
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=50)
    real_name: str | None = Field(None, max_length=50)
    phone: str | None = Field(None, max_length=20)
    avatar: str | None = Field(None, max_length=255)
    status: StatusValue = 1


class UserUpdate(BaseModel):
    """Partial user update; omitted fields are left unchanged."""
    email: EmailStr | None = None
    real_name: str | None = Field(None, max_length=50)
    phone: str | None = Field(None, max_length=20)
    avatar: str | None = Field(None, max_length=255)
    status: StatusValue | None = None


class UserFilter(BaseModel):
    """
    Listing filters.

    ``username`` and ``email`` match substrings; ``status`` matches exactly.
    Omitted fields do not filter.
    """
    username: str | None = None
    email: str | None = None
    status: int | None = Field(None, ge=0, le=1)


class AssignRolesRequest(BaseModel):
    role_ids: list[int] = Field(default_factory=list)


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(min_length=6, max_length=50)


class UserDetailResponse(BaseModel):
    """User with its enabled roles."""
    user: UserResponse
    roles: list[RoleResponse]
