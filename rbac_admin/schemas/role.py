"""
Role schemas.
"""

from pydantic import BaseModel, Field, ConfigDict

from .common import StatusValue, Timestamp
from .permission import PermissionResponse


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    description: str | None = None
    status: int
    created_at: Timestamp
    updated_at: Timestamp


class RoleCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    code: str = Field(min_length=2, max_length=50)
    description: str | None = Field(None, max_length=255)
    status: StatusValue = 1


class RoleUpdate(BaseModel):
    """Partial role update; omitted fields are left unchanged."""
    name: str | None = Field(None, min_length=2, max_length=50)
    code: str | None = Field(None, min_length=2, max_length=50)
    description: str | None = Field(None, max_length=255)
    status: StatusValue | None = None


class RoleFilter(BaseModel):
    """Listing filters: substring on ``name``/``code``, exact ``status``."""
    name: str | None = None
    code: str | None = None
    status: int | None = Field(None, ge=0, le=1)


class AssignPermissionsRequest(BaseModel):
    permission_ids: list[int] = Field(default_factory=list)


class RoleDetailResponse(BaseModel):
    """Role with its enabled permissions."""
    role: RoleResponse
    permissions: list[PermissionResponse]
