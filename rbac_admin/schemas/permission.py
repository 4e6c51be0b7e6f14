"""
Permission schemas.
"""

from typing import Literal

from pydantic import BaseModel, Field, ConfigDict

from rbac_admin.models.rbac import PermissionType

from .common import StatusValue, Timestamp

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]


class PermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    type: PermissionType
    parent_id: int
    path: str | None = None
    method: str | None = None
    icon: str | None = None
    sort_order: int
    status: int
    created_at: Timestamp
    updated_at: Timestamp


class PermissionCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    code: str = Field(min_length=2, max_length=100)
    type: PermissionType
    parent_id: int = Field(0, ge=0)
    path: str | None = Field(None, max_length=255)
    method: HttpMethod | None = None
    icon: str | None = Field(None, max_length=50)
    sort_order: int = 0
    status: StatusValue = 1


class PermissionUpdate(BaseModel):
    """Partial permission update; omitted fields are left unchanged."""
    name: str | None = Field(None, min_length=2, max_length=50)
    code: str | None = Field(None, min_length=2, max_length=100)
    type: PermissionType | None = None
    parent_id: int | None = Field(None, ge=0)
    path: str | None = Field(None, max_length=255)
    method: HttpMethod | None = None
    icon: str | None = Field(None, max_length=50)
    sort_order: int | None = None
    status: StatusValue | None = None


class PermissionFilter(BaseModel):
    """
    Listing filters.

    Substring match on ``name``/``code``; exact match on ``type``,
    ``parent_id`` and ``status``.
    """
    name: str | None = None
    code: str | None = None
    type: PermissionType | None = None
    parent_id: int | None = Field(None, ge=0)
    status: int | None = Field(None, ge=0, le=1)
