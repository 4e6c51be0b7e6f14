"""
Response envelope shared by every endpoint.

    {"code": 0, "message": "Success", "data": ..., "timestamp": "2024-01-15T14:30:00.000Z"}

``code`` is 0 on success and the HTTP status on error.
"""

from datetime import datetime
from typing import Annotated, Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field, PlainSerializer

from rbac_admin.utils.timezone import to_iso8601, utc_now

T = TypeVar("T")


def _timestamp() -> str:
    return to_iso8601(utc_now())


class ApiResponse(BaseModel, Generic[T]):
    """Standard response envelope."""

    code: int = 0
    message: str = "Success"
    data: T | None = None
    timestamp: str = Field(default_factory=_timestamp)


def success(data: Any = None, message: str = "Success") -> dict[str, Any]:
    """Envelope for a successful result (validated by the route's response_model)."""
    return {"code": 0, "message": message, "data": data, "timestamp": _timestamp()}


def error_body(code: int, message: str, data: Any = None) -> dict[str, Any]:
    """Envelope for an error response."""
    return {"code": code, "message": message, "data": data, "timestamp": _timestamp()}


# Datetimes in responses are UTC ISO 8601 with a Z suffix.
Timestamp = Annotated[datetime, PlainSerializer(to_iso8601, return_type=str)]

# Enabled/disabled flag as accepted from clients.
StatusValue = Literal[0, 1]
