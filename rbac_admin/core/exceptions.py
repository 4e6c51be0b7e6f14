"""
Application error taxonomy.

Services raise these; the exception handlers registered in ``main`` render
them with the standard response envelope. The envelope ``code`` mirrors the
HTTP status so clients can branch on either.
"""

from typing import Any


class AppError(Exception):
    """Base class for all errors that are safe to show to API clients."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        headers: dict[str, str] | None = None,
        data: Any = None,
    ):
        self.message = message or self.default_message
        self.headers = headers or {}
        self.data = data
        super().__init__(self.message)

    @property
    def code(self) -> int:
        return self.status_code


class InvalidArgument(AppError):
    """Malformed input or a reference to something that cannot be used."""

    status_code = 400
    default_message = "Invalid argument"


class Unauthenticated(AppError):
    """Missing, invalid or expired credentials, or an unusable account."""

    status_code = 401
    default_message = "Not authenticated"

    def __init__(self, message: str | None = None, **kwargs: Any):
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class PermissionDenied(AppError):
    status_code = 403
    default_message = "Permission denied"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    """Uniqueness violation or a referential guard that blocks the change."""

    status_code = 409
    default_message = "Conflict"


class ResourceExhausted(AppError):
    """Rate limit exceeded."""

    status_code = 429
    default_message = "Too many requests, please try again later"

    def __init__(
        self,
        message: str | None = None,
        *,
        retry_after: int = 0,
        headers: dict[str, str] | None = None,
    ):
        self.retry_after = retry_after
        headers = dict(headers or {})
        headers.setdefault("Retry-After", str(retry_after))
        super().__init__(message, headers=headers, data={"retry_after": retry_after})
