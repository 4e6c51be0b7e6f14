"""
Request Context Utilities.

Request-scoped identifiers for log correlation. The request ID is set by
``RequestIdMiddleware``; the user ID is set by the authenticator once a
bearer token has been resolved to a user.

Usage:
    from rbac_admin.utils.context import get_request_id

    logger.info("Processing", request_id=get_request_id())
"""

from contextvars import ContextVar, Token
from typing import Any, Optional


# Request-scoped context using contextvars (async-safe)
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_user_id: ContextVar[Optional[int]] = ContextVar("user_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID."""
    return _request_id.get()


def set_request_id(request_id: str) -> Token:
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


def get_context_user() -> Optional[int]:
    return _user_id.get()


def set_context_user(user_id: int | None) -> None:
    """
    Set the authenticated user for the current request.

    Call this from the authenticator after the token has been resolved.
    """
    _user_id.set(user_id)


def add_request_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that adds request context to all logs."""
    request_id = get_request_id()
    if request_id:
        event_dict.setdefault("request_id", request_id)

    user_id = get_context_user()
    if user_id is not None:
        event_dict.setdefault("user_id", user_id)

    return event_dict
