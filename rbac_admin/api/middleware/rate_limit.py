"""
Rate limiting middleware and per-route limits.

Global floor: ``RateLimitMiddleware`` applies the loose (token bucket)
profile to every request, keyed by client IP.

Per-route: ``rate_limit(profile, key_func)`` is a FastAPI dependency that
runs before authentication and raises ``ResourceExhausted`` on denial.
"""

from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from rbac_admin.core.exceptions import ResourceExhausted
from rbac_admin.core.ratelimit import RateLimitProfile, build_profiles
from rbac_admin.core.security import extract_bearer_token
from rbac_admin.schemas.common import error_body

logger = structlog.get_logger()

KeyFunc = Callable[[Request], str]


# ============================================================
# KEY FUNCTIONS
# ============================================================

def get_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _get_user_id(request: Request) -> int | None:
    """
    User id for keying, without touching the database.

    Prefers an identity the authenticator already resolved; otherwise reads
    the subject of a validly signed bearer token.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id is not None:
        return user_id
    token = extract_bearer_token(request.headers.get("Authorization"))
    return request.app.state.container.token_service.peek_user_id(token)


def ip_key(request: Request) -> str:
    return f"ip:{get_client_ip(request)}"


def user_key(request: Request) -> str:
    """Authenticated user if any, else client IP."""
    user_id = _get_user_id(request)
    if user_id is not None:
        return f"user:{user_id}"
    return ip_key(request)


def endpoint_key(request: Request) -> str:
    """User-or-IP scoped to one method and path."""
    return f"{user_key(request)}:{request.method}:{request.url.path}"


# ============================================================
# GLOBAL MIDDLEWARE
# ============================================================

class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Global request floor (loose profile, keyed by client IP).

    Reads the limiter from the application's container so tests can swap
    the backend. Route-level limits set their own headers; this one only
    fills them in when absent.
    """

    skip_paths = ("/health", "/docs", "/openapi.json", "/redoc")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        container = request.app.state.container
        settings = container.settings.rate_limit

        if not settings.enabled or self._should_skip(request.url.path):
            return await call_next(request)

        profile = build_profiles(settings)["loose"]
        key = ip_key(request)
        result = await container.rate_limiter.hit(profile, key)

        if result is not None and not result.allowed:
            logger.warning("Rate limit exceeded", profile=profile.name, key=key)
            return JSONResponse(
                status_code=ResourceExhausted.status_code,
                content=error_body(
                    ResourceExhausted.status_code,
                    profile.message,
                    {"retry_after": result.retry_after},
                ),
                headers=result.headers(),
            )

        response = await call_next(request)

        if result is not None:
            for name, value in result.headers().items():
                response.headers.setdefault(name, value)

        return response

    def _should_skip(self, path: str) -> bool:
        """Paths to skip rate limiting."""
        return any(path.startswith(p) for p in self.skip_paths)


# ============================================================
# PER-ROUTE DEPENDENCY
# ============================================================

def rate_limit(profile_name: str, key_func: KeyFunc = user_key) -> Callable:
    """
    Dependency factory for per-route rate limiting.

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limit("strict", ip_key))])
        async def login(...):
            ...
    """

    async def check_rate_limit(request: Request, response: Response) -> None:
        container = request.app.state.container
        settings = container.settings.rate_limit
        if not settings.enabled:
            return

        profile: RateLimitProfile = build_profiles(settings)[profile_name]
        key = key_func(request)
        result = await container.rate_limiter.hit(profile, key)
        if result is None:
            return

        if not result.allowed:
            logger.warning("Rate limit exceeded", profile=profile.name, key=key)
            raise ResourceExhausted(
                profile.message,
                retry_after=result.retry_after,
                headers=result.headers(),
            )

        for name, value in result.headers().items():
            response.headers[name] = value

    return check_rate_limit
