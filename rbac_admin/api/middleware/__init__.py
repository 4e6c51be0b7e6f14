"""Middleware package."""

from rbac_admin.api.middleware.logging import LoggingMiddleware
from rbac_admin.api.middleware.request_id import RequestIdMiddleware
from rbac_admin.api.middleware.rate_limit import (
    RateLimitMiddleware,
    endpoint_key,
    get_client_ip,
    ip_key,
    rate_limit,
    user_key,
)

__all__ = [
    "LoggingMiddleware",
    "RequestIdMiddleware",
    "RateLimitMiddleware",
    "endpoint_key",
    "get_client_ip",
    "ip_key",
    "rate_limit",
    "user_key",
]
