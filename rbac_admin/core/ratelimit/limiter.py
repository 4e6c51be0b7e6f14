"""
Rate limiter: profiles and the fail-open policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import structlog

from rbac_admin.core.config import RateLimitSettings

from .interfaces import RateLimitBackend, RateLimitResult

logger = structlog.get_logger()


class Algorithm(str, Enum):
    FIXED_WINDOW = "fixed_window"
    SLIDING_WINDOW = "sliding_window"
    TOKEN_BUCKET = "token_bucket"


@dataclass(frozen=True)
class RateLimitProfile:
    """
    A named limit.

    ``limit`` is the max requests per ``window`` seconds for the window
    algorithms, and the bucket capacity for the token bucket.
    """

    name: str
    algorithm: Algorithm
    limit: int
    window: int = 60
    refill_rate: float = 1.0
    message: str = "Too many requests, please try again later"


def build_profiles(settings: RateLimitSettings) -> dict[str, RateLimitProfile]:
    """The strict / moderate / loose profiles from configuration."""
    return {
        "strict": RateLimitProfile(
            name="strict",
            algorithm=Algorithm.SLIDING_WINDOW,
            limit=settings.strict_max_requests,
            window=settings.strict_window,
            message="Too many attempts, please try again later",
        ),
        "moderate": RateLimitProfile(
            name="moderate",
            algorithm=Algorithm.FIXED_WINDOW,
            limit=settings.moderate_max_requests,
            window=settings.moderate_window,
            message="API rate limit exceeded, please slow down",
        ),
        "loose": RateLimitProfile(
            name="loose",
            algorithm=Algorithm.TOKEN_BUCKET,
            limit=settings.loose_capacity,
            refill_rate=settings.loose_refill_rate,
        ),
    }


class RateLimiter:
    """
    Counts requests against a profile.

    Backend failures are logged and the request is allowed: an unreachable
    counter store must not take the whole API down with it.
    """

    def __init__(self, backend: RateLimitBackend, key_prefix: str = "rate_limit"):
        self.backend = backend
        self.key_prefix = key_prefix

    async def hit(self, profile: RateLimitProfile, key: str) -> RateLimitResult | None:
        """
        Count one request for ``key``.

        Returns:
            The result, or None when the backend failed (request allowed).
        """
        # Profiles keep separate keys; the algorithms store different redis types
        full_key = f"{self.key_prefix}:{profile.name}:{key}"
        try:
            if profile.algorithm is Algorithm.SLIDING_WINDOW:
                return await self.backend.sliding_window(full_key, profile.limit, profile.window)
            if profile.algorithm is Algorithm.TOKEN_BUCKET:
                return await self.backend.token_bucket(
                    full_key, profile.limit, profile.refill_rate
                )
            return await self.backend.fixed_window(full_key, profile.limit, profile.window)
        except Exception:
            logger.exception(
                "Rate limiter backend error, allowing request",
                profile=profile.name,
                key=full_key,
            )
            return None
