"""
Rate limit backend protocol.
Implementations: RedisRateLimitBackend, MemoryRateLimitBackend
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class RateLimitResult:
    """
    Outcome of one counted request.

    Attributes:
        allowed: Whether the request fits in the limit
        limit: Max requests per window, or bucket capacity
        remaining: Requests (or whole tokens) left
        reset_at: Epoch seconds when the window resets / the bucket is full
        retry_after: Seconds the client should wait when denied
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after: int = 0

    def headers(self) -> dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class RateLimitBackend(Protocol):
    """
    Protocol for rate limit counter stores.

    Every method counts the current request against ``key`` and reports
    whether it is allowed. Counter updates must be atomic in the store so
    concurrent requests need no locking on the caller's side.
    """

    async def fixed_window(self, key: str, limit: int, window: int) -> RateLimitResult:
        """Counter per ``floor(now / window)`` bucket; allowed iff count <= limit."""
        ...

    async def sliding_window(self, key: str, limit: int, window: int) -> RateLimitResult:
        """Timestamp log over the last ``window`` seconds; allowed iff size <= limit."""
        ...

    async def token_bucket(
        self,
        key: str,
        capacity: int,
        refill_rate: float,
    ) -> RateLimitResult:
        """Refill ``refill_rate`` tokens/s up to ``capacity``; allowed iff a token is left."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...
