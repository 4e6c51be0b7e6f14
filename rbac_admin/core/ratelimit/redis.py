"""
Redis rate limit backend implementation.
"""

from __future__ import annotations

import math
import time
import uuid
from typing import Callable

import redis.asyncio as redis

from rbac_admin.core.config import RedisSettings

from .interfaces import RateLimitResult

# Refill-then-consume has to be a single round trip, otherwise two
# concurrent requests can both spend the last token.
TOKEN_BUCKET_SCRIPT = """
local capacity = tonumber(ARGV[1])
local refill_rate = tonumber(ARGV[2])
local now = tonumber(ARGV[3])
local ttl = tonumber(ARGV[4])

local state = redis.call('HMGET', KEYS[1], 'tokens', 'lastRefill')
local tokens = tonumber(state[1])
local last_refill = tonumber(state[2])
if tokens == nil then tokens = capacity end
if last_refill == nil then last_refill = now end

local elapsed = math.max(0, now - last_refill)
tokens = math.min(capacity, tokens + elapsed * refill_rate)

local allowed = 0
if tokens >= 1 then
  tokens = tokens - 1
  allowed = 1
end

redis.call('HSET', KEYS[1], 'tokens', tostring(tokens), 'lastRefill', tostring(now))
redis.call('EXPIRE', KEYS[1], ttl)
return {allowed, tostring(tokens)}
"""


class RedisRateLimitBackend:
    """
    Redis-backed counters shared by every API process.

    Usage:
        backend = RedisRateLimitBackend(redis.from_url("redis://localhost:6379/0"))
        result = await backend.sliding_window("rate_limit:strict:ip:1.2.3.4", limit=5, window=900)
        await backend.close()
    """

    def __init__(
        self,
        client: redis.Redis,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self._clock = clock
        self._token_bucket = client.register_script(TOKEN_BUCKET_SCRIPT)

    @classmethod
    def from_settings(cls, settings: RedisSettings) -> "RedisRateLimitBackend":
        client = redis.from_url(
            settings.url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=settings.max_connections,
            socket_timeout=settings.socket_timeout,
            socket_connect_timeout=settings.socket_timeout,
        )
        return cls(client)

    async def fixed_window(self, key: str, limit: int, window: int) -> RateLimitResult:
        now = self._clock()
        index = math.floor(now / window)
        window_key = f"{key}:{index}"

        pipe = self.client.pipeline()
        pipe.incr(window_key)
        pipe.expire(window_key, window)
        results = await pipe.execute()
        count = int(results[0])

        allowed = count <= limit
        reset_at = (index + 1) * window
        return RateLimitResult(
            allowed=allowed,
            limit=limit,
            remaining=max(0, limit - count),
            reset_at=reset_at,
            retry_after=0 if allowed else max(1, math.ceil(reset_at - now)),
        )

    async def sliding_window(self, key: str, limit: int, window: int) -> RateLimitResult:
        now = self._clock()

        pipe = self.client.pipeline()
        # Remove entries that fell out of the window
        pipe.zremrangebyscore(key, 0, now - window)
        # Add current request; the member must be unique per request
        pipe.zadd(key, {f"{now}-{uuid.uuid4().hex}": now})
        pipe.zcard(key)
        pipe.expire(key, window)
        results = await pipe.execute()
        count = int(results[2])

        allowed = count <= limit
        return RateLimitResult(
            allowed=allowed,
            limit=limit,
            remaining=max(0, limit - count),
            reset_at=math.floor(now + window),
            retry_after=0 if allowed else window,
        )

    async def token_bucket(
        self,
        key: str,
        capacity: int,
        refill_rate: float,
    ) -> RateLimitResult:
        now = self._clock()
        ttl = math.ceil(capacity / refill_rate) + 60

        allowed_flag, raw_tokens = await self._token_bucket(
            keys=[key],
            args=[capacity, refill_rate, now, ttl],
        )
        allowed = int(allowed_flag) == 1
        tokens = float(raw_tokens)

        return RateLimitResult(
            allowed=allowed,
            limit=capacity,
            remaining=math.floor(tokens),
            reset_at=math.floor(now + (capacity - tokens) / refill_rate),
            retry_after=0 if allowed else max(1, math.ceil((1 - tokens) / refill_rate)),
        )

    async def close(self) -> None:
        await self.client.aclose()
