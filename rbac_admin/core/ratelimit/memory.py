"""
In-memory rate limit backend (single process; development and tests).
"""

from __future__ import annotations

import asyncio
import math
import time
from collections import deque
from typing import Callable

from .interfaces import RateLimitResult


class MemoryRateLimitBackend:
    """
    Process-local counters guarded by an asyncio lock.

    Usage:
        backend = MemoryRateLimitBackend()
        result = await backend.fixed_window("ip:1.2.3.4", limit=5, window=60)

        # Deterministic time in tests
        clock = FakeClock(1_000.0)
        backend = MemoryRateLimitBackend(clock=clock)
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = asyncio.Lock()
        # key -> (count, reset_at)
        self._counters: dict[str, tuple[int, float]] = {}
        # key -> (timestamps, window)
        self._logs: dict[str, tuple[deque[float], int]] = {}
        # key -> (tokens, last_refill, full_at)
        self._buckets: dict[str, tuple[float, float, float]] = {}

    async def fixed_window(self, key: str, limit: int, window: int) -> RateLimitResult:
        async with self._lock:
            now = self._clock()
            index = math.floor(now / window)
            window_key = f"{key}:{index}"
            reset_at = (index + 1) * window

            self._purge(now)
            count, _ = self._counters.get(window_key, (0, reset_at))
            count += 1
            self._counters[window_key] = (count, reset_at)

        allowed = count <= limit
        return RateLimitResult(
            allowed=allowed,
            limit=limit,
            remaining=max(0, limit - count),
            reset_at=reset_at,
            retry_after=0 if allowed else max(1, math.ceil(reset_at - now)),
        )

    async def sliding_window(self, key: str, limit: int, window: int) -> RateLimitResult:
        async with self._lock:
            now = self._clock()
            self._purge(now)
            log, _ = self._logs.get(key, (deque(), window))
            while log and log[0] <= now - window:
                log.popleft()
            log.append(now)
            self._logs[key] = (log, window)
            count = len(log)

        allowed = count <= limit
        reset_at = math.floor(now + window)
        return RateLimitResult(
            allowed=allowed,
            limit=limit,
            remaining=max(0, limit - count),
            reset_at=reset_at,
            retry_after=0 if allowed else window,
        )

    async def token_bucket(
        self,
        key: str,
        capacity: int,
        refill_rate: float,
    ) -> RateLimitResult:
        async with self._lock:
            now = self._clock()
            self._purge(now)
            tokens, last_refill, _ = self._buckets.get(key, (float(capacity), now, now))
            tokens = min(float(capacity), tokens + max(0.0, now - last_refill) * refill_rate)

            allowed = tokens >= 1
            if allowed:
                tokens -= 1
            full_at = now + (capacity - tokens) / refill_rate
            self._buckets[key] = (tokens, now, full_at)

        return RateLimitResult(
            allowed=allowed,
            limit=capacity,
            remaining=math.floor(tokens),
            reset_at=math.floor(full_at),
            retry_after=0 if allowed else max(1, math.ceil((1 - tokens) / refill_rate)),
        )

    async def close(self) -> None:
        self._counters.clear()
        self._logs.clear()
        self._buckets.clear()

    def key_count(self) -> int:
        """Number of keys currently holding state."""
        return len(self._counters) + len(self._logs) + len(self._buckets)

    def _purge(self, now: float) -> None:
        """
        Drop state that no longer affects any decision.

        Counters go once their window has passed, logs once every entry is
        older than the window, and buckets once they would have refilled to
        capacity (a missing bucket starts full).
        """
        for k in [k for k, (_, reset_at) in self._counters.items() if reset_at <= now]:
            del self._counters[k]
        for k in [k for k, (log, window) in self._logs.items() if log[-1] <= now - window]:
            del self._logs[k]
        for k in [k for k, (_, _, full_at) in self._buckets.items() if full_at <= now]:
            del self._buckets[k]
