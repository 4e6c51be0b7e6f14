"""
Rate limiting: fixed window, sliding window and token bucket.
"""

from .interfaces import RateLimitBackend, RateLimitResult
from .limiter import Algorithm, RateLimiter, RateLimitProfile, build_profiles

__all__ = [
    "Algorithm",
    "RateLimitBackend",
    "RateLimitResult",
    "RateLimiter",
    "RateLimitProfile",
    "build_profiles",
]
