"""Rate limit monitoring for GitHub API.

Tracks per-bucket quota from response headers so callers can warn users
and fall back to cached data instead of waiting out a reset window.
"""

from .monitor import RateLimitMonitor
from .schemas import (
    PoolRateLimit,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
)

__all__ = [
    "PoolRateLimit",
    "RateLimitMonitor",
    "RateLimitPool",
    "RateLimitSnapshot",
    "RateLimitStatus",
]
