"""Pydantic schemas for GitHub API rate limit data.

These schemas represent rate limit information from:
- GET /rate_limit API endpoint
- x-ratelimit-* response headers (including error responses)
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, Field


class RateLimitPool(StrEnum):
    """GitHub rate limit resource pools (quota buckets).

    Each pool has its own separate quota. Listing issues and comments uses
    'core'; the search endpoint uses the much smaller 'search' bucket.
    See: https://docs.github.com/en/rest/rate-limit/rate-limit
    """

    CORE = "core"
    SEARCH = "search"
    GRAPHQL = "graphql"
    CODE_SEARCH = "code_search"


class RateLimitStatus(StrEnum):
    """Rate limit health status.

    Thresholds are absolute remaining-request counts per bucket. Defaults:
    - core: WARNING below 200, CRITICAL below 50
    - search: WARNING below 10, CRITICAL below 3
    - EXHAUSTED at 0 remaining in any bucket
    """

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    EXHAUSTED = "exhausted"


class PoolRateLimit(BaseModel):
    """Rate limit information for a single resource pool."""

    pool: RateLimitPool = Field(description="Resource pool name")
    limit: int = Field(ge=0, description="Maximum requests allowed per window")
    remaining: int = Field(ge=0, description="Requests remaining in current window")
    used: int = Field(ge=0, description="Requests used in current window")
    reset_at: datetime = Field(description="UTC datetime when limit resets")

    @property
    def seconds_until_reset(self) -> int:
        """Seconds until rate limit resets (0 if already past)."""
        delta = self.reset_at - datetime.now(UTC)
        return max(0, int(delta.total_seconds()))

    def get_status(self, warning_threshold: int, critical_threshold: int) -> RateLimitStatus:
        """Determine rate limit health status.

        Args:
            warning_threshold: Remaining count below which status is WARNING
            critical_threshold: Remaining count below which status is CRITICAL

        Returns:
            RateLimitStatus enum value
        """
        if self.remaining == 0:
            return RateLimitStatus.EXHAUSTED
        if self.remaining < critical_threshold:
            return RateLimitStatus.CRITICAL
        if self.remaining < warning_threshold:
            return RateLimitStatus.WARNING
        return RateLimitStatus.HEALTHY


class RateLimitSnapshot(BaseModel):
    """Rate limit snapshot across pools.

    Either from the /rate_limit API or accumulated from response headers.
    """

    timestamp: datetime = Field(description="When this snapshot was taken")
    pools: dict[RateLimitPool, PoolRateLimit] = Field(
        default_factory=dict, description="Rate limits by pool"
    )

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Self:
        """Parse from GitHub /rate_limit API response.

        Args:
            data: Raw API response dict with 'resources' key

        Returns:
            RateLimitSnapshot instance
        """
        pools: dict[RateLimitPool, PoolRateLimit] = {}
        resources = data.get("resources", {})

        for pool in RateLimitPool:
            r = resources.get(pool.value)
            if not r:
                continue
            pools[pool] = PoolRateLimit(
                pool=pool,
                limit=r["limit"],
                remaining=r["remaining"],
                used=r.get("used", r["limit"] - r["remaining"]),
                reset_at=datetime.fromtimestamp(r["reset"], tz=UTC),
            )

        return cls(timestamp=datetime.now(UTC), pools=pools)

    @classmethod
    def from_response_headers(
        cls,
        headers: Mapping[str, str],
        default_pool: RateLimitPool = RateLimitPool.CORE,
    ) -> Self | None:
        """Parse from HTTP response headers.

        GitHub includes rate limit info in headers on most responses:
        - x-ratelimit-limit
        - x-ratelimit-remaining
        - x-ratelimit-used
        - x-ratelimit-reset
        - x-ratelimit-resource (pool name)

        Args:
            headers: HTTP response headers (keys compared case-insensitively)
            default_pool: Pool to use if the resource header is missing

        Returns:
            Snapshot with a single pool, or None when the response carries
            no remaining/limit headers (e.g. Enterprise hosts with limits off)
        """
        lowered = {key.lower(): value for key, value in headers.items()}
        if "x-ratelimit-remaining" not in lowered or "x-ratelimit-limit" not in lowered:
            return None

        resource = lowered.get("x-ratelimit-resource", default_pool.value)
        try:
            actual_pool = RateLimitPool(resource)
        except ValueError:
            actual_pool = default_pool

        limit = int(lowered["x-ratelimit-limit"])
        remaining = int(lowered["x-ratelimit-remaining"])
        used = int(lowered.get("x-ratelimit-used", str(max(0, limit - remaining))))
        reset_ts = int(lowered.get("x-ratelimit-reset", "0"))

        reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts > 0 else datetime.now(UTC)

        pool_limit = PoolRateLimit(
            pool=actual_pool,
            limit=limit,
            remaining=remaining,
            used=used,
            reset_at=reset_at,
        )
        return cls(timestamp=datetime.now(UTC), pools={actual_pool: pool_limit})

    def get_pool(self, pool: RateLimitPool) -> PoolRateLimit | None:
        """Get rate limit for a specific pool."""
        return self.pools.get(pool)

    def merge(self, other: "RateLimitSnapshot") -> "RateLimitSnapshot":
        """Merge another snapshot into this one, preferring the other's pools."""
        merged_pools = dict(self.pools)
        merged_pools.update(other.pools)
        return RateLimitSnapshot(
            timestamp=max(self.timestamp, other.timestamp),
            pools=merged_pools,
        )
