"""Rate limit monitoring for GitHub API.

Tracks quota state passively from response headers so that callers can
warn users about low quota without this layer making UI decisions. The
monitor never sleeps or blocks: it only records and reports.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from github_issue_cache.config import RateLimitConfig, get_settings

from .schemas import (
    PoolRateLimit,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
)

logger = logging.getLogger(__name__)

ThresholdCallback = Callable[[PoolRateLimit, RateLimitStatus], None]

_STATUS_ORDER = [
    RateLimitStatus.HEALTHY,
    RateLimitStatus.WARNING,
    RateLimitStatus.CRITICAL,
    RateLimitStatus.EXHAUSTED,
]


class RateLimitMonitor:
    """Tracks GitHub API rate limits per quota bucket.

    Usage:
        monitor = RateLimitMonitor()
        monitor.update_from_headers(response.headers)
        if monitor.get_status(RateLimitPool.SEARCH) is RateLimitStatus.CRITICAL:
            ...

    Thresholds come from RateLimitConfig and are evaluated per bucket,
    so the search bucket can report CRITICAL while core is HEALTHY.
    """

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        """Initialize the rate limit monitor.

        Args:
            config: Rate limit configuration (uses settings if not provided)
        """
        self._config = config or get_settings().rate_limit
        self._snapshot: RateLimitSnapshot | None = None
        self._threshold_callbacks: list[ThresholdCallback] = []
        self._previous_status: dict[RateLimitPool, RateLimitStatus] = {}

    @property
    def config(self) -> RateLimitConfig:
        """Thresholds in effect for this monitor."""
        return self._config

    # -------------------------------------------------------------------------
    # Passive Tracking
    # -------------------------------------------------------------------------
    def update_from_headers(
        self,
        headers: Mapping[str, str],
        pool: RateLimitPool = RateLimitPool.CORE,
    ) -> None:
        """Update rate limit state from response headers.

        Args:
            headers: HTTP response headers
            pool: Default pool if not specified in headers
        """
        if not self._config.track_from_headers:
            return

        partial = RateLimitSnapshot.from_response_headers(headers, pool)
        if partial is None:
            return
        self._merge(partial)

    def update_from_snapshot(self, snapshot: RateLimitSnapshot) -> None:
        """Merge a full snapshot, e.g. from the /rate_limit endpoint."""
        self._merge(snapshot)

    def _merge(self, partial: RateLimitSnapshot) -> None:
        if self._snapshot is None:
            self._snapshot = partial
        else:
            self._snapshot = self._snapshot.merge(partial)
        self._check_thresholds(partial)

    def _check_thresholds(self, partial: RateLimitSnapshot) -> None:
        """Fire callbacks for pools whose status got worse."""
        for pool, limit in partial.pools.items():
            current = self._status_for(limit)
            previous = self._previous_status.get(pool, RateLimitStatus.HEALTHY)
            self._previous_status[pool] = current

            if _STATUS_ORDER.index(current) <= _STATUS_ORDER.index(previous):
                continue

            for callback in self._threshold_callbacks:
                try:
                    callback(limit, current)
                except Exception as e:
                    logger.error("Threshold callback failed for pool %s: %s", pool.value, e)

    def _status_for(self, limit: PoolRateLimit) -> RateLimitStatus:
        warning, critical = self._config.thresholds_for(limit.pool)
        return limit.get_status(warning, critical)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------
    @property
    def snapshot(self) -> RateLimitSnapshot | None:
        """Current snapshot (None if nothing tracked yet)."""
        return self._snapshot

    def get_pool_limit(
        self,
        pool: RateLimitPool = RateLimitPool.CORE,
    ) -> PoolRateLimit | None:
        """Get rate limit info for a specific pool."""
        if self._snapshot is None:
            return None
        return self._snapshot.get_pool(pool)

    def get_status(
        self,
        pool: RateLimitPool = RateLimitPool.CORE,
    ) -> RateLimitStatus:
        """Get health status for a pool (HEALTHY if unknown)."""
        limit = self.get_pool_limit(pool)
        if limit is None:
            return RateLimitStatus.HEALTHY
        return self._status_for(limit)

    def time_until_reset(
        self,
        pool: RateLimitPool = RateLimitPool.CORE,
    ) -> int:
        """Seconds until the pool resets (0 if no data or already reset)."""
        limit = self.get_pool_limit(pool)
        if limit is None:
            return 0
        return limit.seconds_until_reset

    # -------------------------------------------------------------------------
    # Callbacks & Observability
    # -------------------------------------------------------------------------
    def on_threshold_crossed(self, callback: ThresholdCallback) -> None:
        """Register a callback fired when a pool's status degrades.

        Callbacks are NOT fired on improvement (e.g., CRITICAL -> WARNING).
        """
        self._threshold_callbacks.append(callback)

    def remove_callback(self, callback: ThresholdCallback) -> bool:
        """Remove a previously registered callback."""
        try:
            self._threshold_callbacks.remove(callback)
            return True
        except ValueError:
            return False

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Export quota per pool for callers (empty if nothing tracked).

        Shape: {pool: {remaining, limit, used, resets_at, status}}
        """
        if self._snapshot is None:
            return {}

        return {
            pool.value: {
                "remaining": limit.remaining,
                "limit": limit.limit,
                "used": limit.used,
                "resets_at": limit.reset_at,
                "status": self._status_for(limit).value,
            }
            for pool, limit in self._snapshot.pools.items()
        }

    @property
    def last_updated(self) -> datetime:
        """When the snapshot was last updated (now if never)."""
        if self._snapshot is None:
            return datetime.now(UTC)
        return self._snapshot.timestamp
