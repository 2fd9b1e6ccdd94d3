"""Browse a repository's issues with cache warm-up and search fallback.

Thin orchestration over IssueSyncService and IssueSearchService:

1. Sync when the cache is cold (or stale, when asked to refresh)
2. Search in the requested mode
3. If a remote search fails, keep its error as an alert and answer from
   the cache instead
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from github_issue_cache.config import SyncConfig, get_settings
from github_issue_cache.db.models import Issue
from github_issue_cache.db.repositories import IssueRepository, RepositoryRepository
from github_issue_cache.github.sync import IssueSyncService, SyncFailure
from github_issue_cache.logging import LogContext, bind_repo
from github_issue_cache.schemas.repository import RepositoryRef
from github_issue_cache.search import (
    IssueSearchService,
    SearchFailure,
    SearchFilters,
    SearchMode,
    issue_to_dict,
    serialize_rate_limit,
)


@dataclass
class BrowseResult:
    """What a caller renders: issues, which mode produced them, and alerts."""

    issues: list[Issue] = field(default_factory=list)
    mode: SearchMode = SearchMode.LOCAL
    total_count: int = 0
    alerts: list[str] = field(default_factory=list)
    """User-facing messages about syncs or searches that failed."""

    rate_limit: dict[str, dict[str, Any]] | None = None
    synced: bool = False
    """True if this call ran a sync that succeeded."""

    errors: list[str] = field(default_factory=list)
    """Set only when no mode could answer."""

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "mode": self.mode.value,
            "total_count": self.total_count,
            "synced": self.synced,
            "alerts": self.alerts,
            "errors": self.errors,
            "issues": [issue_to_dict(issue) for issue in self.issues],
            "rate_limit": serialize_rate_limit(self.rate_limit),
        }


class IssueBrowser:
    """Cache-first issue browsing for one user.

    Usage:
        browser = IssueBrowser(session_factory, sync_service, search_service)
        result = await browser.browse(ref, "crash", mode=SearchMode.REMOTE)
        for alert in result.alerts:
            print(alert)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        sync_service: IssueSyncService,
        search_service: IssueSearchService,
        *,
        sync_config: SyncConfig | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._sync_service = sync_service
        self._search_service = search_service
        self._sync_config = sync_config or get_settings().sync

    async def needs_sync(self, ref: RepositoryRef, *, refresh_stale: bool = False) -> bool:
        """Whether the repository has no synced issues (or is stale, if asked)."""
        async with self._session_factory() as session:
            repository = await RepositoryRepository(session).get_by_ref(ref)
            if repository is None:
                return False
            if not await IssueRepository(session).has_synced_issues(repository.id):
                return True
            return refresh_stale and repository.is_stale(self._sync_config.staleness)

    async def browse(
        self,
        ref: RepositoryRef,
        query: str | None = None,
        filters: SearchFilters | None = None,
        sort: str | None = None,
        mode: SearchMode = SearchMode.REMOTE,
        *,
        per_page: int = 30,
        page: int = 1,
        refresh_stale: bool = False,
    ) -> BrowseResult:
        """Return a page of issues, falling back to the cache on failure.

        Args:
            ref: Repository to browse
            query: Free text
            filters: Search filters
            sort: Sort string ("updated", "created-asc", ...)
            mode: Preferred search mode
            per_page: Page size
            page: 1-based page number
            refresh_stale: Also sync when synced_at is older than the
                           staleness window

        Returns:
            BrowseResult; errors is only set when local search failed too
        """
        with LogContext(requested_mode=mode.value, page=page):
            return await self._browse(
                ref, query, filters, sort, mode, per_page, page, refresh_stale=refresh_stale
            )

    async def _browse(
        self,
        ref: RepositoryRef,
        query: str | None,
        filters: SearchFilters | None,
        sort: str | None,
        mode: SearchMode,
        per_page: int,
        page: int,
        *,
        refresh_stale: bool,
    ) -> BrowseResult:
        browse_logger = bind_repo(ref.domain, ref.full_name, name="browse")
        result = BrowseResult()

        if await self.needs_sync(ref, refresh_stale=refresh_stale):
            sync_result = await self._sync_service.sync(ref)
            if isinstance(sync_result, SyncFailure):
                result.alerts.append(sync_result.error)
            else:
                result.synced = True

        search_args = {
            "query": query,
            "filters": filters,
            "sort": sort,
            "per_page": per_page,
            "page": page,
        }
        outcome = await self._search_service.search(ref, mode=mode, **search_args)

        if isinstance(outcome, SearchFailure) and mode is SearchMode.REMOTE:
            browse_logger.info("Remote search failed, falling back to cache")
            result.alerts.append(outcome.error)
            result.rate_limit = outcome.rate_limit
            outcome = await self._search_service.search(ref, mode=SearchMode.LOCAL, **search_args)

        if isinstance(outcome, SearchFailure):
            result.mode = outcome.mode
            result.errors.append(outcome.error)
            return result

        result.issues = outcome.issues
        result.mode = outcome.mode
        result.total_count = outcome.total_count
        if outcome.rate_limit is not None:
            result.rate_limit = outcome.rate_limit
        return result
