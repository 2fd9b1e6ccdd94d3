"""Issue Search Service - local cache or GitHub search.

Local mode reads only the cache. Remote mode asks GitHub's search API and
maps the hits into transient Issue objects that are never added to a
session, so remote results can be rendered like cached ones without
writing anything.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from github_issue_cache.db.models import Issue, IssueState
from github_issue_cache.db.repositories import IssueRepository, RepositoryRepository
from github_issue_cache.github.client import GitHubClient
from github_issue_cache.github.credentials import CredentialStore
from github_issue_cache.github.exceptions import (
    GitHubAuthenticationError,
    GitHubRateLimitError,
    format_reset_time,
)
from github_issue_cache.github.sync.enums import ErrorKind
from github_issue_cache.github.sync.issue_sync import ClientFactory
from github_issue_cache.github.sync.results import classify_error
from github_issue_cache.logging import bind_repo
from github_issue_cache.schemas.issue import IssueData
from github_issue_cache.schemas.repository import RepositoryRef

from .query import SearchFilters, SearchMode, SortSpec, build_search_query, parse_sort

RateLimitInfo = dict[str, dict[str, Any]]


@dataclass
class SearchSuccess:
    """A page of matching issues."""

    issues: list[Issue]
    mode: SearchMode
    total_count: int
    """All matches (local) or GitHub's estimate (remote), not just this page."""

    rate_limit: RateLimitInfo | None = None
    sort: SortSpec = field(default_factory=SortSpec)

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": True,
            "mode": self.mode.value,
            "total_count": self.total_count,
            "sort": str(self.sort),
            "issues": [issue_to_dict(issue) for issue in self.issues],
            "rate_limit": serialize_rate_limit(self.rate_limit),
        }


@dataclass
class SearchFailure:
    """A search that returned nothing. rate_limit is set when known."""

    kind: ErrorKind
    error: str
    rate_limit: RateLimitInfo | None = None
    mode: SearchMode = SearchMode.REMOTE

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": False,
            "mode": self.mode.value,
            "kind": self.kind.value,
            "error": self.error,
            "rate_limit": serialize_rate_limit(self.rate_limit),
        }


SearchResult = SearchSuccess | SearchFailure


def issue_to_dict(issue: Issue) -> dict[str, object]:
    """Plain-data view of a cached or transient issue."""
    return {
        "number": issue.number,
        "title": issue.title,
        "state": IssueState(issue.state).value,
        "author": issue.author_login,
        "labels": issue.label_names,
        "assignees": issue.assignee_logins,
        "comments": issue.comments_count,
        "created_at": issue.remote_created_at.isoformat() if issue.remote_created_at else None,
        "updated_at": issue.remote_updated_at.isoformat() if issue.remote_updated_at else None,
        "cached": issue.synced_at is not None,
    }


def serialize_rate_limit(info: RateLimitInfo | None) -> RateLimitInfo | None:
    if info is None:
        return None
    return {
        pool: {
            key: value.isoformat() if hasattr(value, "isoformat") else value
            for key, value in values.items()
        }
        for pool, values in info.items()
    }


def build_transient_issue(data: IssueData, repository_id: int | None = None) -> Issue:
    """Issue object for display only; it is never added to a session."""
    return Issue(
        repository_id=repository_id,
        synced_at=None,
        **data.to_model_fields(),
    )


class IssueSearchService:
    """Service for searching a repository's issues.

    Usage:
        service = IssueSearchService(get_session_factory(), credential_store)
        result = await service.search(ref, "crash", SearchFilters(state="open"))
        if result.success:
            for issue in result.issues:
                print(issue.number, issue.title)

    No retries happen here: a failed remote search is reported as-is and
    the caller decides whether to fall back to local mode.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        credentials: CredentialStore,
        *,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._credentials = credentials
        self._client_factory = client_factory or GitHubClient.from_credential

    async def search(
        self,
        ref: RepositoryRef,
        query: str | None = None,
        filters: SearchFilters | None = None,
        sort: str | SortSpec | None = None,
        mode: SearchMode = SearchMode.LOCAL,
        *,
        per_page: int = 30,
        page: int = 1,
    ) -> SearchResult:
        """Search issues in local or remote mode.

        Args:
            ref: Repository to search
            query: Free text (title or body)
            filters: State, labels, assignee and author filters
            sort: "created", "updated-asc", ... or a SortSpec
            mode: SearchMode.LOCAL or SearchMode.REMOTE
            per_page: Page size
            page: 1-based page number

        Returns:
            SearchSuccess or SearchFailure; errors are never raised
        """
        filters = filters or SearchFilters()
        sort_spec = sort if isinstance(sort, SortSpec) else parse_sort(sort)
        per_page = max(1, per_page)
        page = max(1, page)

        if mode is SearchMode.REMOTE:
            return await self._remote_search(ref, query, filters, sort_spec, per_page, page)
        return await self._local_search(ref, query, filters, sort_spec, per_page, page)

    # -------------------------------------------------------------------------
    # Local
    # -------------------------------------------------------------------------
    async def _local_search(
        self,
        ref: RepositoryRef,
        query: str | None,
        filters: SearchFilters,
        sort: SortSpec,
        per_page: int,
        page: int,
    ) -> SearchResult:
        search_logger = bind_repo(ref.domain, ref.full_name, name="search")
        try:
            async with self._session_factory() as session:
                repository = await RepositoryRepository(session).get_by_ref(ref)
                if repository is None:
                    return SearchFailure(
                        kind=ErrorKind.NOT_TRACKED,
                        error=f"Repository {ref.full_name} on {ref.domain} is not tracked",
                        mode=SearchMode.LOCAL,
                    )

                state = filters.effective_state
                matches = await IssueRepository(session).search(
                    repository.id,
                    text=query,
                    state=IssueState(state) if state else None,
                    labels=filters.labels,
                    assignee=filters.assignee,
                    author=filters.author,
                    order_by=sort.field.column,
                    descending=sort.descending,
                )
        except Exception as e:
            search_logger.exception("Local search failed")
            return SearchFailure(
                kind=classify_error(e),
                error=f"Search failed: {e}",
                mode=SearchMode.LOCAL,
            )

        start = (page - 1) * per_page
        return SearchSuccess(
            issues=_page(matches, start, per_page),
            mode=SearchMode.LOCAL,
            total_count=len(matches),
            sort=sort,
        )

    # -------------------------------------------------------------------------
    # Remote
    # -------------------------------------------------------------------------
    async def _remote_search(
        self,
        ref: RepositoryRef,
        query: str | None,
        filters: SearchFilters,
        sort: SortSpec,
        per_page: int,
        page: int,
    ) -> SearchResult:
        search_logger = bind_repo(ref.domain, ref.full_name, name="search")

        credential = self._credentials.lookup(ref.user_id, ref.domain)
        if credential is None:
            return SearchFailure(
                kind=ErrorKind.NO_CREDENTIAL,
                error=f"No GitHub token configured for {ref.domain}",
            )

        search_query = build_search_query(ref.full_name, query, filters)
        client: GitHubClient | None = None
        try:
            async with self._session_factory() as session:
                repository = await RepositoryRepository(session).get_by_ref(ref)
            repository_id = repository.id if repository is not None else None

            async with self._client_factory(credential) as client:
                result_page = await client.search_issues(
                    search_query,
                    sort=sort.field.value,
                    order=sort.direction.value,
                    per_page=per_page,
                    page=page,
                )
        except GitHubRateLimitError as e:
            message = "Search rate limit exceeded. Showing all cached issues."
            if e.reset_at is not None:
                message = f"{message} Resets at {format_reset_time(e.reset_at)}"
            search_logger.warning("Rate limited during search: {message}", message=message)
            return SearchFailure(
                kind=ErrorKind.RATE_LIMITED,
                error=message,
                rate_limit=client.rate_limit_info if client is not None else None,
            )
        except GitHubAuthenticationError:
            search_logger.error("Auth error during search")
            return SearchFailure(
                kind=ErrorKind.UNAUTHORIZED,
                error="Unauthorized - check your GitHub token",
                rate_limit=client.rate_limit_info if client is not None else None,
            )
        except Exception as e:
            search_logger.exception("Search failed for query {query!r}", query=search_query)
            return SearchFailure(
                kind=classify_error(e),
                error=f"Search failed: {e}",
                rate_limit=client.rate_limit_info if client is not None else None,
            )

        search_logger.info(
            "GitHub search returned {count} of {total} for {query!r}",
            count=len(result_page.items),
            total=result_page.total_count,
            query=search_query,
        )
        return SearchSuccess(
            issues=[build_transient_issue(item, repository_id) for item in result_page.items],
            mode=SearchMode.REMOTE,
            total_count=result_page.total_count,
            rate_limit=client.rate_limit_info,
            sort=sort,
        )


def _page(items: Sequence[Issue], start: int, size: int) -> list[Issue]:
    return list(items[start : start + size])
