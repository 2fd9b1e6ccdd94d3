"""Async GitHub API client wrapper using githubkit.

This module provides a typed async interface to the GitHub REST API for
issue, comment and search retrieval. Every request goes through one retry
wrapper that:

- retries server-class failures (5xx, timeouts, dropped connections) with
  exponential backoff;
- raises rate-limit failures immediately, never sleeping them out;
- feeds x-ratelimit-* headers from successes and errors to the monitor.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import httpx
from githubkit import GitHub, Response
from githubkit.exception import RequestError, RequestFailed, RequestTimeout
from pydantic import ValidationError

from github_issue_cache.config import (
    PUBLIC_GITHUB_DOMAIN,
    RateLimitConfig,
    RetryConfig,
    get_settings,
)
from github_issue_cache.logging import get_logger
from github_issue_cache.schemas.github_api import (
    GitHubComment,
    GitHubIssue,
    GitHubRepository,
    GitHubSearchResponse,
)
from github_issue_cache.schemas.issue import CommentData, IssueData, SearchPage
from github_issue_cache.schemas.repository import RepositoryData

from .credentials import Credential
from .exceptions import (
    ConfigurationError,
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRetryableError,
    GitHubServerError,
)
from .rate_limit.monitor import RateLimitMonitor
from .rate_limit.schemas import PoolRateLimit, RateLimitPool, RateLimitSnapshot, RateLimitStatus

logger = get_logger(__name__)

IssueStateFilter = Literal["open", "closed", "all"]
SearchSortField = Literal["comments", "created", "updated"]
SortOrder = Literal["asc", "desc"]


def api_base_url(domain: str) -> str | None:
    """REST base URL for a host (None means githubkit's public default)."""
    if domain == PUBLIC_GITHUB_DOMAIN:
        return None
    return f"https://{domain}/api/v3/"


@dataclass
class ConnectionCheck:
    """Outcome of GitHubClient.test_connection()."""

    success: bool
    login: str | None = None
    error: str | None = None


class GitHubClient:
    """Async GitHub API client bound to one token on one host.

    Usage:
        async with GitHubClient(token, "github.com") as client:
            issues = await client.list_issues("octo-org", "widgets")
            for issue in issues:
                print(issue.title)

    Or from a credential store entry:
        client = GitHubClient.from_credential(credential)
    """

    def __init__(
        self,
        token: str,
        domain: str,
        *,
        rate_limit_config: RateLimitConfig | None = None,
        retry_config: RetryConfig | None = None,
        rate_monitor: RateLimitMonitor | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT for this host.
            domain: "github.com" or a GitHub Enterprise host name.
            rate_limit_config: Thresholds for the monitor (settings if omitted).
            retry_config: Retry, timeout and page size (settings if omitted).
            rate_monitor: Shared RateLimitMonitor. A private one is created
                         when omitted.

        Raises:
            ConfigurationError: If token or domain is empty. Nothing touches
                the network before this check.
        """
        if not token:
            raise ConfigurationError("GitHub token required")
        if not domain:
            raise ConfigurationError("GitHub domain required")

        self._token = token
        self._domain = domain
        self._retry = retry_config or get_settings().retry
        self._client: GitHub[Any] | None = None

        if rate_monitor is None:
            rate_monitor = RateLimitMonitor(rate_limit_config)
            rate_monitor.on_threshold_crossed(self._log_threshold)
        self._rate_monitor = rate_monitor

    @classmethod
    def from_credential(cls, credential: Credential, **kwargs: Any) -> GitHubClient:
        """Build a client for a stored credential."""
        return cls(credential.token.get_secret_value(), credential.domain, **kwargs)

    def __repr__(self) -> str:
        return f"<GitHubClient(domain='{self._domain}')>"

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            self._client = GitHub(
                self._token,
                base_url=api_base_url(self._domain),
                timeout=httpx.Timeout(
                    self._retry.read_timeout_seconds,
                    connect=self._retry.connect_timeout_seconds,
                ),
                auto_retry=False,
            )
        return self._client

    @property
    def rate_monitor(self) -> RateLimitMonitor:
        """Access the rate limit monitor."""
        return self._rate_monitor

    @property
    def rate_limit_info(self) -> dict[str, dict[str, Any]]:
        """Latest quota per bucket: {pool: {remaining, limit, used, resets_at, status}}."""
        return self._rate_monitor.to_dict()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    # -------------------------------------------------------------------------
    # Request Plumbing
    # -------------------------------------------------------------------------
    async def _request(
        self,
        call: Callable[..., Awaitable[Response[Any]]],
        *,
        pool: RateLimitPool = RateLimitPool.CORE,
        not_found: str = "Resource not found",
        **kwargs: Any,
    ) -> Response[Any]:
        """Run one API call with the retry policy.

        Only GitHubRetryableError is retried; the delay before retry n
        (counting from 0) is backoff_base ** n seconds.
        """
        attempt = 0
        while True:
            cause: Exception
            try:
                resp = await call(**kwargs)
            except RequestFailed as e:
                cause = e
                error = self._handle_error(e, pool, not_found)
            except (RequestTimeout, RequestError) as e:
                cause = e
                error = GitHubServerError(f"GitHub request failed: {e}")
            else:
                self._update_rate_limit_from_headers(resp.headers, pool)
                return resp

            if not isinstance(error, GitHubRetryableError) or attempt >= self._retry.max_retries:
                raise error from cause

            delay = self._retry.backoff_base**attempt
            logger.warning(
                "GitHub request failed on {} ({}), retry {}/{} in {:.0f}s",
                self._domain,
                error,
                attempt + 1,
                self._retry.max_retries,
                delay,
            )
            await asyncio.sleep(delay)
            attempt += 1

    async def _paginate(
        self,
        call: Callable[..., Awaitable[Response[Any]]],
        *,
        not_found: str,
        **kwargs: Any,
    ) -> list[dict[str, Any]]:
        """Collect every page of a list endpoint.

        Each page is its own request, so a 5xx on page 3 retries page 3
        only.
        """
        per_page = self._retry.page_size
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            resp = await self._request(
                call, not_found=not_found, per_page=per_page, page=page, **kwargs
            )
            batch = resp.json()
            items.extend(batch)
            if len(batch) < per_page:
                return items
            page += 1

    def _update_rate_limit_from_headers(
        self,
        headers: Mapping[str, str] | None,
        pool: RateLimitPool,
    ) -> None:
        """Feed x-ratelimit-* headers to the monitor."""
        if headers is None:
            return
        try:
            self._rate_monitor.update_from_headers(dict(headers.items()), pool)
        except (ValueError, ValidationError) as e:
            # Malformed headers must not break API calls
            logger.debug("Ignoring unparseable rate limit headers: {}", e)

    def _log_threshold(self, limit: PoolRateLimit, status: RateLimitStatus) -> None:
        logger.warning(
            "GitHub {} quota on {} is {}: {}/{} remaining, resets at {}",
            limit.pool.value,
            self._domain,
            status.value,
            limit.remaining,
            limit.limit,
            limit.reset_at.isoformat(),
        )

    # -------------------------------------------------------------------------
    # Connection & Rate Limit Info
    # -------------------------------------------------------------------------
    async def test_connection(self) -> ConnectionCheck:
        """Check that the token works on this host.

        Returns:
            ConnectionCheck with the authenticated login or the error.
        """
        try:
            resp = await self._request(self._github.rest.users.async_get_authenticated)
        except GitHubClientError as e:
            return ConnectionCheck(success=False, error=str(e))
        return ConnectionCheck(success=True, login=resp.json().get("login"))

    async def get_rate_limit(self) -> dict[str, dict[str, Any]]:
        """Fetch quota for every bucket from GET /rate_limit.

        This call does not count against the core quota.
        """
        resp = await self._request(self._github.rest.rate_limit.async_get)
        self._rate_monitor.update_from_snapshot(RateLimitSnapshot.from_api_response(resp.json()))
        return self.rate_limit_info

    # -------------------------------------------------------------------------
    # Repository & Issue Methods
    # -------------------------------------------------------------------------
    async def get_repository(self, owner: str, name: str) -> RepositoryData:
        """Get repository metadata.

        Raises:
            GitHubNotFoundError: If the repository doesn't exist or is hidden
        """
        resp = await self._request(
            self._github.rest.repos.async_get,
            not_found=f"Repository {owner}/{name} not found",
            owner=owner,
            repo=name,
        )
        return GitHubRepository.model_validate(resp.json()).to_repository_data()

    async def list_issues(
        self,
        owner: str,
        name: str,
        *,
        state: IssueStateFilter = "all",
    ) -> list[IssueData]:
        """List issues for a repository, every page.

        Args:
            owner: Repository owner (org or user)
            name: Repository name
            state: Filter by state ("open", "closed", "all")

        Returns:
            List of IssueData in the order GitHub returned them
        """
        raw = await self._paginate(
            self._github.rest.issues.async_list_for_repo,
            not_found=f"Repository {owner}/{name} not found",
            owner=owner,
            repo=name,
            state=state,
        )

        issues: list[IssueData] = []
        for item in raw:
            try:
                issues.append(GitHubIssue.model_validate(item).to_issue_data())
            except ValidationError as e:
                logger.debug("Skipping malformed issue payload in {}/{}: {}", owner, name, e)
        return issues

    async def get_issue(self, owner: str, name: str, number: int) -> IssueData:
        """Get a single issue.

        Raises:
            GitHubNotFoundError: If the issue doesn't exist
        """
        resp = await self._request(
            self._github.rest.issues.async_get,
            not_found=f"Issue #{number} not found in {owner}/{name}",
            owner=owner,
            repo=name,
            issue_number=number,
        )
        return GitHubIssue.model_validate(resp.json()).to_issue_data()

    async def list_issue_comments(self, owner: str, name: str, number: int) -> list[CommentData]:
        """List every comment on an issue, oldest first."""
        raw = await self._paginate(
            self._github.rest.issues.async_list_comments,
            not_found=f"Issue #{number} not found in {owner}/{name}",
            owner=owner,
            repo=name,
            issue_number=number,
        )

        comments: list[CommentData] = []
        for item in raw:
            try:
                comments.append(GitHubComment.model_validate(item).to_comment_data())
            except ValidationError as e:
                logger.debug("Skipping malformed comment on {}/{}#{}: {}", owner, name, number, e)
        return comments

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------
    async def search_issues(
        self,
        query: str,
        *,
        sort: SearchSortField | None = None,
        order: SortOrder = "desc",
        per_page: int = 30,
        page: int = 1,
    ) -> SearchPage:
        """Run a GitHub issue search (uses the search quota bucket).

        Args:
            query: Full search query, qualifiers included (e.g. "repo:o/n bug")
            sort: Sort field; None keeps GitHub's best-match order
            order: Sort direction
            per_page: Results per page (max 100)
            page: 1-based page number

        Returns:
            SearchPage with normalized items and GitHub's total_count
        """
        params: dict[str, Any] = {"q": query, "per_page": per_page, "page": page}
        if sort is not None:
            params["sort"] = sort
            params["order"] = order

        resp = await self._request(
            self._github.rest.search.async_issues_and_pull_requests,
            pool=RateLimitPool.SEARCH,
            not_found="Search target not found",
            **params,
        )
        return GitHubSearchResponse.model_validate(resp.json()).to_search_page()

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(
        self,
        error: RequestFailed,
        pool: RateLimitPool,
        not_found: str,
    ) -> GitHubClientError:
        """Convert githubkit exceptions to our custom exceptions."""
        # Error responses still carry quota headers
        headers = error.response.headers
        self._update_rate_limit_from_headers(headers, pool)

        status = error.response.status_code

        if status == 401:
            return GitHubAuthenticationError()
        if status == 429 or (
            status == 403
            and (headers.get("x-ratelimit-remaining") == "0" or "retry-after" in headers)
        ):
            return self._rate_limit_error(headers, pool)
        if status == 403:
            return GitHubClientError(f"Access forbidden: {error}")
        if status == 404:
            return GitHubNotFoundError(not_found)
        if status >= 500:
            return GitHubServerError(f"GitHub server error ({status})", status=status)
        return GitHubClientError(f"GitHub API error ({status}): {error}")

    @staticmethod
    def _rate_limit_error(headers: Mapping[str, str], pool: RateLimitPool) -> GitHubRateLimitError:
        reset_at: datetime | None = None
        reset_ts = headers.get("x-ratelimit-reset")
        retry_after = headers.get("retry-after")
        if reset_ts and reset_ts.isdigit():
            reset_at = datetime.fromtimestamp(int(reset_ts), tz=UTC)
        elif retry_after and retry_after.isdigit():
            reset_at = datetime.now(UTC) + timedelta(seconds=int(retry_after))

        pool_name = headers.get("x-ratelimit-resource", pool.value)
        return GitHubRateLimitError("Rate limit exceeded", reset_at=reset_at, pool=pool_name)
