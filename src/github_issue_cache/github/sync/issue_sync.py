"""Issue Sync Service - Fetch → Transform → Store pipeline.

Brings a tracked repository's issues and their comments from GitHub into
the local cache. A sync is all or nothing: the issue set is fetched first,
then every issue and comment is written in one transaction, so a failure
at any point leaves previously cached rows exactly as they were.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from github_issue_cache.db.models import IssueState
from github_issue_cache.db.repositories import (
    IssueCommentRepository,
    IssueRepository,
    RepositoryRepository,
)
from github_issue_cache.github.client import GitHubClient
from github_issue_cache.github.credentials import Credential, CredentialStore
from github_issue_cache.github.exceptions import GitHubClientError
from github_issue_cache.logging import bind_issue, bind_repo
from github_issue_cache.schemas.issue import IssueData
from github_issue_cache.schemas.repository import RepositoryRef

from .results import SyncFailure, SyncResult, SyncSuccess

ClientFactory = Callable[[Credential], GitHubClient]


class IssueSyncService:
    """Service for syncing issues from GitHub into the local cache.

    Usage:
        service = IssueSyncService(get_session_factory(), credential_store)
        result = await service.sync(RepositoryRef(user_id=1, owner="o", name="n"))
        if result.success:
            print(f"Synced {result.synced_count} issues")

    The service opens its own sessions from the factory. Concurrent syncs
    of the same repository run independent transactions; the last one to
    commit wins per issue.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        credentials: CredentialStore,
        *,
        client_factory: ClientFactory | None = None,
    ) -> None:
        """Initialize the sync service.

        Args:
            session_factory: Factory for database sessions
            credentials: Source of per-user, per-domain tokens
            client_factory: Builds a client for a credential
                            (GitHubClient.from_credential by default)
        """
        self._session_factory = session_factory
        self._credentials = credentials
        self._client_factory = client_factory or GitHubClient.from_credential

    async def sync(
        self,
        ref: RepositoryRef,
        issue_number: int | None = None,
    ) -> SyncResult:
        """Sync every issue of a repository, or a single issue.

        Flow:
            1. Resolve the credential for the repository's domain
            2. Load the tracked repository row
            3. Fetch the issue set from GitHub (nothing written yet)
            4. In one transaction, upsert each issue then fetch and upsert
               its comments
            5. Stamp the repository with synced_at (and counters on a full sync)

        Args:
            ref: Repository to sync
            issue_number: Sync only this issue when given

        Returns:
            SyncSuccess, or SyncFailure with cache_preserved=True

        Note:
            Errors are captured in the result, not raised.
        """
        if issue_number is None:
            sync_logger = bind_repo(ref.domain, ref.full_name)
        else:
            sync_logger = bind_issue(ref.domain, ref.full_name, issue_number)

        credential = self._credentials.lookup(ref.user_id, ref.domain)
        if credential is None:
            sync_logger.warning("No credential for domain, skipping sync")
            return SyncFailure.no_credential(ref.domain)

        try:
            async with self._session_factory() as session:
                repository = await RepositoryRepository(session).get_by_ref(ref)
            if repository is None:
                sync_logger.warning("Repository is not tracked, skipping sync")
                return SyncFailure.not_tracked(ref.full_name, ref.domain)
            repository_id = repository.id

            async with self._client_factory(credential) as client:
                issues = await self._fetch_issues(client, ref, issue_number)
                sync_logger.debug("Fetched {count} issues", count=len(issues))

                synced_count = await self._store(client, ref, repository_id, issues, issue_number)
        except Exception as e:
            failure = SyncFailure.from_error(e)
            if isinstance(e, GitHubClientError):
                sync_logger.error("Sync failed: {error}", error=failure.error)
            else:
                sync_logger.exception("Sync failed: {error}", error=failure.error)
            return failure

        sync_logger.info("Synced {count} issues", count=synced_count)
        return SyncSuccess(synced_count=synced_count, repository_id=repository_id)

    async def _fetch_issues(
        self,
        client: GitHubClient,
        ref: RepositoryRef,
        issue_number: int | None,
    ) -> list[IssueData]:
        if issue_number is None:
            return await client.list_issues(ref.owner, ref.name, state="all")
        return [await client.get_issue(ref.owner, ref.name, issue_number)]

    async def _store(
        self,
        client: GitHubClient,
        ref: RepositoryRef,
        repository_id: int,
        issues: list[IssueData],
        issue_number: int | None,
    ) -> int:
        """Write issues and comments in a single transaction.

        Any exception, including a comment fetch failing halfway through,
        rolls back every row written here.
        """
        synced_at = datetime.now(UTC)

        async with self._session_factory() as session, session.begin():
            issue_repo = IssueRepository(session)
            comment_repo = IssueCommentRepository(session)
            repo_repo = RepositoryRepository(session)

            for data in issues:
                issue, _ = await issue_repo.upsert(repository_id, data, synced_at)
                comments = await client.list_issue_comments(ref.owner, ref.name, data.number)
                for comment in comments:
                    await comment_repo.upsert(issue.id, comment)

            repository = await repo_repo.get_by_id(repository_id)
            if repository is None:
                raise LookupError(f"Repository {ref.full_name} disappeared during sync")

            if issue_number is None:
                await repo_repo.mark_synced(
                    repository,
                    synced_at,
                    issue_count=await issue_repo.count_for_repository(repository_id),
                    open_issue_count=await issue_repo.count_for_repository(
                        repository_id, IssueState.OPEN
                    ),
                )
            else:
                await repo_repo.mark_synced(repository, synced_at)

        return len(issues)
