"""Repository Sync Service - start tracking a repository.

Fetches repository metadata from GitHub and upserts the cache row keyed
by (user, domain, owner, name). This is how a repository becomes tracked
before its issues can be synced.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from github_issue_cache.db.repositories import RepositoryRepository
from github_issue_cache.github.client import GitHubClient
from github_issue_cache.github.credentials import CredentialStore
from github_issue_cache.logging import bind_repo
from github_issue_cache.schemas.repository import RepositoryRef

from .issue_sync import ClientFactory
from .results import RepositorySyncResult, SyncFailure


class RepositorySyncService:
    """Service for adding or refreshing a tracked repository.

    Usage:
        service = RepositorySyncService(get_session_factory(), credential_store)
        result = await service.sync(RepositoryRef(user_id=1, owner="o", name="n"))
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

    async def sync(self, ref: RepositoryRef) -> RepositorySyncResult:
        """Fetch metadata for ref and upsert its cache row.

        Returns:
            RepositorySyncResult; errors are captured, not raised
        """
        repo_logger = bind_repo(ref.domain, ref.full_name)

        credential = self._credentials.lookup(ref.user_id, ref.domain)
        if credential is None:
            return RepositorySyncResult.from_failure(SyncFailure.no_credential(ref.domain))

        try:
            async with self._client_factory(credential) as client:
                data = await client.get_repository(ref.owner, ref.name)

            async with self._session_factory() as session, session.begin():
                repository, created = await RepositoryRepository(session).upsert(ref, data)
                if created:
                    repo_logger.info("Tracking repository", repo_id=repository.id)
        except Exception as e:
            failure = SyncFailure.from_error(e, action="fetch repository")
            repo_logger.error("Failed to fetch repository: {error}", error=failure.error)
            return RepositorySyncResult.from_failure(failure)

        return RepositorySyncResult(repository=repository, created=created)
