"""Repository for GitHub Repository model CRUD operations."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from github_issue_cache.db.models import Repository

from .base import BaseRepository

if TYPE_CHECKING:
    from github_issue_cache.schemas.repository import RepositoryData, RepositoryRef


class RepositoryRepository(BaseRepository[Repository]):
    """Repository for cached GitHub Repository entities.

    Rows are keyed by (user_id, domain, owner, name); the same remote
    repository tracked by two users is two rows.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: Async SQLAlchemy session
        """
        super().__init__(session, Repository)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def get_by_ref(self, ref: RepositoryRef) -> Repository | None:
        """Get a repository by (user, domain, owner, name).

        Args:
            ref: Repository reference

        Returns:
            Repository or None if not tracked
        """
        return await self._get_by_fields(
            user_id=ref.user_id,
            domain=ref.domain,
            owner=ref.owner,
            name=ref.name,
        )

    async def list_for_user(self, user_id: int) -> list[Repository]:
        """Get all repositories tracked by a user, ordered by domain and name."""
        stmt = (
            select(Repository)
            .where(Repository.user_id == user_id)
            .order_by(Repository.domain, Repository.full_name)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Create/Update Methods
    # -------------------------------------------------------------------------

    async def upsert(
        self,
        ref: RepositoryRef,
        data: RepositoryData,
    ) -> tuple[Repository, bool]:
        """Create the repository row or refresh its metadata.

        Args:
            ref: Repository reference (identity)
            data: Metadata fetched from GitHub

        Returns:
            Tuple of (repository, created) where created is True if new
        """
        values = {
            "full_name": data.full_name,
            "description": data.description,
            "url": data.url,
            "open_issue_count": data.open_issue_count,
        }

        existing = await self.get_by_ref(ref)
        if existing is not None:
            self._assign(existing, values)
            await self.flush()
            return existing, False

        repo = Repository(
            user_id=ref.user_id,
            domain=ref.domain,
            owner=ref.owner,
            name=ref.name,
            **values,
        )
        self.add(repo)
        await self.flush()
        return repo, True

    async def mark_synced(
        self,
        repository: Repository,
        synced_at: datetime,
        *,
        issue_count: int | None = None,
        open_issue_count: int | None = None,
    ) -> Repository:
        """Record a successful sync.

        Counters are only touched when given (full syncs know them,
        single-issue syncs do not).
        """
        repository.synced_at = synced_at
        if issue_count is not None:
            repository.issue_count = issue_count
        if open_issue_count is not None:
            repository.open_issue_count = open_issue_count
        await self.flush()
        return repository
