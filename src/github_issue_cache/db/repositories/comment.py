"""Repository for IssueComment model operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from github_issue_cache.db.models import IssueComment

from .base import BaseRepository

if TYPE_CHECKING:
    from github_issue_cache.schemas.issue import CommentData


class IssueCommentRepository(BaseRepository[IssueComment]):
    """Repository for comments, keyed by (issue_id, remote_id)."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, IssueComment)

    async def get_by_remote_id(self, issue_id: int, remote_id: int) -> IssueComment | None:
        return await self._get_by_fields(issue_id=issue_id, remote_id=remote_id)

    async def list_for_issue(self, issue_id: int) -> list[IssueComment]:
        """Comments of an issue, oldest first."""
        stmt = (
            select(IssueComment)
            .where(IssueComment.issue_id == issue_id)
            .order_by(IssueComment.remote_created_at, IssueComment.remote_id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def upsert(self, issue_id: int, data: CommentData) -> tuple[IssueComment, bool]:
        """Create the comment or overwrite its fields.

        Returns:
            Tuple of (comment, created) where created=True if new
        """
        values = data.model_dump()

        existing = await self.get_by_remote_id(issue_id, data.remote_id)
        if existing is not None:
            self._assign(existing, values)
            await self.flush()
            return existing, False

        comment = IssueComment(issue_id=issue_id, **values)
        self.add(comment)
        await self.flush()
        return comment, True
