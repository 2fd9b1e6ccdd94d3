"""Repository for Issue model CRUD and local search."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from github_issue_cache.db.models import Issue, IssueState

from .base import BaseRepository

if TYPE_CHECKING:
    from github_issue_cache.schemas.issue import IssueData

SORTABLE_COLUMNS = frozenset({"remote_created_at", "remote_updated_at", "comments_count"})


class IssueRepository(BaseRepository[Issue]):
    """Repository for cached Issue entities.

    Issues are keyed by (repository_id, number). Every write happens inside
    the caller's transaction; nothing here commits.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Issue)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def get_by_number(self, repository_id: int, number: int) -> Issue | None:
        """Get an issue by repository and issue number.

        Args:
            repository_id: Repository ID
            number: Issue number

        Returns:
            Issue or None if not cached
        """
        return await self._get_by_fields(repository_id=repository_id, number=number)

    async def count_for_repository(
        self,
        repository_id: int,
        state: IssueState | None = None,
    ) -> int:
        """Count cached issues, optionally in one state."""
        stmt = select(func.count()).select_from(Issue).where(Issue.repository_id == repository_id)
        if state is not None:
            stmt = stmt.where(Issue.state == state)
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    async def has_synced_issues(self, repository_id: int) -> bool:
        """Whether the cache is warm (at least one issue with synced_at set)."""
        stmt = (
            select(Issue.id)
            .where(Issue.repository_id == repository_id, Issue.synced_at.is_not(None))
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def search(
        self,
        repository_id: int,
        *,
        text: str | None = None,
        state: IssueState | None = None,
        labels: Sequence[str] = (),
        assignee: str | None = None,
        author: str | None = None,
        order_by: str = "remote_updated_at",
        descending: bool = True,
    ) -> list[Issue]:
        """Filtered, sorted scan over one repository's cached issues.

        Text, state, author and ordering run in SQL. Label and assignee
        filters run over the JSON columns in Python, so they work on any
        backend.

        Args:
            repository_id: Repository ID
            text: Case-insensitive substring matched against title or body
            state: Restrict to one state (None for all)
            labels: Every label must be present (case-insensitive)
            assignee: Login that must be among the assignees
            author: Author login
            order_by: One of SORTABLE_COLUMNS
            descending: Sort direction

        Returns:
            All matching issues in order
        """
        if order_by not in SORTABLE_COLUMNS:
            raise ValueError(f"Cannot sort issues by {order_by!r}")

        stmt = select(Issue).where(Issue.repository_id == repository_id)

        if text:
            stmt = stmt.where(
                or_(
                    Issue.title.icontains(text, autoescape=True),
                    Issue.body.icontains(text, autoescape=True),
                )
            )
        if state is not None:
            stmt = stmt.where(Issue.state == state)
        if author:
            stmt = stmt.where(func.lower(Issue.author_login) == author.lower())

        column = getattr(Issue, order_by)
        direction = column.desc() if descending else column.asc()
        tiebreak = Issue.number.desc() if descending else Issue.number.asc()
        stmt = stmt.order_by(direction, tiebreak)

        result = await self._session.execute(stmt)
        issues: list[Issue] = list(result.scalars().all())

        wanted_labels = {label.lower() for label in labels}
        if wanted_labels:
            issues = [
                issue
                for issue in issues
                if wanted_labels <= {name.lower() for name in issue.label_names}
            ]
        if assignee:
            login = assignee.lower()
            issues = [
                issue
                for issue in issues
                if login in (name.lower() for name in issue.assignee_logins)
            ]
        return issues

    async def distinct_labels(self, repository_id: int) -> list[str]:
        """Sorted label names in use across a repository's cached issues."""
        stmt = select(Issue.labels).where(Issue.repository_id == repository_id)
        result = await self._session.execute(stmt)
        names = {label["name"] for labels in result.scalars() for label in labels or []}
        return sorted(names, key=str.lower)

    async def distinct_assignees(self, repository_id: int) -> list[str]:
        """Sorted assignee logins across a repository's cached issues."""
        stmt = select(Issue.assignees).where(Issue.repository_id == repository_id)
        result = await self._session.execute(stmt)
        logins = {a["login"] for assignees in result.scalars() for a in assignees or []}
        return sorted(logins, key=str.lower)

    # -------------------------------------------------------------------------
    # Write Methods
    # -------------------------------------------------------------------------

    async def upsert(
        self,
        repository_id: int,
        data: IssueData,
        synced_at: datetime,
    ) -> tuple[Issue, bool]:
        """Create the issue or overwrite its remote fields.

        Args:
            repository_id: Repository ID
            data: Normalized issue from GitHub
            synced_at: Timestamp recorded on the row

        Returns:
            Tuple of (issue, created) where created=True if new
        """
        values = data.to_model_fields()
        values["synced_at"] = synced_at

        existing = await self.get_by_number(repository_id, data.number)
        if existing is not None:
            self._assign(existing, values)
            await self.flush()
            return existing, False

        issue = Issue(repository_id=repository_id, **values)
        self.add(issue)
        await self.flush()
        return issue, True
