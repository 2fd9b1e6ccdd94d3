"""SQLAlchemy ORM models for GitHub Issue Cache."""

from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class IssueState(str, Enum):
    """Issue state enum."""

    OPEN = "open"
    CLOSED = "closed"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# ------------------------------------------------------------------------------
# Repository model
# ------------------------------------------------------------------------------
class Repository(Base):
    """Cached GitHub repository, one row per (user, domain, owner, name)."""

    __tablename__ = "repositories"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    domain: Mapped[str] = mapped_column(String(255), default="github.com")
    owner: Mapped[str] = mapped_column(String(100))  # e.g., "octo-org"
    name: Mapped[str] = mapped_column(String(100))  # e.g., "widgets"
    full_name: Mapped[str] = mapped_column(String(200))  # "octo-org/widgets"
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    issue_count: Mapped[int] = mapped_column(default=0)
    open_issue_count: Mapped[int] = mapped_column(default=0)
    synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    issues: Mapped[list["Issue"]] = relationship(
        back_populates="repository",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "domain", "owner", "name", name="uq_user_domain_repo"),
    )

    def __repr__(self) -> str:
        return f"<Repository(id={self.id}, domain='{self.domain}', full_name='{self.full_name}')>"

    def is_stale(self, max_age: timedelta, *, now: datetime | None = None) -> bool:
        """Check whether the last sync is older than max_age (never synced is stale)."""
        if self.synced_at is None:
            return True
        now = now or datetime.now(UTC)
        return now - _as_utc(self.synced_at) > max_age

    def staleness_in_words(self, *, now: datetime | None = None) -> str:
        """Human-readable age of the cache, e.g. '3 minutes ago'."""
        if self.synced_at is None:
            return "Never synced"

        now = now or datetime.now(UTC)
        seconds = max(0, int((now - _as_utc(self.synced_at)).total_seconds()))
        if seconds < 60:
            return "just now"
        for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
            if seconds >= size:
                count = seconds // size
                return f"{count} {unit}{'s' if count != 1 else ''} ago"
        return "just now"


# ------------------------------------------------------------------------------
# Issue model
# ------------------------------------------------------------------------------
class Issue(Base):
    """GitHub issue cached for a repository."""

    __tablename__ = "issues"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True)

    # Foreign key to repository
    repository_id: Mapped[int] = mapped_column(ForeignKey("repositories.id", ondelete="CASCADE"))

    # --------------------------------------------------------------------------
    # Remote fields (overwritten on every sync)
    # --------------------------------------------------------------------------
    number: Mapped[int] = mapped_column()
    title: Mapped[str] = mapped_column(String(1000))
    state: Mapped[IssueState] = mapped_column(default=IssueState.OPEN)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_login: Mapped[str | None] = mapped_column(String(100), nullable=True)
    author_avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    comments_count: Mapped[int] = mapped_column(default=0)
    remote_created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    remote_updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # JSON columns
    labels: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)  # [{name, color}]
    assignees: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, default=list
    )  # [{login, avatar_url}]

    # --------------------------------------------------------------------------
    # Metadata
    # --------------------------------------------------------------------------
    synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    # --------------------------------------------------------------------------
    # Relationships
    # --------------------------------------------------------------------------
    repository: Mapped["Repository"] = relationship(back_populates="issues")
    comments: Mapped[list["IssueComment"]] = relationship(
        back_populates="issue",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # Unique constraint: one issue number per repo
    __table_args__ = (
        UniqueConstraint("repository_id", "number", name="uq_repo_issue_number"),
        Index("ix_issues_repository_state", "repository_id", "state"),
    )

    def __repr__(self) -> str:
        return f"<Issue(id={self.id}, repo='{self.repository_id}', number={self.number})>"

    @property
    def is_open(self) -> bool:
        """Check if issue is open."""
        return self.state == IssueState.OPEN

    @property
    def is_closed(self) -> bool:
        """Check if issue is closed."""
        return self.state == IssueState.CLOSED

    @property
    def label_names(self) -> list[str]:
        return [label["name"] for label in self.labels or []]

    @property
    def assignee_logins(self) -> list[str]:
        return [assignee["login"] for assignee in self.assignees or []]


# ------------------------------------------------------------------------------
# IssueComment model
# ------------------------------------------------------------------------------
class IssueComment(Base):
    """Comment on a cached issue."""

    __tablename__ = "issue_comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    issue_id: Mapped[int] = mapped_column(ForeignKey("issues.id", ondelete="CASCADE"))
    remote_id: Mapped[int] = mapped_column(BigInteger)

    author_login: Mapped[str | None] = mapped_column(String(100), nullable=True)
    author_avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    remote_created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    remote_updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())

    issue: Mapped["Issue"] = relationship(back_populates="comments")

    __table_args__ = (UniqueConstraint("issue_id", "remote_id", name="uq_issue_comment_remote_id"),)

    def __repr__(self) -> str:
        return f"<IssueComment(id={self.id}, issue={self.issue_id}, remote_id={self.remote_id})>"
