"""Pydantic schemas for Issue and IssueComment models."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from github_issue_cache.db.models import IssueState

from .base import SchemaBase


class LabelRecord(SchemaBase):
    """Label as stored in the issue's JSON column."""

    name: str = Field(description="Label name")
    color: str | None = Field(default=None, description="Label color (hex without #)")


class AssigneeRecord(SchemaBase):
    """Assignee as stored in the issue's JSON column."""

    login: str = Field(description="GitHub username")
    avatar_url: str | None = Field(default=None, description="Avatar URL")


class IssueData(SchemaBase):
    """Normalized issue record produced by the client.

    Flat record: author, labels and assignees are already reduced to the
    fields the cache keeps.
    """

    number: int = Field(gt=0, description="Issue number")
    title: str = Field(description="Issue title")
    state: IssueState = Field(default=IssueState.OPEN, description="Issue state")
    body: str | None = Field(default=None, description="Issue body")
    author_login: str | None = Field(default=None, description="Author username")
    author_avatar_url: str | None = Field(default=None, description="Author avatar URL")
    labels: list[LabelRecord] = Field(default_factory=list, description="Labels")
    assignees: list[AssigneeRecord] = Field(default_factory=list, description="Assignees")
    comments_count: int = Field(default=0, ge=0, description="Number of comments")
    remote_created_at: datetime | None = Field(default=None, description="Created on GitHub")
    remote_updated_at: datetime | None = Field(default=None, description="Updated on GitHub")

    @field_validator("state", mode="before")
    @classmethod
    def normalize_state(cls, v: Any) -> Any:
        """Accept 'OPEN'/'Closed' etc. from search payloads."""
        if isinstance(v, str):
            return v.lower()
        return v

    def to_model_fields(self) -> dict[str, Any]:
        """Column values for an Issue row (JSON columns as plain dicts)."""
        return self.model_dump()


class CommentData(SchemaBase):
    """Normalized issue comment produced by the client."""

    remote_id: int = Field(description="GitHub comment ID")
    author_login: str | None = Field(default=None, description="Author username")
    author_avatar_url: str | None = Field(default=None, description="Author avatar URL")
    body: str | None = Field(default=None, description="Comment body")
    remote_created_at: datetime | None = Field(default=None, description="Created on GitHub")
    remote_updated_at: datetime | None = Field(default=None, description="Updated on GitHub")


class SearchPage(SchemaBase):
    """One page of remote search results with GitHub's total estimate."""

    total_count: int = Field(default=0, ge=0)
    incomplete_results: bool = Field(default=False)
    items: list[IssueData] = Field(default_factory=list)
