"""Pydantic schemas for parsing GitHub API responses.

These schemas map directly to the GitHub REST API response structure.
See: https://docs.github.com/en/rest/issues/issues
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from .issue import AssigneeRecord, CommentData, IssueData, LabelRecord, SearchPage
from .repository import RepositoryData


class GitHubUser(BaseModel):
    """GitHub user object from API responses."""

    login: str = Field(description="GitHub username")
    id: int | None = Field(default=None, description="GitHub user ID")
    avatar_url: str | None = Field(default=None, description="Avatar URL")


class GitHubLabel(BaseModel):
    """GitHub label object from API responses.

    The issues API may return labels as bare strings; those are accepted
    and treated as a label with no color.
    """

    name: str = Field(description="Label name")
    color: str | None = Field(default=None, description="Label color (hex without #)")

    @model_validator(mode="before")
    @classmethod
    def accept_bare_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data

    def to_record(self) -> LabelRecord:
        return LabelRecord(name=self.name, color=self.color)


class GitHubIssue(BaseModel):
    """GitHub Issue object from API.

    Maps to: GET /repos/{owner}/{repo}/issues/{number}
    and to the items of GET /search/issues.
    """

    number: int = Field(description="Issue number")
    title: str = Field(description="Issue title")
    state: str = Field(description="Issue state (open, closed)")
    body: str | None = Field(default=None, description="Issue body")
    html_url: str | None = Field(default=None, description="GitHub issue URL")

    # User info; deleted accounts come back as null
    user: GitHubUser | None = Field(default=None, description="Issue author")

    # Dates
    created_at: datetime | None = Field(default=None, description="When issue was created")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")

    # Collections
    labels: list[GitHubLabel] = Field(default_factory=list, description="Issue labels")
    assignees: list[GitHubUser] | None = Field(default=None, description="Assignees")
    comments: int = Field(default=0, description="Number of comments")

    def to_issue_data(self) -> IssueData:
        """
        Factory method to convert to the flat IssueData record.

        Returns:
            IssueData with author, labels and assignees flattened
        """
        return IssueData(
            number=self.number,
            title=self.title,
            state=self.state,
            body=self.body,
            author_login=self.user.login if self.user else None,
            author_avatar_url=self.user.avatar_url if self.user else None,
            labels=[label.to_record() for label in self.labels],
            assignees=[
                AssigneeRecord(login=a.login, avatar_url=a.avatar_url)
                for a in self.assignees or []
            ],
            comments_count=self.comments,
            remote_created_at=self.created_at,
            remote_updated_at=self.updated_at,
        )


class GitHubComment(BaseModel):
    """GitHub issue comment from the comments endpoint."""

    id: int = Field(description="Comment ID")
    user: GitHubUser | None = Field(default=None, description="Comment author")
    body: str | None = Field(default=None, description="Comment body")
    created_at: datetime | None = Field(default=None)
    updated_at: datetime | None = Field(default=None)

    def to_comment_data(self) -> CommentData:
        """Factory method to convert to the flat CommentData record."""
        return CommentData(
            remote_id=self.id,
            author_login=self.user.login if self.user else None,
            author_avatar_url=self.user.avatar_url if self.user else None,
            body=self.body,
            remote_created_at=self.created_at,
            remote_updated_at=self.updated_at,
        )


class GitHubRepository(BaseModel):
    """GitHub repository object.

    Maps to: GET /repos/{owner}/{repo}
    """

    name: str
    full_name: str
    owner: GitHubUser
    description: str | None = None
    html_url: str | None = None
    open_issues_count: int = 0

    def to_repository_data(self) -> RepositoryData:
        """Factory method to convert to RepositoryData."""
        return RepositoryData(
            owner=self.owner.login,
            name=self.name,
            full_name=self.full_name,
            description=self.description,
            url=self.html_url,
            open_issue_count=self.open_issues_count,
        )


class GitHubSearchResponse(BaseModel):
    """Response of GET /search/issues."""

    total_count: int = 0
    incomplete_results: bool = False
    items: list[GitHubIssue] = Field(default_factory=list)

    def to_search_page(self) -> SearchPage:
        return SearchPage(
            total_count=self.total_count,
            incomplete_results=self.incomplete_results,
            items=[item.to_issue_data() for item in self.items],
        )
