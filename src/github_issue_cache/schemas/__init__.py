"""Pydantic schemas for GitHub Issue Cache.

Normalized GitHub payloads and the repository cache key.
"""

from .base import SchemaBase
from .github_api import (
    GitHubComment,
    GitHubIssue,
    GitHubLabel,
    GitHubRepository,
    GitHubSearchResponse,
    GitHubUser,
)
from .issue import (
    AssigneeRecord,
    CommentData,
    IssueData,
    LabelRecord,
    SearchPage,
)
from .repository import RepositoryData, RepositoryRef, parse_repo_string

__all__ = [
    # Issue
    "AssigneeRecord",
    "CommentData",
    # GitHub API
    "GitHubComment",
    "GitHubIssue",
    "GitHubLabel",
    "GitHubRepository",
    "GitHubSearchResponse",
    "GitHubUser",
    "IssueData",
    "LabelRecord",
    # Repository
    "RepositoryData",
    "RepositoryRef",
    "SearchPage",
    # Base
    "SchemaBase",
    "parse_repo_string",
]
