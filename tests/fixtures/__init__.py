"""Test fixtures for GitHub Issue Cache."""

from .github_responses import (
    GITHUB_COMMENTS_RESPONSE,
    GITHUB_ISSUE_CLOSED_RESPONSE,
    GITHUB_ISSUE_RESPONSE,
    GITHUB_LABEL_RESPONSE,
    GITHUB_REPOSITORY_RESPONSE,
    GITHUB_SEARCH_RESPONSE,
    GITHUB_USER_RESPONSE,
)

__all__ = [
    # Mock GitHub API responses
    "GITHUB_COMMENTS_RESPONSE",
    "GITHUB_ISSUE_CLOSED_RESPONSE",
    "GITHUB_ISSUE_RESPONSE",
    "GITHUB_LABEL_RESPONSE",
    "GITHUB_REPOSITORY_RESPONSE",
    "GITHUB_SEARCH_RESPONSE",
    "GITHUB_USER_RESPONSE",
]
