"""Pydantic schemas for Repository model."""

import re

from pydantic import Field

from github_issue_cache.config import PUBLIC_GITHUB_DOMAIN

from .base import SchemaBase

_REPO_PART = re.compile(r"^[A-Za-z0-9_.-]+$")


def parse_repo_string(repo: str) -> tuple[str, str]:
    """
    Split an 'owner/name' string into its parts.

    Args:
        repo: Repository path like 'octo-org/widgets'

    Returns:
        Tuple of (owner, name)

    Raises:
        ValueError: If the string is not exactly owner/name
    """
    parts = repo.strip().split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Invalid repository format: '{repo}'. Expected 'owner/name'")
    owner, name = parts
    if not _REPO_PART.match(owner) or not _REPO_PART.match(name):
        raise ValueError(f"Invalid repository format: '{repo}'. Expected 'owner/name'")
    return owner, name


class RepositoryRef(SchemaBase):
    """Identifies a cached repository: (user, domain, owner, name)."""

    user_id: int = Field(ge=1, description="Local user that owns the cache row")
    domain: str = Field(default=PUBLIC_GITHUB_DOMAIN, description="GitHub host")
    owner: str = Field(max_length=100, description="GitHub org or user")
    name: str = Field(max_length=100, description="Repository name")

    @property
    def full_name(self) -> str:
        """Repository path in owner/name form."""
        return f"{self.owner}/{self.name}"


class RepositoryData(SchemaBase):
    """Normalized repository metadata produced by the client."""

    owner: str = Field(max_length=100)
    name: str = Field(max_length=100)
    full_name: str = Field(max_length=200)
    description: str | None = Field(default=None)
    url: str | None = Field(default=None, description="HTML URL of the repository")
    open_issue_count: int = Field(default=0, ge=0)
