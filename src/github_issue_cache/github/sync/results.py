"""Result objects for sync operations.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI output.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from github_issue_cache.db.models import Repository
from github_issue_cache.github.exceptions import (
    ConfigurationError,
    GitHubAuthenticationError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubServerError,
)

from .enums import ErrorKind


def classify_error(error: Exception) -> ErrorKind:
    """Map an exception raised during sync or search to an ErrorKind."""
    if isinstance(error, GitHubRateLimitError):
        return ErrorKind.RATE_LIMITED
    if isinstance(error, GitHubAuthenticationError):
        return ErrorKind.UNAUTHORIZED
    if isinstance(error, GitHubNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(error, GitHubServerError):
        return ErrorKind.SERVER_ERROR
    if isinstance(error, ConfigurationError):
        return ErrorKind.CONFIGURATION
    if isinstance(error, SQLAlchemyError):
        return ErrorKind.STORAGE_ERROR
    return ErrorKind.UNEXPECTED


@dataclass
class SyncSuccess:
    """A sync that wrote every fetched issue in one transaction."""

    synced_count: int
    """Number of issues upserted."""

    repository_id: int | None = None

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": True,
            "synced_count": self.synced_count,
            "repository_id": self.repository_id,
        }


@dataclass
class SyncFailure:
    """A sync that stored nothing.

    cache_preserved is True whenever previously cached rows are untouched,
    which is every failure path: fetch errors happen before the
    transaction opens and storage errors roll it back.
    """

    kind: ErrorKind
    error: str
    """Human-readable message, safe to show to the user."""

    cache_preserved: bool = True

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": False,
            "kind": self.kind.value,
            "error": self.error,
            "cache_preserved": self.cache_preserved,
        }

    @classmethod
    def no_credential(cls, domain: str) -> SyncFailure:
        return cls(kind=ErrorKind.NO_CREDENTIAL, error=f"No GitHub token configured for {domain}")

    @classmethod
    def not_tracked(cls, full_name: str, domain: str) -> SyncFailure:
        return cls(
            kind=ErrorKind.NOT_TRACKED,
            error=f"Repository {full_name} on {domain} is not tracked",
        )

    @classmethod
    def from_error(cls, error: Exception, action: str = "sync issues") -> SyncFailure:
        """Create a result representing a failed sync.

        Args:
            error: The exception that caused the failure
            action: What failed, used in the message ("Failed to <action>: ...")

        Returns:
            SyncFailure with the classified kind and a display message
        """
        kind = classify_error(error)
        if kind in (ErrorKind.RATE_LIMITED, ErrorKind.UNAUTHORIZED):
            return cls(kind=kind, error=str(error))
        return cls(kind=kind, error=f"Failed to {action}: {error}")


SyncResult = SyncSuccess | SyncFailure


@dataclass
class RepositorySyncResult:
    """Result of fetching repository metadata into the cache."""

    repository: Repository | None
    """The cached row (None if the fetch failed)."""

    created: bool = False
    """True if the repository was not tracked before."""

    kind: ErrorKind | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, object] = {"success": self.success, "created": self.created}
        if self.repository is not None:
            result["repository_id"] = self.repository.id
            result["domain"] = self.repository.domain
            result["full_name"] = self.repository.full_name
        if self.error is not None:
            result["kind"] = self.kind.value if self.kind else None
            result["error"] = self.error
        return result

    @classmethod
    def from_failure(cls, failure: SyncFailure) -> RepositorySyncResult:
        return cls(repository=None, kind=failure.kind, error=failure.error)
