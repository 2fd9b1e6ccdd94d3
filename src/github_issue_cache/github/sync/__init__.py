"""Issue Sync module - GitHub to database synchronization.

This module provides services for syncing issue data from the GitHub API
to the local database.

Services:
- IssueSyncService: All issues of a repository (or one issue) with comments
- RepositorySyncService: Repository metadata, makes a repository tracked
"""

from .enums import ErrorKind, OutputFormat
from .issue_sync import ClientFactory, IssueSyncService
from .repository_sync import RepositorySyncService
from .results import (
    RepositorySyncResult,
    SyncFailure,
    SyncResult,
    SyncSuccess,
    classify_error,
)

__all__ = [
    "ClientFactory",
    "ErrorKind",
    "IssueSyncService",
    "OutputFormat",
    "RepositorySyncResult",
    "RepositorySyncService",
    "SyncFailure",
    "SyncResult",
    "SyncSuccess",
    "classify_error",
]
