"""GitHub API client module.

This module provides:
- GitHubClient: Async GitHub API client with retries and rate limit tracking
- Credentials: Credential, CredentialStore, StaticCredentialStore
- Rate limit monitoring: RateLimitMonitor, RateLimitStatus, etc.
- Issue Sync: IssueSyncService, RepositorySyncService and their results
"""

from .client import ConnectionCheck, GitHubClient, api_base_url
from .credentials import Credential, CredentialStore, StaticCredentialStore
from .exceptions import (
    ConfigurationError,
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRetryableError,
    GitHubServerError,
)
from .rate_limit import (
    PoolRateLimit,
    RateLimitMonitor,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
)
from .sync import (
    ErrorKind,
    IssueSyncService,
    OutputFormat,
    RepositorySyncResult,
    RepositorySyncService,
    SyncFailure,
    SyncResult,
    SyncSuccess,
)

__all__ = [
    # Client
    "ConnectionCheck",
    "GitHubClient",
    "api_base_url",
    # Credentials
    "Credential",
    "CredentialStore",
    "StaticCredentialStore",
    # Exceptions
    "ConfigurationError",
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubRetryableError",
    "GitHubServerError",
    # Rate limit monitoring
    "PoolRateLimit",
    "RateLimitMonitor",
    "RateLimitPool",
    "RateLimitSnapshot",
    "RateLimitStatus",
    # Issue Sync
    "ErrorKind",
    "IssueSyncService",
    "OutputFormat",
    "RepositorySyncResult",
    "RepositorySyncService",
    "SyncFailure",
    "SyncResult",
    "SyncSuccess",
]
