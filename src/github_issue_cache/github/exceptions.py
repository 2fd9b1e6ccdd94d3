"""GitHub client exceptions."""

from datetime import datetime


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class ConfigurationError(GitHubClientError):
    """Raised when a client is built without a token or domain."""

    pass


class GitHubAuthenticationError(GitHubClientError):
    """Raised when authentication fails (401)."""

    def __init__(self, message: str = "Unauthorized - check your GitHub token") -> None:
        super().__init__(message)


class GitHubNotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""

    pass


class GitHubRetryableError(GitHubClientError):
    """Base class for errors the client retries with exponential backoff."""

    pass


class GitHubServerError(GitHubRetryableError):
    """Raised for 5xx responses and transport failures (timeouts, resets).

    status is None when no response was received at all.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class GitHubRateLimitError(GitHubClientError):
    """Raised when a quota bucket is exhausted (429, or 403 with zero remaining).

    Never retried: callers are expected to fall back to cached data.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        reset_at: datetime | None = None,
        pool: str = "core",
    ) -> None:
        super().__init__(message)
        self.reset_at = reset_at
        self.pool = pool

    def __str__(self) -> str:
        message = super().__str__()
        if self.reset_at is None:
            return message
        return f"{message}. Resets at {format_reset_time(self.reset_at)}"


def format_reset_time(reset_at: datetime) -> str:
    """Render a reset time the way users read a clock, e.g. '03:15 PM'."""
    return reset_at.astimezone().strftime("%I:%M %p")
