"""Enums for sync and search operations."""

from enum import Enum


class ErrorKind(str, Enum):
    """Why a sync or search did not succeed.

    Services never raise past their boundary; they report one of these.
    """

    NO_CREDENTIAL = "no_credential"
    """No token configured for the repository's domain. No request was made."""

    NOT_TRACKED = "not_tracked"
    """The repository has no cache row for this user yet."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"

    RATE_LIMITED = "rate_limited"
    """A quota bucket is exhausted. Never retried."""

    SERVER_ERROR = "server_error"
    """5xx or transport failure that survived every retry."""

    STORAGE_ERROR = "storage_error"
    """The database rejected a write; the transaction was rolled back."""

    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
