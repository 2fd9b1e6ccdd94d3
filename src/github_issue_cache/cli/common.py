"""Common CLI option factories and helpers.

This module centralizes reusable CLI options to reduce duplication
and consolidate noqa comments for Typer's required function call pattern.

It also provides:
- `run_async_command`: Unified async execution with error handling for CLI commands
- `prepare_cache` / `credential_store`: What every command needs to build services
- Repository argument type aliases for consistent repo input handling
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from github_issue_cache.config import get_settings
from github_issue_cache.db import create_tables, get_session_factory
from github_issue_cache.github.credentials import StaticCredentialStore
from github_issue_cache.github.sync.enums import OutputFormat
from github_issue_cache.schemas import RepositoryRef, parse_repo_string

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management. Catches exceptions,
    prints user-friendly error messages, and exits with code 1.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        # Re-raise deliberate exits (e.g., from validation helpers)
        raise
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


async def prepare_cache() -> async_sessionmaker[AsyncSession]:
    """Make sure the cache tables exist and return the session factory."""
    await create_tables()
    return get_session_factory()


def credential_store() -> StaticCredentialStore:
    """Tokens from settings for the configured local user."""
    return StaticCredentialStore.from_settings(get_settings())


def print_json(data: dict[str, Any]) -> None:
    """Print a result dict as JSON (datetimes via str)."""
    console.print(json.dumps(data, indent=2, default=str), highlight=False, soft_wrap=True)


# Typer requires function calls as default arguments, which triggers B008.
# Using Annotated with a centralized type alias keeps the noqa in one place.

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]
"""Output format option type for CLI commands.

Usage:
    def command(output_format: OutputFormatOption = OutputFormat.TEXT):
"""

DomainOption = Annotated[
    str | None,
    typer.Option(
        "--domain",
        "-d",
        help="GitHub host (github.com or a GitHub Enterprise host). "
        "Defaults to DEFAULT_DOMAIN.",
    ),
]
"""GitHub host option.

Usage:
    def command(domain: DomainOption = None):
"""

# -----------------------------------------------------------------------------
# Repository Argument Factories
# -----------------------------------------------------------------------------

RepoArgument = Annotated[
    str,
    typer.Argument(
        help="Repository in owner/name format (e.g., octo-org/widgets)",
    ),
]
"""Required positional repository argument.

Usage:
    def sync_issues(repo: RepoArgument) -> None:
"""


# -----------------------------------------------------------------------------
# Repository Validation Helpers
# -----------------------------------------------------------------------------


def validate_repo(repo: str) -> tuple[str, str]:
    """Parse and validate a single repository string.

    Args:
        repo: Repository string in owner/name format

    Returns:
        Tuple of (owner, name)

    Raises:
        typer.Exit(1): If format is invalid
    """
    try:
        return parse_repo_string(repo)
    except ValueError:
        console.print("[red]Error:[/red] Repository must be in owner/name format")
        raise typer.Exit(1) from None


def resolve_ref(repo: str, domain: str | None = None) -> RepositoryRef:
    """Build the cache key for a repo argument and optional --domain."""
    owner, name = validate_repo(repo)
    settings = get_settings()
    return RepositoryRef(
        user_id=settings.user_id,
        domain=(domain or settings.default_domain).lower(),
        owner=owner,
        name=name,
    )
