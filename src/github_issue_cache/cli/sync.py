"""Sync commands for GitHub Issue Cache."""

from typing import Any

import typer

from github_issue_cache.cli.common import (
    DomainOption,
    OutputFormatOption,
    RepoArgument,
    console,
    credential_store,
    prepare_cache,
    print_json,
    resolve_ref,
    run_async_command,
)
from github_issue_cache.github import ErrorKind, IssueSyncService, OutputFormat


def sync_issues(
    repo: RepoArgument,
    issue_number: int | None = typer.Option(
        None,
        "--issue",
        "-i",
        help="Sync only this issue number",
    ),
    domain: DomainOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Sync a tracked repository's issues and comments into the cache.

    The sync is all or nothing: on failure the previously cached issues
    are left untouched.

    Examples:
        ghissues sync octo-org/widgets
        ghissues sync octo-org/widgets --issue 42
        ghissues sync octo-org/widgets --format json
        ghissues -v sync octo-org/widgets  # Debug logging
    """
    ref = resolve_ref(repo, domain)

    async def _sync() -> dict[str, Any]:
        session_factory = await prepare_cache()
        service = IssueSyncService(session_factory, credential_store())
        result = await service.sync(ref, issue_number)
        return result.to_dict()

    result = run_async_command(_sync(), error_prefix="Sync failed")

    if output_format == OutputFormat.JSON:
        print_json(result)
    elif result["success"]:
        if issue_number is None:
            console.print(
                f"[green]Synced {result['synced_count']}[/green] issues from {ref.full_name}"
            )
        else:
            console.print(f"[green]Synced[/green] issue #{issue_number} from {ref.full_name}")
    else:
        console.print(f"[red]Error:[/red] {result['error']}")
        if result["kind"] == ErrorKind.NOT_TRACKED.value:
            console.print(f"  Track it first: ghissues repo add {ref.full_name}")
        if result["cache_preserved"]:
            console.print("  [dim]Cached issues were left unchanged.[/dim]")

    if not result["success"]:
        raise typer.Exit(1)
