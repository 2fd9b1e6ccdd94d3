"""Repository tracking commands."""

from typing import Any

import typer
from rich.table import Table

from github_issue_cache.cli.common import (
    DomainOption,
    OutputFormatOption,
    console,
    credential_store,
    prepare_cache,
    print_json,
    resolve_ref,
    run_async_command,
)
from github_issue_cache.config import get_settings
from github_issue_cache.db import RepositoryRepository
from github_issue_cache.github import OutputFormat, RepositorySyncService

app = typer.Typer(help="Track repositories in the local cache")


@app.command("add")
def add_repository(
    repo: str = typer.Argument(..., help="Repository in owner/name format"),
    domain: DomainOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Start tracking a repository (fetches its metadata from GitHub).

    Examples:
        ghissues repo add octo-org/widgets
        ghissues repo add platform/api --domain github.example.com
    """
    ref = resolve_ref(repo, domain)

    async def _add() -> dict[str, Any]:
        session_factory = await prepare_cache()
        service = RepositorySyncService(session_factory, credential_store())
        result = await service.sync(ref)
        return result.to_dict()

    result = run_async_command(_add(), error_prefix="Failed to add repository")

    if output_format == OutputFormat.JSON:
        print_json(result)
    elif result["success"]:
        verb = "Now tracking" if result["created"] else "Refreshed"
        console.print(f"[green]{verb}[/green] {ref.full_name} on {ref.domain}")
    else:
        console.print(f"[red]Error:[/red] {result['error']}")

    if not result["success"]:
        raise typer.Exit(1)


@app.command("list")
def list_repositories(
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """List tracked repositories and how fresh their caches are.

    Examples:
        ghissues repo list
        ghissues repo list --format json
    """

    async def _list() -> list[dict[str, Any]]:
        session_factory = await prepare_cache()
        async with session_factory() as session:
            repositories = await RepositoryRepository(session).list_for_user(
                get_settings().user_id
            )
            return [
                {
                    "domain": repository.domain,
                    "full_name": repository.full_name,
                    "issue_count": repository.issue_count,
                    "open_issue_count": repository.open_issue_count,
                    "synced_at": repository.synced_at,
                    "staleness": repository.staleness_in_words(),
                }
                for repository in repositories
            ]

    rows = run_async_command(_list(), error_prefix="Failed to list repositories")

    if output_format == OutputFormat.JSON:
        print_json({"repositories": rows})
        return

    if not rows:
        console.print("[yellow]No repositories tracked.[/yellow] Add one with: ghissues repo add")
        return

    table = Table(title="Tracked Repositories")
    table.add_column("Repository", style="cyan")
    table.add_column("Host")
    table.add_column("Issues", justify="right")
    table.add_column("Open", justify="right")
    table.add_column("Last sync")
    for row in rows:
        table.add_row(
            row["full_name"],
            row["domain"],
            str(row["issue_count"]),
            str(row["open_issue_count"]),
            row["staleness"],
        )
    console.print(table)
