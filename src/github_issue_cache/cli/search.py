"""Issue search command."""

from enum import Enum
from typing import Any

import typer
from rich.table import Table

from github_issue_cache.browse import IssueBrowser
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
from github_issue_cache.config import get_settings
from github_issue_cache.github import IssueSyncService, OutputFormat
from github_issue_cache.search import IssueSearchService, SearchFilters, SearchMode, parse_query


class StateFilter(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


def search_issues(
    repo: RepoArgument,
    query: str = typer.Argument(
        "",
        help="Free text, may include qualifiers like label:bug or state:open",
    ),
    state: StateFilter | None = typer.Option(
        None,
        "--state",
        "-s",
        help="Issue state",
    ),
    labels: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--label",
        "-l",
        help="Required label (repeatable; all must match)",
    ),
    assignee: str | None = typer.Option(None, "--assignee", "-a", help="Assignee login"),
    author: str | None = typer.Option(None, "--author", help="Author login"),
    sort: str | None = typer.Option(
        None,
        "--sort",
        help="created, updated or comments, optionally with -asc/-desc (default updated-desc)",
    ),
    mode: SearchMode = typer.Option(  # noqa: B008
        SearchMode.REMOTE,
        "--mode",
        "-m",
        help="remote searches GitHub and falls back to the cache; local reads the cache only",
    ),
    page: int = typer.Option(1, "--page", min=1, help="Page number"),
    per_page: int | None = typer.Option(
        None,
        "--per-page",
        min=1,
        max=100,
        help="Results per page",
    ),
    refresh: bool = typer.Option(
        False,
        "--refresh",
        help="Sync first if the cache is older than the staleness window",
    ),
    domain: DomainOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Search a tracked repository's issues.

    A cold cache is synced first. When a remote search fails (rate limit,
    auth, network) the cached issues are shown instead, with the reason.

    Examples:
        ghissues search octo-org/widgets crash
        ghissues search octo-org/widgets "label:bug state:open" --sort comments
        ghissues search octo-org/widgets --mode local --author alice
        ghissues search octo-org/widgets --label "needs review" --format json
    """
    ref = resolve_ref(repo, domain)
    text, query_filters = parse_query(query)
    filters = query_filters.merge(
        SearchFilters(
            state=state.value if state else None,
            labels=tuple(labels or ()),
            assignee=assignee,
            author=author,
        )
    )
    page_size = per_page or get_settings().search.per_page

    async def _search() -> dict[str, Any]:
        session_factory = await prepare_cache()
        credentials = credential_store()
        browser = IssueBrowser(
            session_factory,
            IssueSyncService(session_factory, credentials),
            IssueSearchService(session_factory, credentials),
        )
        result = await browser.browse(
            ref,
            text,
            filters,
            sort,
            mode,
            per_page=page_size,
            page=page,
            refresh_stale=refresh,
        )
        return result.to_dict()

    result = run_async_command(_search(), error_prefix="Search failed")

    if output_format == OutputFormat.JSON:
        print_json(result)
    else:
        _print_result(result, ref.full_name)

    if not result["success"]:
        raise typer.Exit(1)


def _print_result(result: dict[str, Any], full_name: str) -> None:
    for alert in result["alerts"]:
        console.print(f"[yellow]Warning:[/yellow] {alert}")
    for error in result["errors"]:
        console.print(f"[red]Error:[/red] {error}")
    if not result["success"]:
        return

    issues = result["issues"]
    if not issues:
        console.print(f"No matching issues in {full_name}")
        return

    source = "GitHub" if result["mode"] == SearchMode.REMOTE.value else "cache"
    table = Table(title=f"Issues in {full_name} ({source})")
    table.add_column("Number", style="cyan", justify="right")
    table.add_column("State")
    table.add_column("Title", max_width=60)
    table.add_column("Author")
    table.add_column("Labels")
    table.add_column("Comments", justify="right")
    table.add_column("Updated")

    for issue in issues:
        state_style = "green" if issue["state"] == "open" else "magenta"
        table.add_row(
            str(issue["number"]),
            f"[{state_style}]{issue['state']}[/{state_style}]",
            issue["title"],
            issue["author"] or "",
            ", ".join(issue["labels"]),
            str(issue["comments"]),
            (issue["updated_at"] or "")[:10],
        )

    console.print(table)
    console.print(f"  Showing {len(issues)} of {result['total_count']}")
