"""GitHub API verification commands."""

from typing import Any

import typer
from rich.table import Table

from github_issue_cache.cli.common import DomainOption, console, run_async_command
from github_issue_cache.config import get_settings
from github_issue_cache.github import (
    GitHubClient,
    RateLimitPool,
    RateLimitStatus,
    StaticCredentialStore,
)

app = typer.Typer(help="GitHub API commands")


def _client_for(domain: str | None) -> GitHubClient:
    settings = get_settings()
    host = (domain or settings.default_domain).lower()
    credential = StaticCredentialStore.from_settings(settings).lookup(settings.user_id, host)
    if credential is None:
        console.print(f"[red]Error:[/red] No GitHub token configured for {host}")
        raise typer.Exit(1)
    return GitHubClient.from_credential(credential)


@app.command("test")
def test_connection(domain: DomainOption = None) -> None:
    """Test GitHub API connectivity and token validity.

    Examples:
        ghissues github test
        ghissues github test --domain github.example.com
    """
    client = _client_for(domain)

    async def _test() -> None:
        async with client:
            console.print(f"[bold]Checking token on {client.domain}...[/bold]")
            check = await client.test_connection()
            if not check.success:
                console.print(f"[red]Error:[/red] {check.error}")
                raise typer.Exit(1)
            console.print(f"  Authenticated as [cyan]{check.login}[/cyan]")

            core = client.rate_monitor.get_pool_limit(RateLimitPool.CORE)
            if core is not None:
                console.print(f"  Core quota: {core.remaining}/{core.limit}")

        console.print("\n[green]GitHub API connection verified![/green]")

    run_async_command(_test())


def _get_status_style(status: RateLimitStatus) -> str:
    """Get rich style for status."""
    match status:
        case RateLimitStatus.HEALTHY:
            return "[green]HEALTHY[/green]"
        case RateLimitStatus.WARNING:
            return "[yellow]WARNING[/yellow]"
        case RateLimitStatus.CRITICAL:
            return "[red]CRITICAL[/red]"
        case RateLimitStatus.EXHAUSTED:
            return "[bold red]EXHAUSTED[/bold red]"
        case _:
            return str(status)


def _format_time_remaining(seconds: int) -> str:
    """Format seconds as human-readable time."""
    if seconds <= 0:
        return "Now"
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"


@app.command("rate-limit")
def show_rate_limit(
    domain: DomainOption = None,
    all_pools: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Show all quota buckets (not just core and search)",
    ),
) -> None:
    """Show current GitHub API rate limit status.

    Examples:
        ghissues github rate-limit
        ghissues github rate-limit --all
        ghissues github rate-limit --domain github.example.com
    """
    client = _client_for(domain)

    async def _check() -> dict[str, dict[str, Any]]:
        async with client:
            return await client.get_rate_limit()

    run_async_command(_check(), error_prefix="Failed to fetch rate limit")

    monitor = client.rate_monitor
    pools = list(RateLimitPool) if all_pools else [RateLimitPool.CORE, RateLimitPool.SEARCH]

    table = Table(title=f"GitHub API Rate Limits ({client.domain})")
    table.add_column("Pool", style="bold")
    table.add_column("Status")
    table.add_column("Remaining", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Resets In", justify="right")

    for pool in pools:
        pool_limit = monitor.get_pool_limit(pool)
        if pool_limit is None:
            continue
        table.add_row(
            pool.value,
            _get_status_style(monitor.get_status(pool)),
            str(pool_limit.remaining),
            str(pool_limit.limit),
            _format_time_remaining(monitor.time_until_reset(pool)),
        )

    console.print(table)

    search_status = monitor.get_status(RateLimitPool.SEARCH)
    if search_status in (RateLimitStatus.CRITICAL, RateLimitStatus.EXHAUSTED):
        console.print(
            "\n[yellow]Recommendation:[/yellow] Search quota is low. "
            "Use --mode local to search the cache."
        )
