"""Main CLI application for GitHub Issue Cache."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from github_issue_cache import __version__
from github_issue_cache.cli import github as github_cmd
from github_issue_cache.cli import repo as repo_cmd
from github_issue_cache.cli import search as search_cmd
from github_issue_cache.cli import sync as sync_cmd
from github_issue_cache.config import get_settings
from github_issue_cache.logging import setup_logging

app = typer.Typer(
    name="ghissues",
    help="Local cache of GitHub issues with offline-capable search.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ghissues version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """GitHub Issue Cache - Sync and search GitHub issues."""
    settings = get_settings()
    log_config = settings.logging

    # Setup logging with CLI overrides
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


# Register subcommands
app.command("sync")(sync_cmd.sync_issues)
app.command("search")(search_cmd.search_issues)
app.add_typer(repo_cmd.app, name="repo")
app.add_typer(github_cmd.app, name="github")


if __name__ == "__main__":
    app()
