"""Command-line entry point for release-flow."""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from release_flow import __version__
from release_flow.cli.commands.analyze import run_analyze
from release_flow.cli.commands.release import run_release
from release_flow.cli.commands.update import run_update
from release_flow.orchestrator import ReleaseOptions

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Conventional-commit driven versioning, changelogs and releases.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

PATH_ARGUMENT = typer.Argument(None, help="Project directory (defaults to the current one).")
EXECUTE_OPTION = typer.Option(
    False,
    "--execute",
    help="Apply changes. Without it every step is a dry run.",
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"release-flow version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
        force=True,
    )


@app.command()
def analyze(
    path: str | None = PATH_ARGUMENT,
    as_json: bool = typer.Option(False, "--json", help="Print the decision as JSON."),
) -> None:
    """Show the next version and the changes that justify it."""
    run_analyze(path, as_json, console, err_console)


@app.command()
def update(
    path: str | None = PATH_ARGUMENT,
    execute: bool = EXECUTE_OPTION,
) -> None:
    """Bump the version and write the changelog without committing."""
    run_update(path, execute, console, err_console)


@app.command()
def release(
    path: str | None = PATH_ARGUMENT,
    execute: bool = EXECUTE_OPTION,
    skip_publish: bool = typer.Option(False, "--skip-publish", help="Do not publish the package."),
    skip_github: bool = typer.Option(False, "--skip-github", help="Do not create a GitHub release."),
    skip_changelog: bool = typer.Option(False, "--skip-changelog", help="Do not update the changelog."),
) -> None:
    """Run the full release: bump, changelog, commit, tag, publish, push, GitHub release."""
    options = ReleaseOptions(
        dry_run=not execute,
        skip_publish=skip_publish,
        skip_github=skip_github,
        skip_changelog=skip_changelog,
    )
    run_release(path, options, console, err_console)


if __name__ == "__main__":  # pragma: no cover
    app()
