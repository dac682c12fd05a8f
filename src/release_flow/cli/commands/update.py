"""Implementation of the 'update' command.

The update command bumps the version and writes the changelog locally,
without committing, tagging or publishing anything.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel

from release_flow.cli.commands.common import load_orchestrator
from release_flow.exceptions import ReleaseFlowError

if TYPE_CHECKING:
    from rich.console import Console


def run_update(
    path: str | None,
    execute: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the update command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually apply changes
        console: Console for standard output
        err_console: Console for error output
    """
    orchestrator = load_orchestrator(path, err_console)
    config = orchestrator.config

    if execute and not config.allow_dirty and orchestrator.repo.is_dirty():
        err_console.print(
            "[red]Error:[/] Repository has uncommitted changes.\n"
            "Commit or stash them, or use [cyan]allow_dirty = true[/] in config."
        )
        raise SystemExit(1)

    try:
        decision = orchestrator.analyze()
    except ReleaseFlowError as e:
        err_console.print(f"[red]Error analyzing commits:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    if not decision.is_releasable:
        console.print(f"[yellow]{decision.skip_reason}. Nothing to do.[/]")
        return

    if decision.is_prerelease:
        console.print(
            f"[yellow]{decision.next_version} is a prerelease. Prereleases are tag-only, "
            "no project files change.[/]\n"
            f"[dim]Create the tag with [cyan]release-flow release {Path(path or '.')} --execute[/][/]"
        )
        return

    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    console.print(
        f"\n{mode_str} - Updating from [cyan]{decision.current_version}[/] "
        f"to [green]{decision.next_version}[/] ({decision.bump})\n"
    )

    if not execute:
        changelog_note = (
            f"  • Add entry to [cyan]{config.changelog_path}[/]"
            if decision.has_changes
            else "  • No visible changes, changelog left untouched"
        )
        console.print(
            Panel(
                "[bold]Would make the following changes:[/]\n\n"
                "  • Update version in [cyan]pyproject.toml[/]\n"
                f"{changelog_note}",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        if decision.has_changes:
            console.print(orchestrator.render_changelog(decision), markup=False)
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    try:
        bumped = orchestrator.bump_version(decision, dry_run=False)
        for file in bumped.details["files"]:
            console.print(f"  [green]✓[/] Updated version in {file}")
        changelog = orchestrator.generate_changelog(decision, dry_run=False)
        if changelog.skipped:
            console.print(f"  [dim]- Changelog skipped: {changelog.reason}[/]")
        else:
            console.print(f"  [green]✓[/] Updated {config.changelog_path}")
    except ReleaseFlowError as e:
        err_console.print(f"[red]Error updating project:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    console.print(
        Panel(
            f"[green]Successfully updated to version {decision.next_version}![/]\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            f"  2. Release: [cyan]release-flow release {Path(path or '.')} --execute[/]",
            title="[green]Update Complete[/]",
            border_style="green",
        )
    )
