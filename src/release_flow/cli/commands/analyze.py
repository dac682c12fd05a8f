"""Implementation of the 'analyze' command.

Shows the release decision for the current repository state without
changing anything.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import typer
from rich.markup import escape
from rich.table import Table

from release_flow.cli.commands.common import load_orchestrator
from release_flow.exceptions import ReleaseFlowError

if TYPE_CHECKING:
    from rich.console import Console

    from release_flow.core.release import ReleaseDecision


def render_decision_table(decision: ReleaseDecision) -> Table:
    table = Table(title="Release analysis", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Package", decision.package_name or "-")
    table.add_row("Branch", decision.branch or "-")
    table.add_row("Current version", decision.current_version)
    table.add_row("Next version", f"[green]{decision.next_version}[/]")
    table.add_row("Bump", str(decision.bump))
    table.add_row("Prerelease", decision.prerelease_tag or "no")
    table.add_row("Commits analyzed", str(decision.commit_count))
    table.add_row("Visible changes", "yes" if decision.has_changes else "no")
    if decision.change_set.has_only_hidden_changes:
        table.add_row("Note", "[dim]only hidden changes[/]")
    return table


def run_analyze(
    path: str | None,
    as_json: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the analyze command.

    Args:
        path: Optional path to project directory
        as_json: Print the decision as JSON instead of a table
        console: Console for standard output
        err_console: Console for error output
    """
    orchestrator = load_orchestrator(path, err_console)

    try:
        decision = orchestrator.analyze()
    except ReleaseFlowError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    if as_json:
        typer.echo(json.dumps(decision.to_dict(), indent=2))
        return

    if not decision.is_releasable:
        console.print(f"[yellow]{decision.skip_reason}.[/]")
        return

    console.print(render_decision_table(decision))
    if decision.commit_subjects:
        console.print("\n[bold]Commit messages:[/]")
        for index, subject in enumerate(decision.commit_subjects, start=1):
            console.print(f"  {index}. {subject}", markup=False, highlight=False)
    if decision.has_changes:
        console.print("\n[bold]Release notes preview:[/]\n")
        console.print(orchestrator.render_release_notes(decision), markup=False)
