"""Implementation of the 'release' command.

Runs the full pipeline. Without ``--execute`` every step runs in dry-run
mode and only reports what it would do.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel

from release_flow.cli.commands.analyze import render_decision_table
from release_flow.cli.commands.common import load_orchestrator
from release_flow.exceptions import ReleaseError, ReleaseFlowError
from release_flow.orchestrator import ReleaseOptions

if TYPE_CHECKING:
    from rich.console import Console

    from release_flow.orchestrator import StepResult

STEP_TITLES = {
    "bump_version": "Bumping version",
    "changelog": "Generating changelog",
    "commit": "Committing changes",
    "tag": "Creating git tag",
    "publish": "Publishing package",
    "push": "Pushing to remote",
    "github_release": "Creating GitHub release",
}


def _print_step(number: int, step: StepResult, console: Console) -> None:
    console.print(f"[bold]{number}. {STEP_TITLES.get(step.name, step.name)}[/]")
    if step.skipped:
        console.print(f"   [dim]skipped: {step.reason}[/]")
        return

    marker = "[yellow]would[/]" if step.dry_run else "[green]✓[/]"
    details = step.details
    if step.name == "bump_version":
        console.print(f"   {marker} set version {details['old_version']} -> {details['new_version']}")
    elif step.name == "changelog":
        console.print(f"   {marker} update {details['path']}")
        if step.dry_run:
            console.print(details["entry"], markup=False)
    elif step.name == "commit":
        console.print(f"   {marker} commit \"{escape(details['message'])}\"")
        console.print(f"   files: {', '.join(details['files'])}")
    elif step.name == "tag":
        console.print(f"   {marker} run {escape(details['command'])}")
    elif step.name == "publish":
        console.print(f"   {marker} publish {details['package']} to {details['index_url']}")
        console.print(f"   command: {details['command']}", markup=False)
    elif step.name == "push":
        console.print(f"   {marker} run {details['command']}")
    elif step.name == "github_release":
        console.print(f"   {marker} release {details['tag']} on {details['repository']}")
        if "url" in details:
            console.print(f"   {details['url']}")
        elif step.dry_run:
            console.print(details["notes"], markup=False)
    console.print()


def run_release(
    path: str | None,
    options: ReleaseOptions,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to project directory
        options: Dry-run and skip flags
        console: Console for standard output
        err_console: Console for error output
    """
    orchestrator = load_orchestrator(path, err_console)

    mode_str = "[yellow]DRY-RUN[/]" if options.dry_run else "[green]EXECUTING[/]"
    console.print(f"\n{mode_str} - Starting release\n")

    try:
        run = orchestrator.release(options)
    except ReleaseError as e:
        err_console.print(f"[red]Release failed:[/] {escape(str(e))}")
        raise SystemExit(1) from e
    except ReleaseFlowError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    decision = run.decision
    if not decision.is_releasable:
        console.print(f"[yellow]{decision.skip_reason}. Nothing to release.[/]")
        return

    console.print(render_decision_table(decision))
    console.print()
    for number, step in enumerate(run.steps.values(), start=1):
        _print_step(number, step, console)

    if options.dry_run:
        console.print(
            Panel(
                "[yellow]Dry run completed.[/]\n\n"
                "Run with [cyan]--execute[/] to perform the release.",
                border_style="yellow",
            )
        )
    else:
        console.print(
            Panel(
                f"[green]Released version {decision.next_version}![/]",
                title="[green]Release Complete[/]",
                border_style="green",
            )
        )
