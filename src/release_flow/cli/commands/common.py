"""Helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from release_flow.config import load_config
from release_flow.orchestrator import ReleaseOrchestrator
from release_flow.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def load_orchestrator(path: str | None, err_console: Console) -> ReleaseOrchestrator:
    """Load config and repository, exiting with status 1 on failure."""
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
    except Exception as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    try:
        repo = GitRepository(project_path)
    except Exception as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    return ReleaseOrchestrator(project_path, config, repo)
