"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import subprocess
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from release_flow.config.models import CommitsConfig, ReleaseFlowConfig
from release_flow.vcs.git import Commit, GitRepository

if TYPE_CHECKING:
    from pathlib import Path


PYPROJECT_TEMPLATE = """\
[project]
name = "sample-package"
version = "{version}"
description = "A sample package"

[tool.release-flow]
tag_prefix = "v"
"""


@pytest.fixture(autouse=True)
def _clean_ci_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CI variables from leaking into branch and repo resolution."""
    for name in ("GITHUB_REF_NAME", "GITHUB_REPOSITORY", "GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def commits_config() -> CommitsConfig:
    return CommitsConfig()


@pytest.fixture
def config() -> ReleaseFlowConfig:
    return ReleaseFlowConfig()


@pytest.fixture
def sample_commits() -> list[Commit]:
    """A small history, oldest first."""
    return [
        Commit(sha="a1b2c3d4e5f6a7b8", message="feat: add X"),
        Commit(sha="b2c3d4e5f6a7b8c9", message="fix: resolve Y (#42)"),
        Commit(
            sha="c3d4e5f6a7b8c9d0",
            message="feat!: drop Z\n\nBREAKING CHANGE: Z removed",
        ),
    ]


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project directory with a pyproject.toml at version 1.2.3."""
    (tmp_path / "pyproject.toml").write_text(PYPROJECT_TEMPLATE.format(version="1.2.3"))
    return tmp_path


@pytest.fixture
def temp_git_repo_with_pyproject(tmp_path: Path) -> Path:
    """A real git repository with one commit of a pyproject.toml."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.release-flow]
tag_prefix = "v"
allow_dirty = false

[tool.release-flow.branches]
main = "main"
"""
    )

    def git(*args: str) -> None:
        subprocess.run(["git", *args], cwd=tmp_path, check=True, capture_output=True)

    git("init", "--initial-branch=main")
    git("config", "user.email", "test@example.com")
    git("config", "user.name", "Test")
    git("config", "commit.gpgsign", "false")
    git("add", "pyproject.toml")
    git("commit", "-m", "chore: initial commit")
    return tmp_path


@pytest.fixture
def mock_repo(project_dir: Path, sample_commits: list[Commit]) -> MagicMock:
    """A GitRepository mock on ``main`` with the sample history."""
    repo = MagicMock(spec=GitRepository)
    repo.path = project_dir
    repo.current_branch.return_value = "main"
    repo.get_latest_tag.return_value = "v1.2.3"
    repo.get_commits_since_tag.return_value = sample_commits
    repo.remote_url.return_value = "git@github.com:acme/sample.git"
    repo.is_dirty.return_value = False
    return repo
