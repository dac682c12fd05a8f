"""Pydantic models for the ``[tool.release-flow]`` configuration table.

Every model has complete defaults, so ``ReleaseFlowConfig()`` is a valid,
fully working configuration that reproduces the standard conventional-commit
rule set.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from release_flow.core.commits import (
    DEFAULT_BREAKING_KEYWORDS,
    DEFAULT_SKIP_RELEASE_PATTERNS,
)
from release_flow.core.version import BumpType


class CommitTypeRule(BaseModel):
    """How one commit type affects the version and the changelog."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    bump: BumpType
    section: str | None = None
    hidden: bool = False


def _default_commit_types() -> dict[str, CommitTypeRule]:
    return {
        "feat": CommitTypeRule(bump=BumpType.MINOR, section="Features"),
        "fix": CommitTypeRule(bump=BumpType.PATCH, section="Bug Fixes"),
        "docs": CommitTypeRule(bump=BumpType.PATCH, section="Documentation"),
        "style": CommitTypeRule(bump=BumpType.PATCH, section="Styles"),
        "refactor": CommitTypeRule(bump=BumpType.PATCH, section="Refactors"),
        "perf": CommitTypeRule(bump=BumpType.PATCH, section="Performance Improvements"),
        "test": CommitTypeRule(bump=BumpType.PATCH, section="Tests"),
        "chore": CommitTypeRule(bump=BumpType.PATCH, section="Chores"),
        # Hidden types still trigger a release but never show up in documents
        "bump": CommitTypeRule(bump=BumpType.PATCH, hidden=True),
        "dependabot": CommitTypeRule(bump=BumpType.PATCH, hidden=True),
        "revert": CommitTypeRule(bump=BumpType.PATCH, hidden=True),
    }


class CommitsConfig(BaseModel):
    """Commit classification rules."""

    model_config = ConfigDict(extra="forbid")

    types: dict[str, CommitTypeRule] = Field(default_factory=_default_commit_types)
    hidden_scopes: dict[str, list[str]] = Field(default_factory=lambda: {"chore": ["deps"]})
    breaking_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BREAKING_KEYWORDS),
    )
    skip_release_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SKIP_RELEASE_PATTERNS),
    )


class BranchConfig(BaseModel):
    """Which branches may release, and how prerelease tags are named."""

    model_config = ConfigDict(extra="forbid")

    main: str = "main"
    prerelease_pattern: str = r"^(feature|fix|chore)/"
    prerelease_prefix: str = "beta"

    @field_validator("prerelease_pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return value


class ChangelogTemplate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version_header: str = "## [{version}] - {date}"
    section_header: str = "### {section}"
    list_item: str = "- {item}"
    date_format: str = "%Y-%m-%d"


class ReleaseNotesTemplate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    section_header: str = "### {section}"
    list_item: str = "- {item}"


class MarkdownConfig(BaseModel):
    """Templates for the changelog entry and the release notes."""

    model_config = ConfigDict(extra="forbid")

    changelog: ChangelogTemplate = Field(default_factory=ChangelogTemplate)
    release_notes: ReleaseNotesTemplate = Field(default_factory=ReleaseNotesTemplate)
    # Display name overrides, e.g. {"Features": "New Features"}
    sections: dict[str, str] = Field(default_factory=dict)


class ChangelogConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    path: Path = Path("CHANGELOG.md")


class VersionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Extra files holding a __version__ = "..." line
    version_files: list[Path] = Field(default_factory=list)


class GitHubConfig(BaseModel):
    """GitHub release settings (owner/repo default to the origin remote)."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    owner: str | None = None
    repo: str | None = None
    api_url: str = "https://api.github.com"
    server_url: str = "https://github.com"
    token_env: str = "GITHUB_TOKEN"
    timeout: float = 30.0


class PublishConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    tool: Literal["uv", "twine"] = "uv"
    index_url: str | None = None
    trusted_publishing: bool = True
    dist_dir: Path = Path("dist")


class ReleaseFlowConfig(BaseModel):
    """Root configuration object."""

    model_config = ConfigDict(extra="forbid")

    tag_prefix: str = "v"
    allow_dirty: bool = False
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    branches: BranchConfig = Field(default_factory=BranchConfig)
    markdown: MarkdownConfig = Field(default_factory=MarkdownConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)

    @property
    def changelog_path(self) -> Path:
        return self.changelog.path

    def tag_name(self, version: str) -> str:
        return f"{self.tag_prefix}{version}"
