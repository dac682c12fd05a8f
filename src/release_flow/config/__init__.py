"""Configuration management for release-flow."""

from __future__ import annotations

from release_flow.config.loader import load_config
from release_flow.config.models import (
    BranchConfig,
    ChangelogConfig,
    CommitsConfig,
    CommitTypeRule,
    GitHubConfig,
    MarkdownConfig,
    PublishConfig,
    ReleaseFlowConfig,
    VersionConfig,
)

__all__ = [
    "BranchConfig",
    "ChangelogConfig",
    "CommitTypeRule",
    "CommitsConfig",
    "GitHubConfig",
    "MarkdownConfig",
    "PublishConfig",
    "ReleaseFlowConfig",
    "VersionConfig",
    "load_config",
]
