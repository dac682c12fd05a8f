"""GitHub integration."""

from __future__ import annotations

from release_flow.github.client import GitHubClient, GitHubRelease

__all__ = ["GitHubClient", "GitHubRelease"]
