"""Version control integration."""

from __future__ import annotations

from release_flow.vcs.git import Commit, GitRepository, parse_remote_url, resolve_repo_info

__all__ = ["Commit", "GitRepository", "parse_remote_url", "resolve_repo_info"]
