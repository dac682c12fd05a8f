"""Core business logic for release-flow.

This package contains the pure building blocks:
- Conventional commit parsing and classification
- Semantic version bumping
- Changelog and release-notes rendering
- The release decision that ties them together
"""

from __future__ import annotations

from release_flow.core.changelog import (
    RepoInfo,
    insert_changelog_entry,
    render_changelog_entry,
    render_release_notes,
)
from release_flow.core.commits import (
    ChangeSet,
    CommitMeta,
    ParsedCommit,
    classify_commits,
    is_release_commit,
    parse_commit,
)
from release_flow.core.release import ReleaseDecision, analyze_release
from release_flow.core.version import BumpType, bump_version

__all__ = [
    # Version
    "BumpType",
    # Commits
    "ChangeSet",
    "CommitMeta",
    "ParsedCommit",
    # Release
    "ReleaseDecision",
    # Changelog
    "RepoInfo",
    "analyze_release",
    "bump_version",
    "classify_commits",
    "insert_changelog_entry",
    "is_release_commit",
    "parse_commit",
    "render_changelog_entry",
    "render_release_notes",
]
