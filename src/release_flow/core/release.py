"""The release decision: one immutable snapshot per release run.

:func:`analyze_release` combines the classifier, the branch policy and the
version calculator. Every later step (version bump, changelog, tag,
publish, GitHub release) receives the same :class:`ReleaseDecision`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from release_flow.core.branches import get_prerelease_tag
from release_flow.core.commits import (
    ChangeSet,
    CommitInput,
    classify_commits,
    filter_release_commits,
    split_message,
)
from release_flow.core.version import BumpType, bump_version

if TYPE_CHECKING:
    from release_flow.config.models import ReleaseFlowConfig

logger = logging.getLogger(__name__)

NO_RELEASABLE_COMMITS = "No releasable commits found since last tag"


@dataclass(frozen=True)
class ReleaseDecision:
    """What a release run is going to do.

    ``skip_reason`` is set instead of raising when there is nothing to
    release; the caller decides whether that is fatal.
    """

    current_version: str
    next_version: str
    bump: BumpType
    change_set: ChangeSet = field(default_factory=ChangeSet)
    prerelease_tag: str | None = None
    branch: str | None = None
    package_name: str | None = None
    commit_count: int = 0
    commit_subjects: tuple[str, ...] = ()
    skip_reason: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease_tag is not None

    @property
    def is_releasable(self) -> bool:
        return self.skip_reason is None

    @property
    def has_changes(self) -> bool:
        return self.change_set.has_changes

    @property
    def changes(self) -> dict[str, list[str]]:
        return self.change_set.changes

    def tag_name(self, prefix: str = "v") -> str:
        return f"{prefix}{self.next_version}"

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly view used by ``release-flow analyze --json``."""
        return {
            "currentVersion": self.current_version,
            "version": self.next_version,
            "bump": str(self.bump),
            "isPrerelease": self.is_prerelease,
            "prereleaseTag": self.prerelease_tag,
            "hasChanges": self.has_changes,
            "hasOnlyHiddenChanges": self.change_set.has_only_hidden_changes,
            "changes": self.changes,
            "commitMeta": {
                item: {"hash": meta.hash, "prNumber": meta.pr_number}
                for item, meta in self.change_set.commit_meta.items()
            },
            "packageName": self.package_name,
            "branch": self.branch,
            "commitCount": self.commit_count,
            "commitSubjects": list(self.commit_subjects),
            "skipReason": self.skip_reason,
        }


def analyze_release(
    current_version: str,
    commits: Iterable[CommitInput],
    config: ReleaseFlowConfig,
    *,
    branch: str | None = None,
    package_name: str | None = None,
) -> ReleaseDecision:
    """Decide the next release from the commits since the last tag.

    Args:
        current_version: Version currently in the project metadata
        commits: ``(message, hash)`` pairs, oldest first
        config: Full configuration
        branch: Current branch (None means main, no prerelease)
        package_name: Reported only

    Returns:
        The release decision. With no commits left after dropping release
        artifacts, the decision keeps the current version and carries a
        ``skip_reason``.

    Raises:
        InvalidVersionFormat: If ``current_version`` is malformed
    """
    releasable = filter_release_commits(commits, config.commits.skip_release_patterns)
    if not releasable:
        return ReleaseDecision(
            current_version=current_version,
            next_version=current_version,
            bump=BumpType.PATCH,
            branch=branch,
            package_name=package_name,
            skip_reason=NO_RELEASABLE_COMMITS,
        )

    change_set = classify_commits(releasable, config.commits)
    prerelease_tag = get_prerelease_tag(branch, config.branches) if branch else None
    next_version = bump_version(current_version, change_set.bump, prerelease_tag)
    subjects = tuple(subject for subject in (split_message(m)[0] for m, _ in releasable) if subject)

    logger.info(
        "Release decision: %s -> %s (%s%s)",
        current_version,
        next_version,
        change_set.bump,
        f", prerelease {prerelease_tag}" if prerelease_tag else "",
    )
    return ReleaseDecision(
        current_version=current_version,
        next_version=next_version,
        bump=change_set.bump,
        change_set=change_set,
        prerelease_tag=prerelease_tag,
        branch=branch,
        package_name=package_name,
        commit_count=len(releasable),
        commit_subjects=subjects,
    )
