"""Tests for the release decision."""

from __future__ import annotations

import pytest

from release_flow.config.models import ReleaseFlowConfig
from release_flow.core.commits import BREAKING_SECTION
from release_flow.core.release import NO_RELEASABLE_COMMITS, ReleaseDecision, analyze_release
from release_flow.core.version import BumpType
from release_flow.exceptions import InvalidVersionFormat


class TestAnalyzeRelease:
    """Tests for analyze_release()."""

    def test_end_to_end(self, config: ReleaseFlowConfig):
        commits = [
            ("feat: add X", "a1"),
            ("fix: resolve Y (#42)", "b2"),
            ("feat!: drop Z\n\nBREAKING CHANGE: Z removed", "c3"),
        ]
        decision = analyze_release("1.2.3", commits, config, branch="main", package_name="pkg")

        assert decision.next_version == "2.0.0"
        assert decision.bump == BumpType.MAJOR
        assert not decision.is_prerelease
        assert decision.is_releasable
        assert decision.commit_count == 3
        assert decision.commit_subjects == ("feat: add X", "fix: resolve Y (#42)", "feat!: drop Z")
        assert decision.changes[BREAKING_SECTION] == ["drop Z", "Details: Z removed"]
        assert decision.tag_name() == "v2.0.0"

    def test_no_releasable_commits(self, config: ReleaseFlowConfig):
        """Only release artifacts left: a skip result, not an exception."""
        decision = analyze_release(
            "1.2.3", ["chore(release): 1.2.3 [skip ci]"], config, branch="main"
        )

        assert not decision.is_releasable
        assert decision.skip_reason == NO_RELEASABLE_COMMITS
        assert decision.next_version == "1.2.3"
        assert decision.commit_count == 0

    def test_empty_history(self, config: ReleaseFlowConfig):
        assert analyze_release("0.1.0", [], config).skip_reason == NO_RELEASABLE_COMMITS

    def test_only_unknown_commits_default_to_patch(self, config: ReleaseFlowConfig):
        decision = analyze_release("1.0.0", ["Merge pull request #3", "wip: stuff"], config)

        assert decision.is_releasable
        assert decision.next_version == "1.0.1"
        assert not decision.has_changes

    def test_prerelease_branch(self, config: ReleaseFlowConfig):
        decision = analyze_release("1.2.3", ["feat: add X"], config, branch="feature/login")

        assert decision.prerelease_tag == "beta-feature-login"
        assert decision.is_prerelease
        assert decision.next_version == "1.3.0-beta-feature-login.0"

    def test_prerelease_branch_increments(self, config: ReleaseFlowConfig):
        decision = analyze_release(
            "1.3.0-beta-feature-login.0", ["fix: tweak"], config, branch="feature/login"
        )

        assert decision.next_version == "1.3.0-beta-feature-login.1"

    def test_hidden_only(self, config: ReleaseFlowConfig):
        decision = analyze_release("1.0.0", ["chore(deps): bump lodash"], config)

        assert decision.is_releasable
        assert not decision.has_changes
        assert decision.change_set.has_only_hidden_changes
        assert decision.next_version == "1.0.1"

    def test_invalid_current_version(self, config: ReleaseFlowConfig):
        with pytest.raises(InvalidVersionFormat):
            analyze_release("1.0", ["feat: x"], config)

    def test_to_dict(self, config: ReleaseFlowConfig):
        decision = analyze_release(
            "1.2.3", [("fix: resolve Y (#42)", "b2")], config, branch="main", package_name="pkg"
        )
        data = decision.to_dict()

        assert data["currentVersion"] == "1.2.3"
        assert data["version"] == "1.2.4"
        assert data["bump"] == "patch"
        assert data["isPrerelease"] is False
        assert data["changes"] == {"Bug Fixes": ["resolve Y"]}
        assert data["commitMeta"] == {"resolve Y": {"hash": "b2", "prNumber": "42"}}
        assert data["packageName"] == "pkg"
        assert data["skipReason"] is None


def test_decision_is_frozen():
    decision = ReleaseDecision(current_version="1.0.0", next_version="1.0.1", bump=BumpType.PATCH)

    with pytest.raises(AttributeError):
        decision.next_version = "9.9.9"  # type: ignore[misc]
