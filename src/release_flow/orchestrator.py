"""Release orchestration.

:class:`ReleaseOrchestrator` runs the release steps strictly in order:

1. analyze commits -> :class:`ReleaseDecision`
2. bump the version in pyproject.toml (and extra version files)
3. write the changelog entry
4. commit ``chore(release): <version> [skip ci]``
5. create the annotated tag
6. build and publish the package
7. push commit and tag
8. create the GitHub release for the pushed tag

Every step receives the same decision. A failing step aborts the run with
a :class:`ReleaseError` naming the step and the steps already completed;
nothing is rolled back automatically.

Branch prereleases are tag-only: steps 2-4 and 6 are skipped and the
prerelease counter is read back from the latest tag of the same channel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

from release_flow.config.loader import get_project_name
from release_flow.config.models import ReleaseFlowConfig
from release_flow.core.branches import get_prerelease_tag, is_branch_allowed
from release_flow.core.changelog import (
    RepoInfo,
    insert_changelog_entry,
    internal_release_notes,
    render_changelog_entry,
    render_release_notes,
)
from release_flow.core.release import ReleaseDecision, analyze_release
from release_flow.core.version import prerelease_channel
from release_flow.exceptions import (
    BranchNotAllowedError,
    GitHubError,
    InvalidVersionFormat,
    ReleaseError,
    ReleaseFlowError,
)
from release_flow.github.client import GitHubClient
from release_flow.project.pyproject import (
    get_pyproject_version,
    update_pyproject_version,
    update_version_file,
)
from release_flow.publish.pypi import publish_package
from release_flow.vcs.git import GitRepository, resolve_repo_info

logger = logging.getLogger(__name__)

RELEASE_COMMIT_MESSAGE = "chore(release): {version} [skip ci]"
TAG_MESSAGE = "Release {version}"


@dataclass
class StepResult:
    """Outcome of one release step."""

    name: str
    success: bool = True
    dry_run: bool = False
    skipped: bool = False
    reason: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class ReleaseOptions:
    dry_run: bool = True
    skip_publish: bool = False
    skip_github: bool = False
    skip_changelog: bool = False


@dataclass
class ReleaseRun:
    decision: ReleaseDecision
    steps: dict[str, StepResult] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return all(step.success for step in self.steps.values())


class ReleaseOrchestrator:
    """Runs a release for the project at ``project_path``."""

    def __init__(
        self,
        project_path: Path,
        config: ReleaseFlowConfig,
        repo: GitRepository | None = None,
    ) -> None:
        self.project_path = project_path
        self.config = config
        self.repo = repo or GitRepository(project_path)

    @cached_property
    def repo_info(self) -> RepoInfo | None:
        github = self.config.github
        return resolve_repo_info(
            self.repo,
            owner=github.owner,
            name=github.repo,
            server_url=github.server_url,
        )

    @property
    def changelog_path(self) -> Path:
        return self.project_path / self.config.changelog_path

    # Analysis

    def analyze(self) -> ReleaseDecision:
        """Build the release decision from the repository state.

        Raises:
            BranchNotAllowedError: If the current branch may not release
            InvalidVersionFormat: If the project version is malformed
        """
        branch = self.repo.current_branch()
        if not is_branch_allowed(branch, self.config.branches):
            raise BranchNotAllowedError(branch, self.config.branches.main)

        current_version = get_pyproject_version(self.project_path)
        latest_tag = self.repo.get_latest_tag(f"{self.config.tag_prefix}*")
        commits = self.repo.get_commits_since_tag(latest_tag)
        logger.info("Found %d commits since %s", len(commits), latest_tag or "the beginning")

        # prereleases never reach pyproject.toml, their counter lives in the tag
        channel = get_prerelease_tag(branch, self.config.branches)
        if channel and latest_tag:
            tagged_version = latest_tag.removeprefix(self.config.tag_prefix)
            try:
                if prerelease_channel(tagged_version) == channel:
                    current_version = tagged_version
            except InvalidVersionFormat:
                logger.debug("Ignoring tag %s with a malformed version", latest_tag)

        return analyze_release(
            current_version,
            [c.as_pair() for c in commits],
            self.config,
            branch=branch,
            package_name=get_project_name(self.project_path),
        )

    # Version

    def bump_version(self, decision: ReleaseDecision, dry_run: bool = True) -> StepResult:
        if decision.is_prerelease:
            return StepResult(
                "bump_version",
                dry_run=dry_run,
                skipped=True,
                reason=f"Prerelease {decision.next_version} is not a PEP 440 version; "
                "it is recorded only in the tag",
                details={"old_version": decision.current_version, "new_version": decision.next_version},
            )

        files = [Path("pyproject.toml"), *self.config.version.version_files]
        if not dry_run:
            update_pyproject_version(self.project_path, decision.next_version)
            for version_file in self.config.version.version_files:
                update_version_file(self.project_path / version_file, decision.next_version)
        return StepResult(
            "bump_version",
            dry_run=dry_run,
            details={
                "old_version": decision.current_version,
                "new_version": decision.next_version,
                "files": [str(f) for f in files],
            },
        )

    # Changelog

    def render_changelog(self, decision: ReleaseDecision) -> str:
        return render_changelog_entry(
            decision.next_version,
            decision.change_set,
            self.config.markdown,
            repo=self.repo_info,
        )

    def generate_changelog(self, decision: ReleaseDecision, dry_run: bool = True) -> StepResult:
        if not self.config.changelog.enabled:
            return StepResult("changelog", dry_run=dry_run, skipped=True, reason="Changelog disabled")
        if not decision.has_changes:
            return StepResult(
                "changelog", dry_run=dry_run, skipped=True, reason="No visible changes to document"
            )
        if decision.is_prerelease:
            return StepResult(
                "changelog",
                dry_run=dry_run,
                skipped=True,
                reason="Prereleases are tag-only; these changes are logged by the next release "
                f"from {self.config.branches.main}",
            )

        entry = self.render_changelog(decision)
        path = self.changelog_path
        existing = path.read_text(encoding="utf-8") if path.exists() else None
        updated = insert_changelog_entry(existing, entry)
        if not dry_run:
            path.write_text(updated, encoding="utf-8")
            logger.info("Updated %s", path)

        return StepResult(
            "changelog",
            dry_run=dry_run,
            details={
                "path": str(self.config.changelog_path),
                "sections": decision.change_set.sections,
                "entry": entry,
            },
        )

    # Git commit

    def commit_changes(
        self,
        decision: ReleaseDecision,
        dry_run: bool = True,
        *,
        changelog_written: bool = False,
    ) -> StepResult:
        if decision.is_prerelease:
            return StepResult(
                "commit", dry_run=dry_run, skipped=True, reason="Prereleases change no files"
            )

        message = RELEASE_COMMIT_MESSAGE.format(version=decision.next_version)
        files: list[Path] = [Path("pyproject.toml"), *self.config.version.version_files]
        if changelog_written:
            files.append(self.config.changelog_path)
        if (self.project_path / "uv.lock").exists():
            files.append(Path("uv.lock"))

        if not dry_run:
            self.repo.add(files)
            self.repo.commit(message)
        return StepResult(
            "commit",
            dry_run=dry_run,
            details={"message": message, "files": [str(f) for f in files]},
        )

    # Git tag

    def create_tag(self, decision: ReleaseDecision, dry_run: bool = True) -> StepResult:
        tag = self.config.tag_name(decision.next_version)
        message = TAG_MESSAGE.format(version=decision.next_version)
        if not dry_run:
            self.repo.create_tag(tag, message)
        return StepResult(
            "tag",
            dry_run=dry_run,
            details={
                "tag": tag,
                "message": message,
                "command": f'git tag -a {tag} -m "{message}"',
                "prerelease": decision.is_prerelease,
            },
        )

    # Package index

    def publish(self, decision: ReleaseDecision, dry_run: bool = True) -> StepResult:
        if not self.config.publish.enabled:
            return StepResult("publish", dry_run=dry_run, skipped=True, reason="Publishing disabled")
        if decision.is_prerelease:
            # branch prerelease versions are semver, not PEP 440
            return StepResult(
                "publish",
                dry_run=dry_run,
                skipped=True,
                reason="Prerelease versions are not published to the package index",
            )

        result = publish_package(
            self.project_path,
            decision.package_name or "",
            decision.next_version,
            self.config.publish,
            dry_run=dry_run,
        )
        return StepResult(
            "publish",
            dry_run=dry_run,
            details={
                "package": f"{result.package_name}=={result.version}",
                "index_url": result.index_url,
                "command": result.command_line,
                "files": result.files,
            },
        )

    # GitHub release

    def render_release_notes(self, decision: ReleaseDecision) -> str:
        if not decision.has_changes:
            return internal_release_notes(decision.next_version)
        return render_release_notes(decision.change_set, self.config.markdown, repo=self.repo_info)

    def create_github_release(self, decision: ReleaseDecision, dry_run: bool = True) -> StepResult:
        github = self.config.github
        if not github.enabled:
            return StepResult("github_release", dry_run=dry_run, skipped=True, reason="GitHub disabled")

        tag = self.config.tag_name(decision.next_version)
        notes = self.render_release_notes(decision)
        repo_info = self.repo_info
        details: dict[str, Any] = {
            "tag": tag,
            "repository": repo_info.full_name if repo_info else "unknown",
            "prerelease": decision.is_prerelease,
            "notes": notes,
        }
        if dry_run:
            return StepResult("github_release", dry_run=True, details=details)

        if repo_info is None:
            raise GitHubError(
                "Could not determine repository. Set GITHUB_REPOSITORY or configure an origin remote."
            )
        client = GitHubClient.from_env(github.token_env, api_url=github.api_url, timeout=github.timeout)
        client.validate_auth()
        release = client.create_release(
            repo_info.owner,
            repo_info.repo,
            tag=tag,
            body=notes,
            prerelease=decision.is_prerelease,
        )
        details["url"] = release.html_url
        return StepResult("github_release", details=details)

    # Push

    def push(self, dry_run: bool = True) -> StepResult:
        if not dry_run:
            self.repo.push(follow_tags=True)
        return StepResult("push", dry_run=dry_run, details={"command": "git push origin HEAD --follow-tags"})

    # Pipeline

    def release(self, options: ReleaseOptions | None = None) -> ReleaseRun:
        """Run every step for one release.

        Returns:
            The decision and the per-step results. When there is nothing to
            release the run holds no steps.

        Raises:
            ReleaseError: If a step fails (``step`` names it)
        """
        options = options or ReleaseOptions()
        dry_run = options.dry_run

        decision = self.analyze()
        run = ReleaseRun(decision)
        if not decision.is_releasable:
            logger.info("Nothing to release: %s", decision.skip_reason)
            return run

        if not dry_run and not self.config.allow_dirty and self.repo.is_dirty():
            raise ReleaseError(
                "Repository has uncommitted changes. Commit or stash them first.",
                step="analyze",
            )

        def step(name: str, func: Any, *args: Any, **kwargs: Any) -> StepResult:
            try:
                result = func(*args, **kwargs)
            except ReleaseFlowError as e:
                done = ", ".join(run.steps) or "none"
                raise ReleaseError(
                    f"Release failed at step '{name}': {e} (completed: {done})", step=name
                ) from e
            run.steps[name] = result
            return result

        step("bump_version", self.bump_version, decision, dry_run)

        changelog_written = False
        if not options.skip_changelog:
            changelog = step("changelog", self.generate_changelog, decision, dry_run)
            changelog_written = not changelog.skipped

        step("commit", self.commit_changes, decision, dry_run, changelog_written=changelog_written)
        step("tag", self.create_tag, decision, dry_run)
        if not options.skip_publish:
            step("publish", self.publish, decision, dry_run)
        step("push", self.push, dry_run)
        if not options.skip_github:
            step("github_release", self.create_github_release, decision, dry_run)

        return run
