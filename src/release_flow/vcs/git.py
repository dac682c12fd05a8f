"""Thin wrapper around the git command line.

All commands go through :meth:`GitRepository._run` so tests can patch a
single seam. Failures raise :class:`~release_flow.exceptions.GitError`.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from release_flow.core.changelog import RepoInfo
from release_flow.exceptions import GitError

logger = logging.getLogger(__name__)

# `git log` separators (%x00 / %x1f); commit messages never contain them
_RECORD_SEP = "\x00"
_FIELD_SEP = "\x1f"

GITHUB_REMOTE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^https://(?:[^@/]+@)?(?P<host>[^/]+)/(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"),
    re.compile(r"^git@(?P<host>[^:]+):(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?$"),
    re.compile(r"^ssh://git@(?P<host>[^/]+)/(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?$"),
)


@dataclass(frozen=True)
class Commit:
    """A commit as read from the log."""

    sha: str
    message: str

    @property
    def subject(self) -> str:
        return self.message.strip().split("\n", 1)[0]

    def as_pair(self) -> tuple[str, str]:
        return self.message, self.sha


class GitRepository:
    """Git operations for one working tree."""

    def __init__(self, path: Path) -> None:
        self.path = path
        if not (path / ".git").exists():
            root = self._run(["rev-parse", "--show-toplevel"]).strip()
            self.path = Path(root)

    def _run(self, args: list[str], *, check: bool = True) -> str:
        cmd = ["git", *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=self.path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=check,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout

    # Queries

    def current_branch(self) -> str:
        """Current branch, preferring ``GITHUB_REF_NAME`` on CI."""
        return os.environ.get("GITHUB_REF_NAME") or self._run(
            ["rev-parse", "--abbrev-ref", "HEAD"]
        ).strip()

    def get_latest_tag(self, pattern: str | None = None) -> str | None:
        """Most recent tag reachable from HEAD, or None without tags."""
        args = ["describe", "--tags", "--abbrev=0"]
        if pattern:
            args.extend(["--match", pattern])
        try:
            return self._run(args).strip() or None
        except GitError:
            logger.debug("No tag matching %s found", pattern or "*")
            return None

    def get_commits_since_tag(self, tag: str | None) -> list[Commit]:
        """Commits after ``tag`` (all commits without one), oldest first."""
        args = ["log", "--reverse", "--format=%H%x1f%B%x00"]
        if tag:
            args.append(f"{tag}..HEAD")
        output = self._run(args)

        commits = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record.strip():
                continue
            sha, _, message = record.partition(_FIELD_SEP)
            commits.append(Commit(sha=sha.strip(), message=message.strip()))
        return commits

    def remote_url(self, remote: str = "origin") -> str | None:
        try:
            return self._run(["remote", "get-url", remote]).strip() or None
        except GitError:
            return None

    def is_dirty(self) -> bool:
        return bool(self._run(["status", "--porcelain", "--untracked-files=no"]).strip())

    def tag_exists(self, tag: str) -> bool:
        return bool(self._run(["tag", "--list", tag]).strip())

    # Mutations

    def add(self, paths: list[Path | str]) -> None:
        self._run(["add", "--", *(str(p) for p in paths)])

    def commit(self, message: str) -> None:
        self._run(["commit", "-m", message])

    def create_tag(self, tag: str, message: str) -> None:
        if self.tag_exists(tag):
            raise GitError(f"Tag {tag} already exists")
        self._run(["tag", "-a", tag, "-m", message])

    def push(self, remote: str = "origin", *, follow_tags: bool = True) -> None:
        args = ["push", remote, "HEAD"]
        if follow_tags:
            args.append("--follow-tags")
        self._run(args)


def parse_remote_url(url: str, server_url: str = "https://github.com") -> RepoInfo | None:
    """Extract owner/repo from an HTTPS or SSH remote URL on ``server_url``'s host."""
    host = re.sub(r"^https?://", "", server_url).rstrip("/")
    for pattern in GITHUB_REMOTE_PATTERNS:
        match = pattern.match(url.strip())
        if match and match.group("host") == host:
            return RepoInfo(match.group("owner"), match.group("repo"), server_url)
    return None


def resolve_repo_info(
    repo: GitRepository | None,
    *,
    owner: str | None = None,
    name: str | None = None,
    server_url: str = "https://github.com",
) -> RepoInfo | None:
    """Resolve the hosting repository for links and releases.

    ``GITHUB_REPOSITORY`` wins, then explicit owner/name, then the origin
    remote. Returns None when none of them is usable.
    """
    env_value = os.environ.get("GITHUB_REPOSITORY", "")
    env_owner, _, env_repo = env_value.partition("/")
    if env_owner and env_repo:
        return RepoInfo(env_owner, env_repo, server_url)
    if owner and name:
        return RepoInfo(owner, name, server_url)
    if repo is None:
        return None
    url = repo.remote_url()
    return parse_remote_url(url, server_url) if url else None
