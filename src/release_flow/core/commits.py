"""Conventional commit parsing and classification.

A commit subject follows ``type(scope)!: description``. The parser turns a
raw message into a :class:`ParsedCommit`; the classifier walks a batch of
commits oldest-first against the configured type rules and aggregates them
into a :class:`ChangeSet`: one bump level plus the change descriptions
grouped by changelog section.

Both stages are pure. Configuration is always passed in explicitly.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from release_flow.core.version import BumpType, max_bump

if TYPE_CHECKING:
    from release_flow.config.models import CommitsConfig

logger = logging.getLogger(__name__)

UNKNOWN_TYPE = "unknown"
BREAKING_SECTION = "Breaking Changes"

DEFAULT_BREAKING_KEYWORDS: tuple[str, ...] = (
    "BREAKING CHANGE",
    "BREAKING-CHANGE",
    "BREAKING CHANGES",
    "BREAKING-CHANGES",
)

DEFAULT_SKIP_RELEASE_PATTERNS: tuple[str, ...] = (
    "[skip ci]",
    "[ci skip]",
    "[skip release]",
    "[release skip]",
    "[no release]",
)

SUBJECT_PATTERN: re.Pattern[str] = re.compile(
    r"^(?P<type>\w+)"  # type
    r"(?:\((?P<scope>[^)]+)\))?"  # optional (scope), anything but ")"
    r"(?P<breaking>!)?"  # optional breaking indicator
    r": (?P<description>.+)$",
)

# Squash merges append the PR number to the subject: "fix: thing (#123)"
PR_REFERENCE_PATTERN: re.Pattern[str] = re.compile(r"\s*\(#(?P<number>\d+)\)\s*$")

# Subjects of commits produced by a release run itself
RELEASE_SUBJECT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^chore\(release\):"),
    re.compile(r"^release:"),
    re.compile(r"^bump version", re.IGNORECASE),
    re.compile(r"^version bump", re.IGNORECASE),
    re.compile(r"^\d+\.\d+\.\d+"),
)


@dataclass(frozen=True)
class ParsedCommit:
    """One commit message broken into its conventional-commit parts.

    Attributes:
        type: Commit type token, ``"unknown"`` if the subject is not conventional
        scope: Optional scope
        description: Subject description without the trailing ``(#N)``
        breaking: Whether the commit is a breaking change
        body: Everything after the subject line
        hash: Commit identifier, if known
        pr_number: Pull request number taken from the subject
        subject: The raw subject line
        is_conventional: Whether the subject matched the grammar
    """

    type: str
    description: str
    scope: str | None = None
    breaking: bool = False
    body: str = ""
    hash: str | None = None
    pr_number: str | None = None
    subject: str = ""
    is_conventional: bool = True


@dataclass(frozen=True)
class CommitMeta:
    """Link metadata for one rendered change item."""

    hash: str | None = None
    pr_number: str | None = None


@dataclass(frozen=True)
class ChangeSet:
    """Aggregated classification result.

    ``changes`` maps section name to change items in first-seen order.
    ``commit_meta`` maps a rendered item back to the commit it came from.
    """

    bump: BumpType = BumpType.PATCH
    changes: dict[str, list[str]] = field(default_factory=dict)
    has_only_hidden_changes: bool = False
    commit_meta: dict[str, CommitMeta] = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)

    @property
    def sections(self) -> list[str]:
        return list(self.changes)


def split_message(message: str) -> tuple[str, str]:
    """Split a commit message into ``(subject, body)``."""
    subject, _, body = message.strip().partition("\n")
    return subject.strip(), body.strip()


def _contains_keyword(text: str, keywords: Iterable[str]) -> bool:
    upper = text.upper()
    return any(keyword.upper() in upper for keyword in keywords)


def parse_commit(
    message: str,
    hash: str | None = None,
    breaking_keywords: Sequence[str] = DEFAULT_BREAKING_KEYWORDS,
) -> ParsedCommit:
    """Parse a raw commit message.

    Non-conventional subjects are not an error: they come back with
    ``type="unknown"`` and ``is_conventional=False`` and the classifier
    ignores them.

    Args:
        message: Full commit message (subject, blank line, body)
        hash: Commit identifier
        breaking_keywords: Body keywords marking a breaking change

    Returns:
        The parsed commit
    """
    subject, body = split_message(message)
    match = SUBJECT_PATTERN.match(subject)
    if not match:
        return ParsedCommit(
            type=UNKNOWN_TYPE,
            description=subject,
            body=body,
            hash=hash,
            subject=subject,
            is_conventional=False,
        )

    description = match.group("description").strip()
    pr_number = None
    pr_match = PR_REFERENCE_PATTERN.search(description)
    if pr_match and description[: pr_match.start()].strip():
        pr_number = pr_match.group("number")
        description = description[: pr_match.start()].rstrip()

    breaking = bool(match.group("breaking")) or _contains_keyword(body, breaking_keywords)

    return ParsedCommit(
        type=match.group("type"),
        scope=match.group("scope"),
        description=description,
        breaking=breaking,
        body=body,
        hash=hash,
        pr_number=pr_number,
        subject=subject,
    )


def is_release_commit(
    message: str,
    skip_patterns: Iterable[str] = DEFAULT_SKIP_RELEASE_PATTERNS,
) -> bool:
    """Return True for commits created by a previous release run.

    A subject carrying a skip marker (case-insensitive) or shaped like a
    release commit (``chore(release): 1.2.0``, ``release: ...``, ``1.2.0``,
    ``bump version ...``) is a release artifact and must not be analyzed.
    """
    subject, _ = split_message(message)
    if not subject:
        return False
    lowered = subject.lower()
    if any(pattern.lower() in lowered for pattern in skip_patterns):
        return True
    return any(pattern.search(subject) for pattern in RELEASE_SUBJECT_PATTERNS)


CommitInput = str | tuple[str, str | None]


def as_commit_pairs(commits: Iterable[CommitInput]) -> list[tuple[str, str | None]]:
    """Normalize bare messages and ``(message, hash)`` pairs to pairs."""
    return [(commit, None) if isinstance(commit, str) else commit for commit in commits]


def filter_release_commits(
    commits: Iterable[CommitInput],
    skip_patterns: Iterable[str] = DEFAULT_SKIP_RELEASE_PATTERNS,
) -> list[tuple[str, str | None]]:
    """Drop release-artifact commits, keeping order."""
    patterns = list(skip_patterns)
    return [
        (message, sha)
        for message, sha in as_commit_pairs(commits)
        if not is_release_commit(message, patterns)
    ]


def extract_breaking_detail(body: str, breaking_keywords: Sequence[str]) -> str | None:
    """Return the text following a breaking keyword in the body.

    Only the first non-empty body line mentioning a keyword is used; the
    keyword itself and any following ``:`` or ``-`` are dropped.
    """
    keywords = sorted(breaking_keywords, key=len, reverse=True)
    for line in body.splitlines():
        if not line.strip():
            continue
        upper = line.upper()
        for keyword in keywords:
            index = upper.find(keyword.upper())
            if index == -1:
                continue
            detail = line[index + len(keyword) :].lstrip(" \t:-").strip()
            return detail or None
    return None


def format_change_item(commit: ParsedCommit, *, include_scope: bool = True) -> str:
    """Render the changelog text for a commit, e.g. ``"add login (auth)"``."""
    if include_scope and commit.scope:
        return f"{commit.description} ({commit.scope})"
    return commit.description


class _ChangeSetBuilder:
    def __init__(self) -> None:
        self.bump: BumpType | None = None
        self.changes: dict[str, list[str]] = {}
        self.commit_meta: dict[str, CommitMeta] = {}
        self.saw_hidden = False

    def add(self, section: str, item: str, meta: CommitMeta | None = None) -> None:
        self.changes.setdefault(section, []).append(item)
        if meta is not None:
            self.commit_meta[item] = meta

    def build(self) -> ChangeSet:
        return ChangeSet(
            bump=self.bump or BumpType.PATCH,
            changes=self.changes,
            has_only_hidden_changes=not self.changes and self.saw_hidden,
            commit_meta=self.commit_meta,
        )


def is_hidden(commit: ParsedCommit, config: CommitsConfig) -> bool:
    """Whether a rule-matched commit is suppressed from rendered documents."""
    rule = config.types.get(commit.type)
    if rule is not None and rule.hidden:
        return True
    hidden_scopes = config.hidden_scopes.get(commit.type, ())
    return commit.scope is not None and commit.scope in hidden_scopes


def classify_commits(
    commits: Iterable[CommitInput],
    config: CommitsConfig,
) -> ChangeSet:
    """Classify commits (oldest first) into a :class:`ChangeSet`.

    The bump is the most severe level seen; any breaking change forces
    ``major``; ``patch`` is the fallback when nothing matched. Breaking
    commits are listed under "Breaking Changes" before their type rule is
    even looked up, so a hidden type or scope never hides them. Commits
    whose type has no rule contribute nothing else.

    Args:
        commits: ``(message, hash)`` pairs (or bare messages) in
            chronological order
        config: Commit type rules, hidden scopes and breaking keywords

    Returns:
        The aggregated change set
    """
    builder = _ChangeSetBuilder()

    for message, sha in as_commit_pairs(commits):
        if is_release_commit(message, config.skip_release_patterns):
            logger.debug("Skipping release commit %s", sha or split_message(message)[0])
            continue

        commit = parse_commit(message, sha, config.breaking_keywords)
        if not commit.is_conventional:
            logger.debug("Ignoring non-conventional commit: %s", commit.subject)
            continue

        item = format_change_item(commit)
        meta = CommitMeta(hash=commit.hash, pr_number=commit.pr_number)

        if commit.breaking:
            builder.bump = BumpType.MAJOR
            builder.add(BREAKING_SECTION, item, meta)
            detail = extract_breaking_detail(commit.body, config.breaking_keywords)
            if detail:
                builder.add(BREAKING_SECTION, f"Details: {detail}")

        rule = config.types.get(commit.type)
        if rule is None:
            logger.debug("No rule for commit type %r", commit.type)
            continue

        builder.bump = max_bump(builder.bump, rule.bump)

        if not is_hidden(commit, config) and rule.section:
            builder.add(rule.section, item, meta)
        else:
            builder.saw_hidden = True

    change_set = builder.build()
    logger.debug(
        "Classified commits: bump=%s sections=%s", change_set.bump, change_set.sections
    )
    return change_set
