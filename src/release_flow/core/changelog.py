"""Changelog and release-notes rendering.

Both documents are rendered from the same :class:`ChangeSet` with simple
line templates (``{version}``, ``{date}``, ``{section}``, ``{item}``).
Items get a trailing link to their pull request, or failing that to their
commit, when the repository is known. Missing metadata never raises; the
item is rendered as plain text instead.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from release_flow.config.models import MarkdownConfig
    from release_flow.core.commits import ChangeSet, CommitMeta

PLACEHOLDER_PATTERN: re.Pattern[str] = re.compile(r"\{(\w+)\}")

SHORT_SHA_LENGTH = 7

CHANGELOG_INTRO = "All notable changes to this project will be documented in this file."
DEFAULT_CHANGELOG_HEADER = f"# Changelog\n\n{CHANGELOG_INTRO}\n\n"

INTERNAL_CHANGES_NOTE = "_This release contains only internal changes._"


@dataclass(frozen=True)
class RepoInfo:
    """Hosting repository identity used to build links."""

    owner: str
    repo: str
    server_url: str = "https://github.com"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def base_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/{self.owner}/{self.repo}"

    def pull_url(self, number: str) -> str:
        return f"{self.base_url}/pull/{number}"

    def commit_url(self, sha: str) -> str:
        return f"{self.base_url}/commit/{sha}"


def fill_template(template: str, **values: str) -> str:
    """Substitute known ``{name}`` placeholders; leave unknown ones as they are.

    >>> fill_template("### {section} {emoji}", section="Features")
    '### Features {emoji}'
    """
    return PLACEHOLDER_PATTERN.sub(
        lambda m: values.get(m.group(1), m.group(0)),
        template,
    )


def link_item(item: str, meta: CommitMeta | None, repo: RepoInfo | None) -> str:
    """Append a PR link (preferred) or a short commit link to an item."""
    if meta is None or repo is None:
        return item
    if meta.pr_number:
        return f"{item} ([#{meta.pr_number}]({repo.pull_url(meta.pr_number)}))"
    if meta.hash:
        short = meta.hash[:SHORT_SHA_LENGTH]
        return f"{item} ([{short}]({repo.commit_url(meta.hash)}))"
    return item


def render_changes(
    change_set: ChangeSet,
    section_header: str,
    list_item: str,
    *,
    sections: Mapping[str, str] | None = None,
    repo: RepoInfo | None = None,
) -> list[str]:
    """Render every section of a change set as markdown lines.

    Sections come out in the change set's own order; ``sections`` only
    renames them.
    """
    renames = sections or {}
    lines: list[str] = []
    for section, items in change_set.changes.items():
        lines.append(fill_template(section_header, section=renames.get(section, section)))
        lines.append("")
        for item in items:
            text = link_item(item, change_set.commit_meta.get(item), repo)
            lines.append(fill_template(list_item, item=text))
        lines.append("")
    return lines


def render_changelog_entry(
    version: str,
    change_set: ChangeSet,
    markdown: MarkdownConfig,
    *,
    repo: RepoInfo | None = None,
    today: date | None = None,
) -> str:
    """Render a dated changelog entry for ``version``.

    Args:
        version: Version being released
        change_set: Classified changes
        markdown: Template configuration
        repo: Repository for links, if known
        today: Release date (defaults to the current UTC date)

    Returns:
        The entry, ending with a single newline
    """
    template = markdown.changelog
    release_date = (today or datetime.now(UTC).date()).strftime(template.date_format)
    lines = [
        fill_template(template.version_header, version=version, date=release_date),
        "",
        *render_changes(
            change_set,
            template.section_header,
            template.list_item,
            sections=markdown.sections,
            repo=repo,
        ),
    ]
    return "\n".join(lines).rstrip() + "\n"


def render_release_notes(
    change_set: ChangeSet,
    markdown: MarkdownConfig,
    *,
    repo: RepoInfo | None = None,
) -> str:
    """Render release notes (no version header, no date)."""
    template = markdown.release_notes
    lines = render_changes(
        change_set,
        template.section_header,
        template.list_item,
        sections=markdown.sections,
        repo=repo,
    )
    return "\n".join(lines).rstrip() + "\n"


def internal_release_notes(version: str) -> str:
    """Release body used when a release has no visible changes."""
    return f"Release {version}\n\n{INTERNAL_CHANGES_NOTE}\n"


def insert_changelog_entry(existing: str | None, entry: str) -> str:
    """Insert ``entry`` above the newest entry of an existing changelog.

    Without any ``## [`` heading the entry goes after the standard intro
    line, or after the first heading block. An empty or missing changelog
    gets the default header first.
    """
    if not existing or not existing.strip():
        existing = DEFAULT_CHANGELOG_HEADER

    lines = existing.split("\n")
    entry_lines = [*entry.strip().split("\n"), ""]

    insert_at = next((i for i, line in enumerate(lines) if line.startswith("## [")), None)
    if insert_at is None:
        intro = next((i for i, line in enumerate(lines) if line.strip() == CHANGELOG_INTRO), None)
        insert_at = intro + 2 if intro is not None else min(4, len(lines))
        insert_at = min(insert_at, len(lines))
        # keep a blank line between the header and the new entry
        if insert_at > 0 and lines[insert_at - 1].strip():
            entry_lines.insert(0, "")

    lines[insert_at:insert_at] = entry_lines
    return "\n".join(lines).rstrip() + "\n"
