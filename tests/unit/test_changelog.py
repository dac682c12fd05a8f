"""Unit tests for changelog and release-notes rendering."""

from __future__ import annotations

from datetime import date

import pytest

from release_flow.config.models import (
    ChangelogTemplate,
    CommitsConfig,
    MarkdownConfig,
    ReleaseNotesTemplate,
)
from release_flow.core.changelog import (
    DEFAULT_CHANGELOG_HEADER,
    RepoInfo,
    fill_template,
    insert_changelog_entry,
    internal_release_notes,
    link_item,
    render_changelog_entry,
    render_release_notes,
)
from release_flow.core.commits import ChangeSet, CommitMeta, classify_commits

RELEASE_DAY = date(2024, 3, 1)


@pytest.fixture
def repo() -> RepoInfo:
    return RepoInfo("acme", "widgets")


@pytest.fixture
def markdown() -> MarkdownConfig:
    return MarkdownConfig()


class TestFillTemplate:
    """Tests for fill_template()."""

    def test_known_placeholders(self):
        assert fill_template("## [{version}] - {date}", version="1.0.0", date="2024-01-01") == (
            "## [1.0.0] - 2024-01-01"
        )

    def test_unknown_placeholder_untouched(self):
        assert fill_template("### {section} {emoji}", section="Features") == "### Features {emoji}"

    def test_values_are_not_reexpanded(self):
        """Substituted text containing braces stays literal."""
        assert fill_template("- {item}", item="support {date} in paths") == "- support {date} in paths"

    def test_repeated_placeholder(self):
        assert fill_template("{version}/{version}", version="2.0.0") == "2.0.0/2.0.0"


class TestLinkItem:
    """Tests for link_item()."""

    def test_pr_link_preferred(self, repo: RepoInfo):
        meta = CommitMeta(hash="0123456789abcdef", pr_number="42")
        assert link_item("resolve Y", meta, repo) == (
            "resolve Y ([#42](https://github.com/acme/widgets/pull/42))"
        )

    def test_commit_link(self, repo: RepoInfo):
        meta = CommitMeta(hash="0123456789abcdef")
        assert link_item("add X", meta, repo) == (
            "add X ([0123456](https://github.com/acme/widgets/commit/0123456789abcdef))"
        )

    def test_no_meta(self, repo: RepoInfo):
        assert link_item("add X", None, repo) == "add X"

    def test_empty_meta(self, repo: RepoInfo):
        assert link_item("add X", CommitMeta(), repo) == "add X"

    def test_no_repo(self):
        assert link_item("add X", CommitMeta(pr_number="1"), None) == "add X"

    def test_enterprise_server(self):
        repo = RepoInfo("acme", "widgets", "https://git.example.com/")
        assert link_item("x", CommitMeta(pr_number="3"), repo) == (
            "x ([#3](https://git.example.com/acme/widgets/pull/3))"
        )


class TestRenderChangelogEntry:
    """Tests for render_changelog_entry()."""

    def test_basic_entry(self, markdown: MarkdownConfig):
        change_set = ChangeSet(changes={"Features": ["Add login"]})
        entry = render_changelog_entry("2.0.0", change_set, markdown, today=RELEASE_DAY)

        assert "## [2.0.0]" in entry
        assert "- Add login" in entry
        assert entry == "## [2.0.0] - 2024-03-01\n\n### Features\n\n- Add login\n"

    def test_sections_in_change_set_order(self, markdown: MarkdownConfig):
        change_set = ChangeSet(changes={"Bug Fixes": ["b"], "Features": ["a"]})
        entry = render_changelog_entry("1.0.0", change_set, markdown, today=RELEASE_DAY)

        assert entry.index("### Bug Fixes") < entry.index("### Features")

    def test_section_rename(self):
        markdown = MarkdownConfig(sections={"Features": "New Features"})
        change_set = ChangeSet(changes={"Features": ["a"], "Bug Fixes": ["b"]})
        entry = render_changelog_entry("1.0.0", change_set, markdown, today=RELEASE_DAY)

        assert "### New Features" in entry
        assert "### Features" not in entry
        assert "### Bug Fixes" in entry

    def test_custom_templates(self):
        markdown = MarkdownConfig(
            changelog=ChangelogTemplate(
                version_header="# {version} ({date})",
                section_header="**{section}**",
                list_item="* {item} {unknown}",
                date_format="%d.%m.%Y",
            )
        )
        change_set = ChangeSet(changes={"Features": ["a"]})
        entry = render_changelog_entry("1.0.0", change_set, markdown, today=RELEASE_DAY)

        assert entry == "# 1.0.0 (01.03.2024)\n\n**Features**\n\n* a {unknown}\n"

    def test_links(self, markdown: MarkdownConfig, repo: RepoInfo):
        change_set = ChangeSet(
            changes={"Bug Fixes": ["resolve Y"]},
            commit_meta={"resolve Y": CommitMeta(pr_number="42")},
        )
        entry = render_changelog_entry("1.0.1", change_set, markdown, repo=repo, today=RELEASE_DAY)

        assert "- resolve Y ([#42](https://github.com/acme/widgets/pull/42))" in entry

    def test_default_date_is_today(self, markdown: MarkdownConfig):
        entry = render_changelog_entry("1.0.0", ChangeSet(changes={"Features": ["a"]}), markdown)

        assert entry.startswith("## [1.0.0] - 20")


class TestRenderReleaseNotes:
    """Tests for render_release_notes()."""

    def test_no_version_header(self, markdown: MarkdownConfig):
        change_set = ChangeSet(changes={"Features": ["Add login"]})
        notes = render_release_notes(change_set, markdown)

        assert "### Features" in notes
        assert "- Add login" in notes
        assert "## [2.0.0]" not in notes
        assert notes == "### Features\n\n- Add login\n"

    def test_own_templates(self):
        markdown = MarkdownConfig(
            release_notes=ReleaseNotesTemplate(section_header="## {section}", list_item="+ {item}")
        )
        notes = render_release_notes(ChangeSet(changes={"Features": ["a"]}), markdown)

        assert notes == "## Features\n\n+ a\n"

    def test_classified_end_to_end(self, markdown: MarkdownConfig, repo: RepoInfo):
        """Classifier output renders with breaking details and links."""
        change_set = classify_commits(
            [
                ("feat: add X", "a1b2c3d4e5f6"),
                ("fix: resolve Y (#42)", "b2c3d4e5f6a7"),
                ("feat!: drop Z\n\nBREAKING CHANGE: Z removed", "c3d4e5f6a7b8"),
            ],
            CommitsConfig(),
        )
        notes = render_release_notes(change_set, markdown, repo=repo)

        assert "- add X ([a1b2c3d](https://github.com/acme/widgets/commit/a1b2c3d4e5f6))" in notes
        assert "- resolve Y ([#42](https://github.com/acme/widgets/pull/42))" in notes
        assert "### Breaking Changes" in notes
        assert "- Details: Z removed\n" in notes


def test_internal_release_notes():
    assert internal_release_notes("1.2.4") == (
        "Release 1.2.4\n\n_This release contains only internal changes._\n"
    )


class TestInsertChangelogEntry:
    """Tests for insert_changelog_entry()."""

    ENTRY = "## [1.1.0] - 2024-03-01\n\n### Features\n\n- a\n"

    def test_new_changelog(self):
        result = insert_changelog_entry(None, self.ENTRY)

        assert result.startswith(DEFAULT_CHANGELOG_HEADER)
        assert result.endswith("- a\n")

    def test_empty_changelog(self):
        assert insert_changelog_entry("  \n", self.ENTRY) == insert_changelog_entry(None, self.ENTRY)

    def test_inserted_above_previous_entry(self):
        existing = (
            "# Changelog\n\nSome intro.\n\n"
            "## [1.0.0] - 2024-01-01\n\n### Features\n\n- first\n"
        )
        result = insert_changelog_entry(existing, self.ENTRY)

        assert result.index("## [1.1.0]") < result.index("## [1.0.0]")
        assert result.startswith("# Changelog\n\nSome intro.\n\n## [1.1.0]")
        assert "- a\n\n## [1.0.0]" in result

    def test_inserted_after_intro(self):
        existing = DEFAULT_CHANGELOG_HEADER + "Older notes live elsewhere.\n"
        result = insert_changelog_entry(existing, self.ENTRY)

        assert result.index("## [1.1.0]") > result.index("All notable changes")
        assert result.index("## [1.1.0]") < result.index("Older notes")

    def test_inserted_after_first_heading_block(self):
        existing = "# History\n\nHand written.\n"
        result = insert_changelog_entry(existing, self.ENTRY)

        assert result.startswith("# History\n\nHand written.\n\n## [1.1.0]")
