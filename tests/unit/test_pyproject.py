"""Tests for reading and writing the project version."""

from __future__ import annotations

from pathlib import Path

import pytest

from release_flow.exceptions import ConfigNotFoundError, ProjectError, VersionNotFoundError
from release_flow.project.pyproject import (
    get_pyproject_version,
    update_pyproject_version,
    update_version_file,
)

PYPROJECT = """\
# build settings
[build-system]
requires = ["hatchling"]
version = "9.9.9"

[project]
name = "demo"
version = "1.2.3"  # bumped by release-flow
description = "demo"

[tool.other]
version = "0.0.1"
"""


@pytest.fixture
def pyproject(tmp_path: Path) -> Path:
    path = tmp_path / "pyproject.toml"
    path.write_text(PYPROJECT)
    return path


class TestGetPyprojectVersion:
    def test_project_table(self, pyproject: Path):
        """Only the [project] table is consulted, not other tables."""
        assert get_pyproject_version(pyproject) == "1.2.3"

    def test_directory_argument(self, pyproject: Path):
        assert get_pyproject_version(pyproject.parent) == "1.2.3"

    def test_poetry_table(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text("[tool.poetry]\nname = 'demo'\nversion = '0.4.0'\n")

        assert get_pyproject_version(path) == "0.4.0"

    def test_dynamic_version_not_found(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "demo"\ndynamic = ["version"]\n')

        with pytest.raises(VersionNotFoundError):
            get_pyproject_version(path)

    def test_missing_file(self, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()

        with pytest.raises(ConfigNotFoundError):
            get_pyproject_version(empty)


class TestUpdatePyprojectVersion:
    def test_updates_only_project_version(self, pyproject: Path):
        update_pyproject_version(pyproject, "1.3.0")
        content = pyproject.read_text()

        assert 'version = "1.3.0"  # bumped by release-flow' in content
        assert 'version = "9.9.9"' in content
        assert 'version = "0.0.1"' in content
        assert content.startswith("# build settings\n")

    def test_single_quotes_normalized(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text("[project]\nversion='1.0.0'\n")

        update_pyproject_version(path, "1.0.1")

        assert path.read_text() == '[project]\nversion="1.0.1"\n'

    def test_same_version_raises(self, pyproject: Path):
        with pytest.raises(ProjectError, match="already 1.2.3"):
            update_pyproject_version(pyproject, "1.2.3")

    def test_no_version_raises(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "demo"\n')

        with pytest.raises(VersionNotFoundError):
            update_pyproject_version(path, "1.0.0")


class TestUpdateVersionFile:
    def test_dunder_version(self, tmp_path: Path):
        path = tmp_path / "__init__.py"
        path.write_text('"""Pkg."""\n\n__version__ = "1.2.3"\n')

        update_version_file(path, "1.3.0")

        assert path.read_text() == '"""Pkg."""\n\n__version__ = "1.3.0"\n'

    def test_custom_pattern(self, tmp_path: Path):
        path = tmp_path / "_meta.py"
        path.write_text("NAME = 'demo'\nVERSION = '1.2.3'\n")

        update_version_file(
            path, "2.0.0", pattern=r"^(?P<prefix>VERSION\s*=\s*)['\"](?P<version>[^'\"]+)['\"]"
        )

        assert path.read_text() == "NAME = 'demo'\nVERSION = \"2.0.0\"\n"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ProjectError, match="not found"):
            update_version_file(tmp_path / "nope.py", "1.0.0")

    def test_pattern_not_found(self, tmp_path: Path):
        path = tmp_path / "__init__.py"
        path.write_text("VERSION = (1, 2, 3)\n")

        with pytest.raises(VersionNotFoundError):
            update_version_file(path, "1.0.0")
