"""Read and write the package version in project files.

pyproject.toml is edited with targeted regex replacements instead of a
TOML round-trip, so comments and formatting survive a release.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from release_flow.config.loader import find_pyproject_toml
from release_flow.exceptions import ProjectError, VersionNotFoundError

logger = logging.getLogger(__name__)

# Tables that may carry a static version, in lookup order
VERSION_TABLES = ("project", "tool.poetry")

_VERSION_LINE = re.compile(r'^(?P<prefix>version\s*=\s*)["\'](?P<version>[^"\']+)["\']', re.MULTILINE)

DEFAULT_VERSION_FILE_PATTERN = r'^(?P<prefix>__version__\s*=\s*)["\'](?P<version>[^"\']+)["\']'


def _resolve(path: Path | None) -> Path:
    if path is None or path.is_dir():
        return find_pyproject_toml(path)
    return path


def _table_span(content: str, table: str) -> tuple[int, int] | None:
    """Character span of a ``[table]`` body, up to the next header or EOF."""
    header = re.search(rf"^\[{re.escape(table)}\][ \t]*$", content, re.MULTILINE)
    if header is None:
        return None
    following = re.search(r"^\[", content[header.end() :], re.MULTILINE)
    end = header.end() + following.start() if following else len(content)
    return header.end(), end


def get_pyproject_version(path: Path | None = None) -> str:
    """Return the static version declared in pyproject.toml.

    Raises:
        VersionNotFoundError: If neither [project] nor [tool.poetry] has one
    """
    pyproject_path = _resolve(path)
    content = pyproject_path.read_text(encoding="utf-8")
    for table in VERSION_TABLES:
        span = _table_span(content, table)
        if span is None:
            continue
        match = _VERSION_LINE.search(content, *span)
        if match:
            return match.group("version")
    raise VersionNotFoundError(
        f"Could not find version in {pyproject_path}. "
        "Expected [project].version or [tool.poetry].version."
    )


def update_pyproject_version(path: Path | None, new_version: str) -> Path:
    """Set the version in pyproject.toml, keeping the rest of the file intact.

    Returns:
        Path of the updated file

    Raises:
        VersionNotFoundError: If no version line exists
        ProjectError: If the file already holds ``new_version``
    """
    pyproject_path = _resolve(path)
    content = pyproject_path.read_text(encoding="utf-8")

    for table in VERSION_TABLES:
        span = _table_span(content, table)
        if span is None:
            continue
        match = _VERSION_LINE.search(content, *span)
        if match is None:
            continue
        if match.group("version") == new_version:
            raise ProjectError(f"Version in {pyproject_path} is already {new_version}")
        updated = f'{content[: match.start()]}{match.group("prefix")}"{new_version}"{content[match.end() :]}'
        pyproject_path.write_text(updated, encoding="utf-8")
        logger.info("Updated [%s].version in %s to %s", table, pyproject_path, new_version)
        return pyproject_path

    raise VersionNotFoundError(
        f"Could not find version to update in {pyproject_path}. "
        "Expected [project].version or [tool.poetry].version."
    )


def update_version_file(file_path: Path, new_version: str, pattern: str | None = None) -> None:
    """Update ``__version__ = "..."`` (or a custom pattern) in a source file.

    A custom pattern must define ``prefix`` and ``version`` named groups.

    Raises:
        ProjectError: If the file does not exist
        VersionNotFoundError: If the pattern does not match
    """
    if not file_path.is_file():
        raise ProjectError(f"Version file not found: {file_path}")

    content = file_path.read_text(encoding="utf-8")
    regex = re.compile(pattern or DEFAULT_VERSION_FILE_PATTERN, re.MULTILINE)
    new_content, count = regex.subn(
        lambda m: f'{m.group("prefix")}"{new_version}"',
        content,
        count=1,
    )
    if count == 0:
        raise VersionNotFoundError(f"Could not find version pattern in {file_path}")

    file_path.write_text(new_content, encoding="utf-8")
    logger.info("Updated version in %s to %s", file_path, new_version)
