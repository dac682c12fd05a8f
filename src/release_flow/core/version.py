"""Semantic version bumping.

Versions are plain ``X.Y.Z`` strings with an optional ``-<tag>.<N>``
prerelease suffix. Bumping is pure: the same inputs always produce the same
output, there is no counter state anywhere.
"""

from __future__ import annotations

import re
from enum import Enum

from release_flow.exceptions import InvalidVersionFormat

VERSION_PATTERN: re.Pattern[str] = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"  # numeric core
    r"(?:-(?P<prerelease>[^\s+]+))?$",  # optional prerelease suffix
)

# Matches the "<tag>.<N>" prerelease suffix produced by bump_version
PRERELEASE_PATTERN: re.Pattern[str] = re.compile(r"^(?P<tag>.+)\.(?P<number>\d+)$")


class BumpType(str, Enum):
    """Severity of a version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def __str__(self) -> str:
        return self.value


_SEVERITY = {BumpType.PATCH: 1, BumpType.MINOR: 2, BumpType.MAJOR: 3}


def max_bump(current: BumpType | None, candidate: BumpType) -> BumpType:
    """Return the more severe of two bumps (``None`` loses to anything).

    >>> max_bump(BumpType.PATCH, BumpType.MINOR)
    <BumpType.MINOR: 'minor'>
    """
    if current is None or candidate.severity > current.severity:
        return candidate
    return current


def parse_version(version: str) -> tuple[int, int, int, str | None]:
    """Split a version string into its numeric core and prerelease suffix.

    Raises:
        InvalidVersionFormat: If the core is not three non-negative integers
    """
    match = VERSION_PATTERN.match(version.strip())
    if not match:
        raise InvalidVersionFormat(version)
    return (
        int(match.group("major")),
        int(match.group("minor")),
        int(match.group("patch")),
        match.group("prerelease"),
    )


def _bump_core(major: int, minor: int, patch: int, bump: BumpType) -> str:
    if bump is BumpType.MAJOR:
        return f"{major + 1}.0.0"
    if bump is BumpType.MINOR:
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"


def bump_version(
    current: str,
    bump: BumpType | str,
    prerelease_tag: str | None = None,
) -> str:
    """Compute the next version.

    Without a prerelease tag the bumped component is incremented and every
    component to its right is zeroed, unless the current version is itself
    a prerelease: then its numeric core is released as-is
    (``1.3.0-beta.2`` -> ``1.3.0``). With a tag, a current version already
    carrying ``-<tag>.<N>`` for the same tag only increments ``N``; otherwise
    a fresh ``<bumped core>-<tag>.0`` prerelease is started.

    Args:
        current: Current version, e.g. ``"1.4.9"`` or ``"1.5.0-beta.2"``
        bump: Bump level
        prerelease_tag: Prerelease channel, or None for a regular release

    Returns:
        The next version string

    Raises:
        InvalidVersionFormat: If ``current`` is malformed
    """
    bump = BumpType(bump)
    major, minor, patch, prerelease = parse_version(current)

    if prerelease_tag:
        if prerelease:
            match = PRERELEASE_PATTERN.match(prerelease)
            if match and match.group("tag") == prerelease_tag:
                number = int(match.group("number")) + 1
                return f"{major}.{minor}.{patch}-{prerelease_tag}.{number}"
        return f"{_bump_core(major, minor, patch, bump)}-{prerelease_tag}.0"

    if prerelease:
        return f"{major}.{minor}.{patch}"
    return _bump_core(major, minor, patch, bump)


def prerelease_channel(version: str) -> str | None:
    """Return ``<tag>`` of a ``X.Y.Z-<tag>.<N>`` version, else None.

    Raises:
        InvalidVersionFormat: If ``version`` is malformed
    """
    prerelease = parse_version(version)[3]
    match = PRERELEASE_PATTERN.match(prerelease) if prerelease else None
    return match.group("tag") if match else None
