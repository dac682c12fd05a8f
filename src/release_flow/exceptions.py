"""Exception hierarchy for release-flow.

Every error raised on purpose derives from :class:`ReleaseFlowError`, so the
CLI can report it cleanly and exit with a non-zero status.
"""

from __future__ import annotations


class ReleaseFlowError(Exception):
    """Base class for all release-flow errors."""


# Configuration


class ConfigError(ReleaseFlowError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml was found."""


class ConfigValidationError(ConfigError):
    """The [tool.release-flow] table is invalid."""


# Versions


class VersionError(ReleaseFlowError):
    """Version handling failed."""


class InvalidVersionFormat(VersionError):
    """A version string is not of the form X.Y.Z[-suffix]."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Invalid version format: {version!r} (expected X.Y.Z)")


# Project metadata


class ProjectError(ReleaseFlowError):
    """Reading or writing project metadata failed."""


class VersionNotFoundError(ProjectError):
    """No version field could be located in a project file."""


# External collaborators


class GitError(ReleaseFlowError):
    """A git command failed."""

    def __init__(self, message: str, *, stderr: str | None = None) -> None:
        self.stderr = stderr
        super().__init__(message)


class GitHubError(ReleaseFlowError):
    """The GitHub API rejected a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PublishError(ReleaseFlowError):
    """Building or uploading the package failed."""

    def __init__(self, message: str, *, stderr: str | None = None) -> None:
        self.stderr = stderr
        super().__init__(message)


# Orchestration


class ReleaseError(ReleaseFlowError):
    """A release step failed."""

    def __init__(self, message: str, *, step: str | None = None) -> None:
        self.step = step
        super().__init__(message)


class BranchNotAllowedError(ReleaseError):
    """Releases are not permitted from the current branch."""

    def __init__(self, branch: str, main: str) -> None:
        self.branch = branch
        super().__init__(
            f"Branch '{branch}' is not allowed for releases. "
            f"Use '{main}' or a branch matching the prerelease pattern.",
            step="analyze",
        )
