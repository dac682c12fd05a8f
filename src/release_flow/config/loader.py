"""Locate and load the release-flow configuration from pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from release_flow.config.models import ReleaseFlowConfig
from release_flow.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

TOOL_KEY = "release-flow"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Walk up from ``start`` (default: cwd) to the nearest pyproject.toml.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the filesystem root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"File not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_release_flow_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-flow]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_KEY, {}))


def load_config(path: Path | None = None) -> ReleaseFlowConfig:
    """Load the configuration for the project containing ``path``.

    A pyproject.toml without a ``[tool.release-flow]`` table yields defaults.

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
        ConfigValidationError: If the table does not validate
    """
    pyproject_path = path if path is not None and path.is_file() else find_pyproject_toml(path)
    raw = extract_release_flow_config(load_pyproject_toml(pyproject_path))
    logger.debug("Loaded [tool.%s] from %s: %s", TOOL_KEY, pyproject_path, raw)
    try:
        return ReleaseFlowConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_KEY}] configuration:\n{e}") from e


def get_project_name(path: Path | None = None) -> str:
    """Return ``[project].name`` (or ``[tool.poetry].name``).

    Raises:
        ConfigValidationError: If no name is declared
    """
    data = load_pyproject_toml(find_pyproject_toml(path))
    name = data.get("project", {}).get("name") or data.get("tool", {}).get("poetry", {}).get("name")
    if not name:
        raise ConfigValidationError("No project name found in pyproject.toml")
    return str(name)
