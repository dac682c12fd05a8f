"""Project metadata (pyproject.toml and version files)."""
