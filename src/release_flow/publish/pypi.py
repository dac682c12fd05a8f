"""Build and upload the package distribution.

Two toolchains are supported: ``uv build`` + ``uv publish`` (default) and
``python -m build`` + ``twine upload``. The dist directory is emptied before
building so only the artifacts of this release are uploaded.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from release_flow.exceptions import PublishError

if TYPE_CHECKING:
    from release_flow.config.models import PublishConfig

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = {
    "uv": ("UV_PUBLISH_TOKEN", "UV_PUBLISH_PASSWORD"),
    "twine": ("TWINE_PASSWORD",),
}


@dataclass
class PublishResult:
    package_name: str
    version: str
    commands: list[list[str]]
    files: list[str] = field(default_factory=list)
    index_url: str = "https://upload.pypi.org/legacy/"
    dry_run: bool = False

    @property
    def command_line(self) -> str:
        return " && ".join(" ".join(cmd) for cmd in self.commands)


def build_command(config: PublishConfig) -> list[str]:
    dist_dir = str(config.dist_dir)
    if config.tool == "uv":
        return ["uv", "build", "--out-dir", dist_dir]
    return [sys.executable, "-m", "build", "--outdir", dist_dir]


def upload_command(config: PublishConfig, files: list[str]) -> list[str]:
    if config.tool == "uv":
        cmd = ["uv", "publish"]
        if config.index_url:
            cmd.extend(["--publish-url", config.index_url])
        if config.trusted_publishing:
            cmd.extend(["--trusted-publishing", "always"])
    else:
        cmd = ["twine", "upload", "--non-interactive"]
        if config.index_url:
            cmd.extend(["--repository-url", config.index_url])
    return [*cmd, *files]


def check_credentials(config: PublishConfig) -> None:
    """Fail early when no upload credentials are available.

    Trusted publishing needs no token; otherwise one of the tool's token
    variables must be set.

    Raises:
        PublishError: If no credentials are configured
    """
    if config.trusted_publishing and config.tool == "uv":
        return
    names = TOKEN_ENV_VARS[config.tool]
    if not any(os.environ.get(name) for name in names):
        raise PublishError(
            f"Package index credentials not found. Set {' or '.join(names)}, "
            "or enable trusted_publishing."
        )


def _run(cmd: list[str], cwd: Path) -> None:
    logger.debug("Running %s", " ".join(cmd))
    try:
        subprocess.run(cmd, cwd=cwd, capture_output=True, text=True, check=True)
    except FileNotFoundError as e:
        raise PublishError(f"{cmd[0]} not found. Install it to publish packages.") from e
    except subprocess.CalledProcessError as e:
        raise PublishError(
            f"{' '.join(cmd[:2])} failed with exit code {e.returncode}",
            stderr=e.stderr,
        ) from e


def publish_package(
    project_path: Path,
    package_name: str,
    version: str,
    config: PublishConfig,
    *,
    dry_run: bool = False,
) -> PublishResult:
    """Build the distribution and upload it to the package index.

    In dry-run mode nothing is executed; the result only describes the
    commands that would run.

    Raises:
        PublishError: If credentials are missing or a command fails
    """
    dist_dir = project_path / config.dist_dir
    result = PublishResult(
        package_name=package_name,
        version=version,
        commands=[build_command(config), upload_command(config, [f"{config.dist_dir}/*"])],
        index_url=config.index_url or PublishResult.index_url,
        dry_run=dry_run,
    )
    if dry_run:
        return result

    check_credentials(config)

    if dist_dir.exists():
        shutil.rmtree(dist_dir)
    _run(build_command(config), project_path)

    files = sorted(str(p.relative_to(project_path)) for p in dist_dir.iterdir() if p.is_file())
    if not files:
        raise PublishError(f"Build produced no files in {dist_dir}")

    upload = upload_command(config, files)
    _run(upload, project_path)
    logger.info("Published %s %s (%d files)", package_name, version, len(files))

    result.commands = [build_command(config), upload]
    result.files = files
    return result
