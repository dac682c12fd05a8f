"""Branch release policy."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from release_flow.config.models import BranchConfig


def is_branch_allowed(branch: str, branches: BranchConfig) -> bool:
    """Releases may run from the main branch or a prerelease branch."""
    return branch == branches.main or re.search(branches.prerelease_pattern, branch) is not None


def get_prerelease_tag(branch: str, branches: BranchConfig) -> str | None:
    """Map a branch to its prerelease tag.

    ``feature/login`` becomes ``beta-feature-login`` with the default
    prefix. The main branch and non-matching branches have no tag.
    """
    if branch == branches.main:
        return None
    if re.search(branches.prerelease_pattern, branch) is None:
        return None
    return f"{branches.prerelease_prefix}-{branch.replace('/', '-')}"
