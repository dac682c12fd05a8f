"""Package publishing."""

from __future__ import annotations

from release_flow.publish.pypi import PublishResult, publish_package

__all__ = ["PublishResult", "publish_package"]
