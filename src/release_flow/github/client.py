"""Minimal GitHub REST client for release creation.

Only two endpoints are used: ``GET /user`` to validate the token and
``POST /repos/{owner}/{repo}/releases`` to create the release. Any
transport failure or non-2xx response raises :class:`GitHubError`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import requests

from release_flow.exceptions import GitHubError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitHubRelease:
    id: int
    html_url: str
    tag_name: str


@dataclass
class GitHubClient:
    """Client for the GitHub REST API.

    Parameters
    ----------
    token : str
        Personal access token or ``GITHUB_TOKEN`` from Actions.
    api_url : str
        API root, override for GitHub Enterprise.
    timeout : float
        Request timeout in seconds.
    """

    token: str
    api_url: str = "https://api.github.com"
    timeout: float = 30.0

    @classmethod
    def from_env(cls, token_env: str = "GITHUB_TOKEN", **kwargs: Any) -> GitHubClient:
        """Build a client from the token in ``token_env``.

        Raises:
            GitHubError: If the variable is not set
        """
        token = os.environ.get(token_env)
        if not token:
            raise GitHubError(f"{token_env} environment variable is required for GitHub releases")
        return cls(token=token, **kwargs)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.api_url.rstrip('/')}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = requests.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise GitHubError(f"GitHub request failed: {e}") from e

        if not response.ok:
            logger.error("GitHub returned %s for %s %s", response.status_code, method, url)
            raise GitHubError(
                f"GitHub API error: {response.status_code} {response.reason}: {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise GitHubError("GitHub returned a non-JSON response") from e

    def validate_auth(self) -> str:
        """Check the token and return the authenticated login.

        Raises:
            GitHubError: If authentication fails
        """
        user = self._request("GET", "/user")
        return str(user.get("login", ""))

    def create_release(
        self,
        owner: str,
        repo: str,
        *,
        tag: str,
        body: str,
        name: str | None = None,
        prerelease: bool = False,
        draft: bool = False,
    ) -> GitHubRelease:
        """Create a release for an existing tag.

        Raises:
            GitHubError: If the API rejects the request
        """
        payload = {
            "tag_name": tag,
            "name": name or tag,
            "body": body,
            "draft": draft,
            "prerelease": prerelease,
        }
        data = self._request("POST", f"/repos/{owner}/{repo}/releases", json=payload)
        release = GitHubRelease(
            id=int(data["id"]),
            html_url=str(data["html_url"]),
            tag_name=str(data.get("tag_name", tag)),
        )
        logger.info("Created GitHub release %s", release.html_url)
        return release
