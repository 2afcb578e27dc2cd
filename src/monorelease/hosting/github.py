"""GitHub Releases API client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from monorelease.exceptions import GitHubError

if TYPE_CHECKING:
    from monorelease.vcs.git import RepositoryIdentity

logger = logging.getLogger(__name__)


class GitHubClient:
    """Thin synchronous wrapper around the GitHub REST API."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.api_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def create_release(
        self,
        tag_name: str,
        notes: str,
        identity: RepositoryIdentity,
    ) -> dict[str, Any]:
        """Create a release for an existing tag.

        Returns:
            The release object returned by the API

        Raises:
            GitHubError: On network failure, timeout, a non-2xx response or a
                body that is not a JSON object
        """
        payload = {"tag_name": tag_name, "name": tag_name, "body": notes}
        endpoint = f"/repos/{identity.owner}/{identity.repo}/releases"
        try:
            response = self._client.post(endpoint, json=payload)
        except httpx.TimeoutException as e:
            raise GitHubError(f"Creating release {tag_name} timed out") from e
        except httpx.HTTPError as e:
            raise GitHubError(f"Creating release {tag_name} failed: {e}") from e

        if not response.is_success:
            raise GitHubError(
                f"GitHub returned {response.status_code} creating release {tag_name}",
                status_code=response.status_code,
                stderr=response.text,
            )

        try:
            release = response.json()
        except ValueError as e:
            raise GitHubError(
                f"GitHub returned an invalid body creating release {tag_name}",
                status_code=response.status_code,
                stderr=response.text,
            ) from e
        if not isinstance(release, dict):
            raise GitHubError(
                f"GitHub returned an unexpected body creating release {tag_name}",
                status_code=response.status_code,
                stderr=response.text,
            )
        logger.info("Created GitHub release %s: %s", tag_name, release.get("html_url"))
        return release
