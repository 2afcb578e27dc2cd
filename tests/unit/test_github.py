"""Tests for the GitHub release client."""

from __future__ import annotations

import json

import httpx
import pytest

from monorelease.exceptions import ExternalCallError, GitHubError
from monorelease.hosting.github import GitHubClient
from monorelease.vcs.git import RepositoryIdentity

IDENTITY = RepositoryIdentity(host="github.com", name="acme/tools")


def _client(handler) -> GitHubClient:
    return GitHubClient(token="ghp_secret", transport=httpx.MockTransport(handler))


class TestCreateRelease:
    """Tests for GitHubClient.create_release()."""

    def test_posts_release(self):
        """The release is created for the tag with the notes as body."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"id": 1, "html_url": "https://github.com/r/1"})

        with _client(handler) as client:
            release = client.create_release("foo-v1.0.0", "## notes\n", IDENTITY)

        assert release["id"] == 1
        (request,) = requests
        assert request.method == "POST"
        assert str(request.url) == "https://api.github.com/repos/acme/tools/releases"
        assert request.headers["Authorization"] == "Bearer ghp_secret"
        assert json.loads(request.content) == {
            "tag_name": "foo-v1.0.0",
            "name": "foo-v1.0.0",
            "body": "## notes\n",
        }

    def test_enterprise_api_url(self):
        """Requests go to the configured API base."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(201, json={})

        client = GitHubClient(
            token="t",
            api_url="https://github.example.com/api/v3/",
            transport=httpx.MockTransport(handler),
        )
        client.create_release("foo-v1.0.0", "", IDENTITY)
        client.close()

        assert seen == ["https://github.example.com/api/v3/repos/acme/tools/releases"]

    def test_error_status(self):
        """Non-2xx responses raise GitHubError with the status code."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"message": "Validation Failed"})

        with _client(handler) as client, pytest.raises(GitHubError) as exc_info:
            client.create_release("foo-v1.0.0", "", IDENTITY)

        assert exc_info.value.status_code == 422
        assert "Validation Failed" in str(exc_info.value)

    def test_timeout(self):
        """Timeouts are external call errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with _client(handler) as client, pytest.raises(ExternalCallError, match="timed out"):
            client.create_release("foo-v1.0.0", "", IDENTITY)

    def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with _client(handler) as client, pytest.raises(GitHubError, match="refused"):
            client.create_release("foo-v1.0.0", "", IDENTITY)

    @pytest.mark.parametrize(
        "response", [httpx.Response(201, text="<html>"), httpx.Response(201, json=[])]
    )
    def test_success_with_unusable_body(self, response: httpx.Response):
        """A 2xx answer without a JSON object is still a GitHubError."""
        with _client(lambda request: response) as client, pytest.raises(GitHubError) as exc_info:
            client.create_release("foo-v1.0.0", "", IDENTITY)

        assert exc_info.value.status_code == 201
