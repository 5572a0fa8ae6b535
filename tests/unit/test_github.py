"""Tests for the GitHub API client."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from relnotes.exceptions import GitHubError
from relnotes.forge.github import COMPARE_PAGE_SIZE, GitHubClient

Handler = Callable[[httpx.Request], httpx.Response]


def commit_json(sha: str, message: str) -> dict:
    return {
        "sha": sha,
        "commit": {
            "message": message,
            "author": {"name": "Octo", "email": "octo@example.com", "date": "2024-05-01T10:00:00Z"},
        },
    }


def make_client(handler: Handler, token: str | None = "secret") -> GitHubClient:
    http = httpx.AsyncClient(base_url="https://api.github.test", transport=httpx.MockTransport(handler))
    return GitHubClient(token, tag_prefix="rel@", http_client=http, clock=lambda: 1717171717.5)


class TestCommits:
    """Tests for commit range fetching."""

    async def test_commits_between(self):
        """Compare base...head and parse commits oldest first."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "total_commits": 2,
                    "commits": [commit_json("a" * 40, "feat: a"), commit_json("b" * 40, "fix: b")],
                },
            )

        async with make_client(handler) as github:
            commits = await github.commits_between("rel@100", "rel@200", "octo/hello")

        assert [c.message for c in commits] == ["feat: a", "fix: b"]
        assert commits[0].author_name == "Octo"
        assert commits[0].date.year == 2024
        assert seen[0].url.path == "/repos/octo/hello/compare/rel@100...rel@200"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    async def test_commits_since_uses_default_branch(self):
        """Commits since a tag compare against the default branch."""
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            if request.url.path == "/repos/octo/hello":
                return httpx.Response(200, json={"default_branch": "trunk"})
            return httpx.Response(200, json={"total_commits": 0, "commits": []})

        async with make_client(handler) as github:
            commits = await github.commits_since("rel@200", "octo/hello")

        assert commits == []
        assert paths == ["/repos/octo/hello", "/repos/octo/hello/compare/rel@200...trunk"]

    async def test_pagination(self):
        """Pages are fetched until total_commits is reached."""
        total = COMPARE_PAGE_SIZE + 1
        pages: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            pages.append(str(page))
            start = (page - 1) * COMPARE_PAGE_SIZE
            count = min(COMPARE_PAGE_SIZE, total - start)
            batch = [commit_json(f"{start + i:040d}", f"chore: {start + i}") for i in range(count)]
            return httpx.Response(200, json={"total_commits": total, "commits": batch})

        async with make_client(handler) as github:
            commits = await github.commits_between("rel@1", "rel@2", "octo/hello")

        assert len(commits) == total
        assert pages == ["1", "2"]
        assert commits[-1].message == f"chore: {total - 1}"


class TestPublishing:
    """Tests for release and tag creation."""

    async def test_create_release(self):
        """A release is created for the tag with the changelog body."""
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"id": 1})

        async with make_client(handler) as github:
            await github.create_release("octo/hello", "rel@200", "# notes\n")

        assert bodies == [{"tag_name": "rel@200", "name": "rel@200", "body": "# notes\n"}]

    async def test_create_next_release_tag(self):
        """The next tag points at the default branch head."""
        created: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if path == "/repos/octo/hello":
                return httpx.Response(200, json={"default_branch": "main"})
            if path == "/repos/octo/hello/git/ref/heads/main":
                return httpx.Response(200, json={"object": {"sha": "c" * 40}})
            if path == "/repos/octo/hello/git/refs" and request.method == "POST":
                created.append(json.loads(request.content))
                return httpx.Response(201, json={})
            return httpx.Response(404, json={"message": "Not Found"})

        async with make_client(handler) as github:
            tag = await github.create_next_release_tag("octo/hello")

        assert tag == "rel@1717171717"
        assert created == [{"ref": "refs/tags/rel@1717171717", "sha": "c" * 40}]


class TestErrors:
    """Tests for error handling."""

    async def test_http_error_status(self):
        """Error responses raise GitHubError with the status code."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Not Found"})

        async with make_client(handler) as github:
            with pytest.raises(GitHubError, match="Not Found") as exc_info:
                await github.commits_between("rel@1", "rel@2", "octo/missing")

        assert exc_info.value.status_code == 404

    async def test_transport_error(self):
        """Network failures raise GitHubError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with make_client(handler) as github:
            with pytest.raises(GitHubError, match="refused"):
                await github.create_release("octo/hello", "rel@1", "body")

    async def test_no_token(self):
        """Without a token no Authorization header is sent."""
        headers: list[httpx.Headers] = []

        def handler(request: httpx.Request) -> httpx.Response:
            headers.append(request.headers)
            return httpx.Response(200, json={"commits": []})

        async with make_client(handler, token=None) as github:
            await github.commits_between("rel@1", "rel@2", "octo/hello")

        assert "Authorization" not in headers[0]
