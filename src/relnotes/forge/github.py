"""GitHub REST API client.

Provides the remote side of a release: fetching the commits between two
refs, creating the release, and creating the next release marker tag.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any, Self

import httpx

from relnotes import __version__
from relnotes.core.tags import next_release_tag_name
from relnotes.exceptions import GitHubError
from relnotes.vcs.git import Commit

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
COMPARE_PAGE_SIZE = 100


def _parse_commit(data: dict[str, Any]) -> Commit:
    info = data.get("commit", {})
    author = info.get("author") or {}
    raw_date = author.get("date") or "1970-01-01T00:00:00Z"
    return Commit(
        sha=data["sha"],
        message=info.get("message", ""),
        author_name=author.get("name", ""),
        author_email=author.get("email", ""),
        date=datetime.fromisoformat(raw_date.replace("Z", "+00:00")),
    )


class GitHubClient:
    """Async GitHub API client.

    Use as an async context manager so the underlying connection pool is
    closed::

        async with GitHubClient(token=token, tag_prefix="rel@") as github:
            commits = await github.commits_since("rel@200", "owner/name")
    """

    def __init__(
        self,
        token: str | None,
        *,
        tag_prefix: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.tag_prefix = tag_prefix
        self._clock = clock
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"relnotes/{__version__}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        if http_client is None:
            http_client = httpx.AsyncClient(base_url=api_url, timeout=timeout)
        http_client.headers.update(headers)
        self._http = http_client

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        logger.debug("GitHub %s %s", method, url)
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub request {method} {url} failed: {e}") from e

        if response.is_error:
            try:
                detail = response.json().get("message", response.text)
            except ValueError:
                detail = response.text
            raise GitHubError(
                f"GitHub API {method} {url} returned {response.status_code}: {detail}",
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def default_branch(self, repo: str) -> str:
        data = await self._request("GET", f"/repos/{repo}")
        return data["default_branch"]

    async def _compare(self, repo: str, base: str, head: str) -> list[Commit]:
        """Commits reachable from ``head`` but not ``base``, oldest first."""
        commits: list[Commit] = []
        page = 1
        while True:
            data = await self._request(
                "GET",
                f"/repos/{repo}/compare/{base}...{head}",
                params={"per_page": COMPARE_PAGE_SIZE, "page": page},
            )
            batch = data.get("commits", [])
            commits.extend(_parse_commit(item) for item in batch)
            total = data.get("total_commits", len(commits))
            if len(batch) < COMPARE_PAGE_SIZE or len(commits) >= total:
                break
            page += 1
        logger.debug("Compare %s...%s returned %d commit(s)", base, head, len(commits))
        return commits

    async def commits_between(self, base: str, head: str, repo: str) -> list[Commit]:
        return await self._compare(repo, base, head)

    async def commits_since(self, tag: str, repo: str) -> list[Commit]:
        branch = await self.default_branch(repo)
        return await self._compare(repo, tag, branch)

    async def create_release(self, repo: str, tag: str, body: str) -> None:
        """Publish a release for an existing tag."""
        await self._request(
            "POST",
            f"/repos/{repo}/releases",
            json={"tag_name": tag, "name": tag, "body": body},
        )
        logger.info("Created GitHub release %s in %s", tag, repo)

    async def create_next_release_tag(self, repo: str) -> str:
        """Create a release marker tag at the head of the default branch.

        Returns:
            Name of the created tag
        """
        branch = await self.default_branch(repo)
        ref = await self._request("GET", f"/repos/{repo}/git/ref/heads/{branch}")
        sha = ref["object"]["sha"]

        tag = next_release_tag_name(self.tag_prefix, self._clock())
        await self._request(
            "POST",
            f"/repos/{repo}/git/refs",
            json={"ref": f"refs/tags/{tag}", "sha": sha},
        )
        logger.info("Created release tag %s at %s", tag, sha[:7])
        return tag
