"""Git operations via subprocess.

Only the read side of git is used locally: listing tags and reading the
remote URL. Commits and new tags go through the GitHub API.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from relnotes.exceptions import GitError

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)

_GITHUB_REMOTE = re.compile(
    r"""
    ^(?:
        git@github\.com:                      # ssh shorthand
      | ssh://git@github\.com/
      | https?://(?:[^@/]+@)?github\.com/
    )
    (?P<owner>[^/]+)/(?P<name>[^/]+?)
    (?:\.git)?/?$
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Commit:
    """A commit as fetched from the repository host."""

    sha: str
    message: str
    author_name: str
    author_email: str
    date: datetime

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


def parse_github_repo(url: str) -> str | None:
    """Extract ``owner/name`` from a GitHub remote URL.

    >>> parse_github_repo("git@github.com:octo/hello.git")
    'octo/hello'
    """
    match = _GITHUB_REMOTE.match(url.strip())
    if match is None:
        return None
    return f"{match['owner']}/{match['name']}"


class GitRepository:
    """A local git work tree."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = (path or Path.cwd()).resolve()
        try:
            self._run("rev-parse", "--is-inside-work-tree")
        except GitError as e:
            raise GitError(f"Not a git repository: {self.path}", stderr=e.stderr) from e

    def _run(self, *args: str) -> str:
        cmd = ["git", *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"git {args[0]} failed with exit code {e.returncode}", e.stderr) from e
        return result.stdout.strip()

    def list_tags(self, pattern: str | None = None) -> list[str]:
        """List tag names, optionally filtered by a glob pattern."""
        args = ["tag", "--list"]
        if pattern:
            args.append(pattern)
        output = self._run(*args)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def get_remote_url(self, remote: str = "origin") -> str | None:
        """Return the URL of ``remote``, or None when it is not configured."""
        try:
            return self._run("remote", "get-url", remote) or None
        except GitError:
            logger.debug("Remote %s is not configured", remote)
            return None

    def get_github_repo(self, remote: str = "origin") -> str | None:
        """Return ``owner/name`` when ``remote`` points at GitHub."""
        url = self.get_remote_url(remote)
        return parse_github_repo(url) if url else None
