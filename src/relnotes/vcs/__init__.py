"""Version control system access."""

from __future__ import annotations

from relnotes.vcs.git import Commit, GitRepository, parse_github_repo

__all__ = ["Commit", "GitRepository", "parse_github_repo"]
