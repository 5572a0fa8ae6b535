"""Repository hosting services."""

from __future__ import annotations

from relnotes.forge.github import GitHubClient

__all__ = ["GitHubClient"]
