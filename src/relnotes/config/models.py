"""Pydantic models for the ``[tool.relnotes]`` configuration table."""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

_REPO_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class LedgerConfig(_Section):
    """Location of the metadata ledger written by the bump step."""

    path: Path = Path(".relnotes/meta.json")


class ChangelogConfig(_Section):
    """Changelog rendering options."""

    duplicate_breaking: bool = True
    """List breaking commits under their own type as well as under Breaking Changes."""

    link_commits: bool = True


class GitHubConfig(_Section):
    """GitHub API settings."""

    api_url: str = "https://api.github.com"
    token_env: str = "GITHUB_TOKEN"
    timeout: float = Field(default=30.0, gt=0)


class RelnotesConfig(_Section):
    """Root configuration."""

    repo: str | None = None
    tag_prefix: str = "rel@"
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)

    @field_validator("repo")
    @classmethod
    def _check_repo(cls, value: str | None) -> str | None:
        if value is not None and not _REPO_PATTERN.match(value):
            raise ValueError(f"repo must look like 'owner/name', got {value!r}")
        return value

    @field_validator("tag_prefix")
    @classmethod
    def _check_tag_prefix(cls, value: str) -> str:
        if not value or value[-1].isdigit():
            raise ValueError("tag_prefix must be non-empty and must not end with a digit")
        return value
