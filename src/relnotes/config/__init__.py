"""Configuration management for relnotes."""

from __future__ import annotations

from relnotes.config.loader import load_config
from relnotes.config.models import (
    ChangelogConfig,
    GitHubConfig,
    LedgerConfig,
    RelnotesConfig,
)

__all__ = [
    "ChangelogConfig",
    "GitHubConfig",
    "LedgerConfig",
    "RelnotesConfig",
    "load_config",
]
