"""Core business logic for relnotes.

This module contains the fundamental building blocks:
- Conventional commit classification and grouping
- Release tag ordering and tag range resolution
- Markdown changelog rendering
- Release orchestration
"""

from __future__ import annotations

from relnotes.core.changelog import render_changelog
from relnotes.core.commits import (
    BUCKET_ORDER,
    Bucket,
    ClassifiedCommit,
    CommitType,
    classify_commit,
    classify_commits,
    group_by_scope,
    group_commits,
)
from relnotes.core.release import (
    ReleaseOptions,
    ReleaseOrchestrator,
    ReleaseOutcome,
    ReleaseState,
)
from relnotes.core.tags import (
    GitTagLookup,
    RangeMode,
    ReleaseRange,
    ReleaseTag,
    resolve_release_range,
)

__all__ = [
    # Commits
    "BUCKET_ORDER",
    "Bucket",
    "ClassifiedCommit",
    "CommitType",
    "classify_commit",
    "classify_commits",
    "group_by_scope",
    "group_commits",
    # Tags
    "GitTagLookup",
    "RangeMode",
    "ReleaseRange",
    "ReleaseTag",
    "resolve_release_range",
    # Changelog
    "render_changelog",
    # Release
    "ReleaseOptions",
    "ReleaseOrchestrator",
    "ReleaseOutcome",
    "ReleaseState",
]
