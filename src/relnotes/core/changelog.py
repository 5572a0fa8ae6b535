"""Markdown changelog rendering.

Rendering is a pure function of its inputs: the same groups, deltas and
range always produce byte-identical output, so a dry-run preview shows
exactly what would be published.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from relnotes.core.commits import BUCKET_ORDER, Bucket, ClassifiedCommit, GroupedCommits
from relnotes.core.tags import RangeMode

if TYPE_CHECKING:
    from relnotes.core.tags import ReleaseRange
    from relnotes.project.ledger import VersionDelta

GITHUB_URL = "https://github.com"

BUCKET_TITLES: dict[Bucket, str] = {
    Bucket.BREAKING: "⚠️ Breaking Changes",
    Bucket.FEATURES: "✨ Features",
    Bucket.FIXES: "🐛 Bug Fixes",
    Bucket.PERF: "⚡ Performance",
    Bucket.REFACTOR: "♻️ Refactoring",
    Bucket.REVERT: "⏪ Reverts",
    Bucket.DOCS: "📚 Documentation",
    Bucket.STYLE: "💄 Style",
    Bucket.TEST: "🧪 Tests",
    Bucket.BUILD: "📦 Build",
    Bucket.CI: "🔧 CI",
    Bucket.CHORE: "🔨 Chores",
    Bucket.OTHER: "📝 Other Changes",
}


def format_commit_reference(commit: ClassifiedCommit, repo: str | None = None) -> str:
    """Short SHA, linked to the commit page when ``repo`` is known."""
    short = commit.commit.short_sha
    if repo is None:
        return short
    return f"[{short}]({GITHUB_URL}/{repo}/commit/{commit.sha})"


def format_commit_line(
    commit: ClassifiedCommit,
    repo: str | None = None,
    *,
    include_breaking_note: bool = False,
) -> str:
    """Render one commit as a markdown list item.

    Args:
        commit: Classified commit
        repo: ``owner/name`` for commit links
        include_breaking_note: Add the breaking change footer as a sub-item
    """
    scope = f"**{commit.scope}:** " if commit.scope else ""
    line = f"- {scope}{commit.subject} ({format_commit_reference(commit, repo)})"
    if include_breaking_note and commit.breaking_description:
        note = commit.breaking_description.replace("\n", " ")
        line = f"{line}\n  - {note}"
    return line


def format_version_delta(delta: VersionDelta) -> str:
    if delta.previous_version is None:
        return f"- **{delta.name}**: {delta.new_version} (new)"
    return f"- **{delta.name}**: {delta.previous_version} → {delta.new_version}"


def render_changelog(
    groups: GroupedCommits,
    deltas: Sequence[VersionDelta],
    *,
    release_range: ReleaseRange | None = None,
    repo: str | None = None,
) -> str:
    """Render grouped commits and version deltas as a markdown changelog.

    Sections, in order: title (when a range is given), package updates,
    one section per non-empty bucket in bucket order, then a compare link
    for ranges between two tags when ``repo`` is given.

    Args:
        groups: Output of :func:`~relnotes.core.commits.group_commits`
        deltas: Package version deltas from the ledger
        release_range: Range being released
        repo: ``owner/name``; enables commit and compare links

    Returns:
        Markdown document ending with a single newline
    """
    blocks: list[str] = []

    if release_range is not None:
        blocks.append(f"# {release_range.head}")
        if release_range.mode is RangeMode.BETWEEN:
            blocks.append(f"Changes since {release_range.base}.")

    if deltas:
        lines = ["## 📦 Package Updates", ""]
        lines.extend(format_version_delta(d) for d in deltas)
        blocks.append("\n".join(lines))

    for bucket in BUCKET_ORDER:
        commits = groups.get(bucket, ())
        if not commits:
            continue
        lines = [f"## {BUCKET_TITLES[bucket]}", ""]
        lines.extend(
            format_commit_line(c, repo, include_breaking_note=bucket is Bucket.BREAKING)
            for c in commits
        )
        blocks.append("\n".join(lines))

    if release_range is not None and release_range.mode is RangeMode.BETWEEN and repo:
        compare = f"{GITHUB_URL}/{repo}/compare/{release_range.base}...{release_range.head}"
        blocks.append(f"**Full Changelog**: {compare}")

    return "\n\n".join(blocks) + "\n"
