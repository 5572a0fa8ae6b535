"""Shared fixtures for relnotes tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path

import pytest

from relnotes.project.ledger import VersionDelta
from relnotes.vcs.git import Commit

CommitFactory = Callable[..., Commit]


def make_commit(message: str, sha: str = "abc1234def5678") -> Commit:
    return Commit(
        sha=sha,
        message=message,
        author_name="Test",
        author_email="test@test.com",
        date=datetime(2024, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def commit_factory() -> CommitFactory:
    return make_commit


@pytest.fixture
def feat_commit() -> Commit:
    return make_commit("feat: add user authentication", sha="feat1234567890")


@pytest.fixture
def fix_commit() -> Commit:
    return make_commit("fix(core): handle empty config", sha="fix12345678901")


@pytest.fixture
def breaking_commit() -> Commit:
    return make_commit(
        "feat(api)!: drop v1 endpoints\n\nBREAKING CHANGE: v1 endpoints are removed",
        sha="brk12345678901",
    )


@pytest.fixture
def sample_commits() -> list[Commit]:
    return [
        make_commit("feat: add login", sha="a000000000001"),
        make_commit("fix(core): fix crash on start", sha="a000000000002"),
        make_commit("docs: update readme", sha="a000000000003"),
        make_commit("chore: bump deps", sha="a000000000004"),
        make_commit("feat(cli)!: rename flags", sha="a000000000005"),
        make_commit("Merge branch 'main'", sha="a000000000006"),
    ]


@pytest.fixture
def temp_project(tmp_path: Path) -> Path:
    """Project directory with a pyproject.toml and a metadata ledger."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.relnotes]
repo = "octo/hello"
tag_prefix = "rel@"
"""
    )
    ledger_dir = tmp_path / ".relnotes"
    ledger_dir.mkdir()
    (ledger_dir / "meta.json").write_text(
        json.dumps(
            {
                "latestTag": "rel@200",
                "packages": [
                    {"name": "cli", "previousVersion": "1.0.0", "newVersion": "1.1.0"},
                ],
            }
        )
    )
    return tmp_path


# =============================================================================
# In-memory collaborators
# =============================================================================


class FakeTagLookup:
    """Tag lookup over a fixed list of tag names, oldest first."""

    def __init__(self, tags: Sequence[str]) -> None:
        self.tags = list(tags)

    async def latest_release_tag(self) -> str | None:
        return self.tags[-1] if self.tags else None

    async def previous_release_tag(self) -> str | None:
        return self.tags[-2] if len(self.tags) >= 2 else None


class FakeCommitSource:
    def __init__(self, commits: Sequence[Commit]) -> None:
        self.commits = list(commits)
        self.calls: list[tuple[str, ...]] = []

    async def commits_between(self, base: str, head: str, repo: str) -> list[Commit]:
        self.calls.append(("between", base, head, repo))
        return self.commits

    async def commits_since(self, tag: str, repo: str) -> list[Commit]:
        self.calls.append(("since", tag, repo))
        return self.commits


class FakeLedger:
    def __init__(
        self,
        deltas: Sequence[VersionDelta] = (),
        error: Exception | None = None,
    ) -> None:
        self.deltas = list(deltas)
        self.error = error
        self.latest_tag: str | None = None
        self.reads = 0

    async def read_version_deltas(self) -> list[VersionDelta]:
        self.reads += 1
        if self.error is not None:
            raise self.error
        return self.deltas

    async def write_latest_tag(self, tag: str) -> None:
        self.latest_tag = tag


class FakePublisher:
    def __init__(
        self,
        next_tag: str = "rel@300",
        release_error: Exception | None = None,
        tag_error: Exception | None = None,
    ) -> None:
        self.next_tag = next_tag
        self.release_error = release_error
        self.tag_error = tag_error
        self.releases: list[tuple[str, str, str]] = []
        self.created_tags: list[str] = []
        self.events: list[str] = []

    async def create_release(self, repo: str, tag: str, body: str) -> None:
        self.events.append("create_release")
        if self.release_error is not None:
            raise self.release_error
        self.releases.append((repo, tag, body))

    async def create_next_release_tag(self, repo: str) -> str:
        self.events.append("create_next_release_tag")
        if self.tag_error is not None:
            raise self.tag_error
        self.created_tags.append(self.next_tag)
        return self.next_tag
