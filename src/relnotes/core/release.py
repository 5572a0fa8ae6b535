"""Release orchestration.

A release run is a strictly sequential state machine::

    RESOLVING_RANGE -> FETCHING_COMMITS -> CLASSIFYING -> LOADING_LEDGER
        -> RENDERING -> PREVIEWING                        (dry run)
                     -> PUBLISHING -> ADVANCING -> DONE    (wet run)

Any failure moves the run to FAILED and re-raises. Later steps never run,
so a render failure cannot reach publishing and a publish failure cannot
advance the release tag. External calls are awaited one at a time and are
never retried here.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from relnotes.core.changelog import render_changelog
from relnotes.core.commits import classify_commits, group_commits
from relnotes.core.tags import RangeMode, resolve_release_range
from relnotes.exceptions import (
    NoCommitsInRangeError,
    PublishFailedError,
    ReleaseError,
    TagAdvanceFailedError,
)

if TYPE_CHECKING:
    from relnotes.core.tags import ReleaseRange, TagLookup
    from relnotes.project.ledger import VersionDelta
    from relnotes.vcs.git import Commit

logger = logging.getLogger(__name__)


class ReleaseState(StrEnum):
    RESOLVING_RANGE = "resolving-range"
    FETCHING_COMMITS = "fetching-commits"
    CLASSIFYING = "classifying"
    LOADING_LEDGER = "loading-ledger"
    RENDERING = "rendering"
    PUBLISHING = "publishing"
    PREVIEWING = "previewing"
    ADVANCING = "advancing"
    DONE = "done"
    FAILED = "failed"


class CommitSource(Protocol):
    async def commits_between(self, base: str, head: str, repo: str) -> Sequence[Commit]: ...

    async def commits_since(self, tag: str, repo: str) -> Sequence[Commit]: ...


class VersionLedger(Protocol):
    async def read_version_deltas(self) -> Sequence[VersionDelta]: ...

    async def write_latest_tag(self, tag: str) -> None: ...


class ReleasePublisher(Protocol):
    async def create_release(self, repo: str, tag: str, body: str) -> None: ...

    async def create_next_release_tag(self, repo: str) -> str: ...


@dataclass(frozen=True)
class ReleaseOptions:
    dry_run: bool = False
    new_tag: bool = False


@dataclass(frozen=True)
class ReleaseOutcome:
    """Result of a successful run (published or previewed)."""

    range: ReleaseRange
    changelog: str
    commit_count: int
    state: ReleaseState
    next_tag: str | None = None

    @property
    def published(self) -> bool:
        return self.state is ReleaseState.DONE


@dataclass
class ReleaseOrchestrator:
    """Sequences one release run over the given collaborators.

    ``repo`` is the ``owner/name`` reference passed to every remote call.
    """

    tags: TagLookup
    commits: CommitSource
    ledger: VersionLedger
    publisher: ReleasePublisher
    repo: str
    duplicate_breaking: bool = True
    link_commits: bool = True
    state: ReleaseState = field(default=ReleaseState.RESOLVING_RANGE, init=False)
    history: list[ReleaseState] = field(default_factory=list, init=False)
    failed_at: ReleaseState | None = field(default=None, init=False)

    def _enter(self, state: ReleaseState) -> None:
        self.state = state
        self.history.append(state)
        logger.info("Release step: %s", state)

    async def run(self, options: ReleaseOptions) -> ReleaseOutcome:
        """Run the release.

        Raises:
            ReleaseError: Subclass naming the failed precondition
            RelnotesError: Collaborator failures such as GitHub or git errors
        """
        if self.history:
            raise RuntimeError("ReleaseOrchestrator instances are single-use")

        mode = "DRY RUN" if options.dry_run else "WET RUN"
        logger.info("Starting release for %s (%s)", self.repo, mode)
        try:
            return await self._run(options)
        except Exception:
            self.failed_at = self.state
            self._enter(ReleaseState.FAILED)
            logger.debug("Release failed while %s", self.failed_at)
            raise

    async def _run(self, options: ReleaseOptions) -> ReleaseOutcome:
        self._enter(ReleaseState.RESOLVING_RANGE)
        release_range = await resolve_release_range(self.tags, new_tag=options.new_tag)

        self._enter(ReleaseState.FETCHING_COMMITS)
        commits = await self._fetch_commits(release_range)
        if not commits:
            raise NoCommitsInRangeError(f"No commits found {release_range.describe()}")
        logger.info("Found %d commit(s) %s", len(commits), release_range.describe())

        self._enter(ReleaseState.CLASSIFYING)
        groups = group_commits(
            classify_commits(commits),
            duplicate_breaking=self.duplicate_breaking,
        )

        self._enter(ReleaseState.LOADING_LEDGER)
        deltas = await self.ledger.read_version_deltas()
        logger.info("Loaded version data for %d package(s)", len(deltas))

        self._enter(ReleaseState.RENDERING)
        changelog = render_changelog(
            groups,
            deltas,
            release_range=release_range,
            repo=self.repo if self.link_commits else None,
        )

        if options.dry_run:
            self._enter(ReleaseState.PREVIEWING)
            return ReleaseOutcome(
                range=release_range,
                changelog=changelog,
                commit_count=len(commits),
                state=self.state,
            )

        self._enter(ReleaseState.PUBLISHING)
        try:
            await self.publisher.create_release(self.repo, release_range.head, changelog)
        except ReleaseError:
            raise
        except Exception as e:
            raise PublishFailedError(f"Failed to publish release {release_range.head}: {e}") from e

        self._enter(ReleaseState.ADVANCING)
        try:
            next_tag = await self.publisher.create_next_release_tag(self.repo)
        except ReleaseError:
            raise
        except Exception as e:
            raise TagAdvanceFailedError(f"Failed to create the next release tag: {e}") from e
        await self.ledger.write_latest_tag(next_tag)

        self._enter(ReleaseState.DONE)
        return ReleaseOutcome(
            range=release_range,
            changelog=changelog,
            commit_count=len(commits),
            state=self.state,
            next_tag=next_tag,
        )

    async def _fetch_commits(self, release_range: ReleaseRange) -> Sequence[Commit]:
        if release_range.mode is RangeMode.BETWEEN:
            return await self.commits.commits_between(
                release_range.base, release_range.head, self.repo
            )
        return await self.commits.commits_since(release_range.head, self.repo)
