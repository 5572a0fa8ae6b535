"""Release tag discovery and tag range resolution.

Release tags are named ``<prefix><key>`` where ``key`` is a run of digits,
typically a unix timestamp (``rel@1717171717``). Tags are ordered by the
integer key, never by tag creation metadata.

::

    rel@100 ---- A ---- B ---- rel@200 ---- C ---- D ---- HEAD
                 └──┬───┘                   └──┬───┘
           between rel@100 and rel@200    since rel@200

In *between* mode (``--new-tag``) the latest tag was just pushed and the
release covers the commits since the tag before it. In *since-head* mode the
latest tag is both the lower bound and the publish target.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from relnotes.exceptions import NoPreviousTagFoundError, NoReleaseTagFoundError

if TYPE_CHECKING:
    from relnotes.vcs.git import GitRepository

logger = logging.getLogger(__name__)


class RangeMode(StrEnum):
    BETWEEN = "between"
    SINCE_HEAD = "since-head"


@dataclass(frozen=True, order=True)
class ReleaseTag:
    """A tag that follows the release naming convention."""

    key: int
    name: str


@dataclass(frozen=True)
class ReleaseRange:
    """The tags bounding one release."""

    base: str
    head: str
    mode: RangeMode

    def describe(self) -> str:
        if self.mode is RangeMode.BETWEEN:
            return f"between {self.base} and {self.head}"
        return f"since {self.head}"


class TagLookup(Protocol):
    async def latest_release_tag(self) -> str | None: ...

    async def previous_release_tag(self) -> str | None: ...


def parse_release_tag(name: str, prefix: str) -> ReleaseTag | None:
    """Parse ``name`` as a release tag, or return None if it is not one."""
    if not name.startswith(prefix):
        return None
    key = name[len(prefix) :]
    if not key.isascii() or not key.isdigit():
        return None
    return ReleaseTag(key=int(key), name=name)


def sort_release_tags(names: Iterable[str], prefix: str) -> list[ReleaseTag]:
    """Return the release tags among ``names``, oldest first."""
    tags = (parse_release_tag(name, prefix) for name in names)
    return sorted(tag for tag in tags if tag is not None)


def next_release_tag_name(prefix: str, now: float) -> str:
    """Name of a new release marker tag for the unix timestamp ``now``."""
    return f"{prefix}{int(now)}"


class GitTagLookup:
    """Release tag lookup backed by the local git repository."""

    def __init__(self, repo: GitRepository, prefix: str) -> None:
        self.repo = repo
        self.prefix = prefix

    def release_tags(self) -> list[ReleaseTag]:
        names = self.repo.list_tags(f"{self.prefix}*")
        tags = sort_release_tags(names, self.prefix)
        logger.debug("Found %d release tag(s) with prefix %r", len(tags), self.prefix)
        return tags

    async def latest_release_tag(self) -> str | None:
        tags = await asyncio.to_thread(self.release_tags)
        return tags[-1].name if tags else None

    async def previous_release_tag(self) -> str | None:
        tags = await asyncio.to_thread(self.release_tags)
        return tags[-2].name if len(tags) >= 2 else None


async def resolve_release_range(lookup: TagLookup, *, new_tag: bool) -> ReleaseRange:
    """Determine the tags bounding the release.

    Args:
        lookup: Release tag lookup
        new_tag: Release a just-pushed tag against its predecessor

    Returns:
        The resolved range

    Raises:
        NoReleaseTagFoundError: If there is no release tag at all
        NoPreviousTagFoundError: In between mode, if the latest tag is the first one
    """
    head = await lookup.latest_release_tag()
    if head is None:
        raise NoReleaseTagFoundError("No release tag found")

    if not new_tag:
        logger.info("Using latest release tag %s", head)
        return ReleaseRange(base=head, head=head, mode=RangeMode.SINCE_HEAD)

    base = await lookup.previous_release_tag()
    if base is None:
        raise NoPreviousTagFoundError(f"No release tag found before {head}")

    logger.info("Releasing %s against previous tag %s", head, base)
    return ReleaseRange(base=base, head=head, mode=RangeMode.BETWEEN)
