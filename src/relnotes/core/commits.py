"""Conventional commit classification and grouping.

Classification turns a raw :class:`~relnotes.vcs.git.Commit` into a
:class:`ClassifiedCommit`. It never fails: anything that does not follow
``type(scope)!: subject`` with a known type becomes
:attr:`CommitType.UNRECOGNIZED`, with the first line kept as the subject.

Grouping partitions classified commits into buckets with a fixed order.
A breaking commit always lands in the breaking bucket and, by default, also
in the bucket of its base type.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relnotes.vcs.git import Commit


class CommitType(StrEnum):
    FEAT = "feat"
    FIX = "fix"
    BREAKING = "breaking"
    CHORE = "chore"
    DOCS = "docs"
    REFACTOR = "refactor"
    PERF = "perf"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    STYLE = "style"
    REVERT = "revert"
    UNRECOGNIZED = "unrecognized"


TYPE_ALIASES: dict[str, CommitType] = {
    "feature": CommitType.FEAT,
}

BREAKING_CHANGE_TOKENS = frozenset({"BREAKING CHANGE", "BREAKING-CHANGE"})

_HEADER = re.compile(
    r"""
    ^(?P<type>[A-Za-z][A-Za-z-]*)
    (?:\((?P<scope>[^()\r\n]+)\))?
    (?P<bang>!)?
    :[ \t]*(?P<subject>\S.*)$
    """,
    re.VERBOSE,
)

_FOOTER = re.compile(r"^(?P<token>BREAKING[ -]CHANGE|[A-Za-z][\w-]*)(?::[ \t]|[ \t]#)(?P<value>.*)$")


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit classified by the Conventional Commits convention."""

    type: CommitType
    subject: str
    commit: Commit
    scope: str | None = None
    breaking: bool = False
    breaking_description: str | None = None
    body: str = ""
    footers: tuple[tuple[str, str], ...] = ()

    @property
    def is_conventional(self) -> bool:
        return self.type is not CommitType.UNRECOGNIZED

    @property
    def sha(self) -> str:
        return self.commit.sha


def _match_type(token: str) -> CommitType | None:
    lowered = token.lower()
    if lowered in TYPE_ALIASES:
        return TYPE_ALIASES[lowered]
    try:
        return CommitType(lowered)
    except ValueError:
        return None


def _split_body_and_footers(lines: list[str]) -> tuple[str, tuple[tuple[str, str], ...]]:
    """Split the lines after the header into body text and trailing footers.

    Footers are the last paragraph when its first line is a trailer. Lines
    that do not start a new trailer are continuations of the previous one.
    """
    while lines and not lines[-1].strip():
        lines = lines[:-1]
    while lines and not lines[0].strip():
        lines = lines[1:]
    if not lines:
        return "", ()

    start = len(lines)
    for i in range(len(lines) - 1, -1, -1):
        if not lines[i].strip():
            break
        start = i

    if not _FOOTER.match(lines[start]):
        return "\n".join(lines), ()

    footers: list[list[str]] = []
    for line in lines[start:]:
        match = _FOOTER.match(line)
        if match:
            footers.append([match["token"], match["value"].strip()])
        else:
            footers[-1][1] = f"{footers[-1][1]}\n{line.strip()}".strip()

    body = "\n".join(lines[:start]).strip()
    return body, tuple((token, value) for token, value in footers)


def classify_commit(commit: Commit) -> ClassifiedCommit:
    """Classify a single commit. Total: unparseable messages become unrecognized."""
    header, _, rest = commit.message.partition("\n")
    header = header.strip()
    body, footers = _split_body_and_footers(rest.splitlines())

    breaking_footers = [value for token, value in footers if token in BREAKING_CHANGE_TOKENS]
    has_breaking_footer = bool(breaking_footers)
    breaking_description = next((value for value in breaking_footers if value), None)

    match = _HEADER.match(header)
    commit_type = _match_type(match["type"]) if match else None

    if match is None or commit_type is None:
        return ClassifiedCommit(
            type=CommitType.UNRECOGNIZED,
            subject=header,
            commit=commit,
            breaking=has_breaking_footer or bool(match and match["bang"]),
            breaking_description=breaking_description,
            body=body,
            footers=footers,
        )

    scope = match["scope"].strip() if match["scope"] else None
    breaking = (
        commit_type is CommitType.BREAKING or bool(match["bang"]) or has_breaking_footer
    )

    return ClassifiedCommit(
        type=commit_type,
        subject=match["subject"].strip(),
        commit=commit,
        scope=scope or None,
        breaking=breaking,
        breaking_description=breaking_description,
        body=body,
        footers=footers,
    )


def classify_commits(commits: Iterable[Commit]) -> list[ClassifiedCommit]:
    """Classify commits, preserving their order."""
    return [classify_commit(c) for c in commits]


# =============================================================================
# Grouping
# =============================================================================


class Bucket(StrEnum):
    BREAKING = "breaking"
    FEATURES = "feat"
    FIXES = "fix"
    PERF = "perf"
    REFACTOR = "refactor"
    REVERT = "revert"
    DOCS = "docs"
    STYLE = "style"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    CHORE = "chore"
    OTHER = "other"


# Iteration order of Bucket is the rendering order.
BUCKET_ORDER: tuple[Bucket, ...] = tuple(Bucket)

_TYPE_BUCKETS: dict[CommitType, Bucket | None] = {
    CommitType.FEAT: Bucket.FEATURES,
    CommitType.FIX: Bucket.FIXES,
    CommitType.PERF: Bucket.PERF,
    CommitType.REFACTOR: Bucket.REFACTOR,
    CommitType.REVERT: Bucket.REVERT,
    CommitType.DOCS: Bucket.DOCS,
    CommitType.STYLE: Bucket.STYLE,
    CommitType.TEST: Bucket.TEST,
    CommitType.BUILD: Bucket.BUILD,
    CommitType.CI: Bucket.CI,
    CommitType.CHORE: Bucket.CHORE,
    CommitType.UNRECOGNIZED: Bucket.OTHER,
    # A "breaking:" commit has no base type of its own.
    CommitType.BREAKING: None,
}

GroupedCommits = Mapping[Bucket, tuple[ClassifiedCommit, ...]]


def base_bucket(commit: ClassifiedCommit) -> Bucket | None:
    """Bucket for the commit's type, ignoring its breaking flag."""
    return _TYPE_BUCKETS[commit.type]


def group_commits(
    commits: Iterable[ClassifiedCommit],
    *,
    duplicate_breaking: bool = True,
) -> dict[Bucket, tuple[ClassifiedCommit, ...]]:
    """Partition classified commits into ordered buckets.

    The partition is stable: each bucket keeps the input order. Every bucket
    in :data:`BUCKET_ORDER` is present in the result, empty or not.

    Args:
        commits: Classified commits, in fetch order
        duplicate_breaking: Also list breaking commits under their base type

    Returns:
        Mapping from bucket to commits, iterating in bucket order
    """
    buckets: dict[Bucket, list[ClassifiedCommit]] = {bucket: [] for bucket in BUCKET_ORDER}

    for commit in commits:
        if commit.breaking:
            buckets[Bucket.BREAKING].append(commit)
            if not duplicate_breaking:
                continue
        target = base_bucket(commit)
        if target is not None:
            buckets[target].append(commit)

    return {bucket: tuple(items) for bucket, items in buckets.items()}


def group_by_scope(
    commits: Sequence[ClassifiedCommit],
) -> dict[str | None, list[ClassifiedCommit]]:
    """Sub-group commits by scope, keyed in order of first appearance."""
    grouped: dict[str | None, list[ClassifiedCommit]] = {}
    for commit in commits:
        grouped.setdefault(commit.scope, []).append(commit)
    return grouped


def get_breaking_changes(commits: Iterable[ClassifiedCommit]) -> list[ClassifiedCommit]:
    return [c for c in commits if c.breaking]
