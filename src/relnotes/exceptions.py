"""Exception hierarchy for relnotes.

Every error raised on purpose by relnotes derives from :class:`RelnotesError`.
Release errors additionally carry a ``hint`` naming the action an operator
can take to fix the missing precondition.
"""

from __future__ import annotations


class RelnotesError(Exception):
    """Base class for all relnotes errors."""


# -- Configuration ------------------------------------------------------------


class ConfigError(RelnotesError):
    """Configuration could not be loaded or is invalid."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml was found."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


# -- External systems ---------------------------------------------------------


class GitError(RelnotesError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        if self.stderr:
            return f"{super().__str__()}: {self.stderr.strip()}"
        return super().__str__()


class GitHubError(RelnotesError):
    """A GitHub API request failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# -- Release pipeline ---------------------------------------------------------


class ReleaseError(RelnotesError):
    """A release run cannot continue."""

    hint: str = ""

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        if hint is not None:
            self.hint = hint


class NoReleaseTagFoundError(ReleaseError):
    """No tag matching the release tag naming convention exists."""

    hint = "Create and push a release tag first"


class NoPreviousTagFoundError(ReleaseError):
    """The latest release tag has no predecessor to diff against."""

    hint = "Cannot create a release for the first tag"


class NoCommitsInRangeError(ReleaseError):
    """The resolved tag range contains no commits."""

    hint = "Cannot create a release without commits"


class LedgerError(ReleaseError):
    """Base class for metadata ledger errors."""


class LedgerUnavailableError(LedgerError):
    """The metadata ledger could not be read or written."""

    hint = "Run the version bump step to generate the metadata ledger"


class LedgerMalformedError(LedgerError):
    """The metadata ledger exists but its content is invalid."""

    hint = "Fix or regenerate the metadata ledger"


class PublishFailedError(ReleaseError):
    """Creating the hosted release failed."""

    hint = "Check the GitHub token permissions and that the tag is pushed"


class TagAdvanceFailedError(ReleaseError):
    """Creating the next release marker tag failed."""

    hint = "The release was published; create the next release tag manually"
