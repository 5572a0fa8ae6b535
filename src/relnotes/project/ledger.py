"""Metadata ledger (meta.json) access.

The ledger is produced by the version bump step. It records, per package,
the version before and after the bump, plus the latest release tag::

    {
      "latestTag": "rel@1717171717",
      "packages": [
        {"name": "cli", "previousVersion": "1.0.0", "newVersion": "1.1.0"}
      ]
    }

Versions are taken verbatim. No version arithmetic happens here.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from relnotes.exceptions import LedgerMalformedError, LedgerUnavailableError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class VersionDelta(BaseModel):
    """One package's version change in a release."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    previous_version: str | None = Field(default=None, alias="previousVersion")
    new_version: str = Field(min_length=1, alias="newVersion")

    @property
    def is_new(self) -> bool:
        return self.previous_version is None


class LedgerDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    latest_tag: str | None = Field(default=None, alias="latestTag")
    packages: list[VersionDelta] = Field(default_factory=list)

    @field_validator("packages")
    @classmethod
    def _unique_names(cls, packages: list[VersionDelta]) -> list[VersionDelta]:
        seen: set[str] = set()
        for package in packages:
            if package.name in seen:
                raise ValueError(f"duplicate package {package.name!r}")
            seen.add(package.name)
        return packages


class MetaLedger:
    """Reader and writer for the meta.json ledger."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read_raw(self) -> dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise LedgerUnavailableError(f"Cannot read metadata ledger {self.path}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise LedgerMalformedError(f"Metadata ledger {self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise LedgerMalformedError(f"Metadata ledger {self.path} must contain a JSON object")
        return data

    def load(self) -> LedgerDocument:
        """Load and validate the ledger.

        Raises:
            LedgerUnavailableError: If the file cannot be read
            LedgerMalformedError: If the content is invalid
        """
        data = self._read_raw()
        try:
            return LedgerDocument.model_validate(data)
        except ValidationError as e:
            raise LedgerMalformedError(f"Metadata ledger {self.path} is malformed: {e}") from e

    def set_latest_tag(self, tag: str) -> None:
        """Record ``tag`` as the latest release tag, keeping all other keys."""
        data = self._read_raw()
        data["latestTag"] = tag
        # Readers only ever see the old or the new file.
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise LedgerUnavailableError(f"Cannot write metadata ledger {self.path}: {e}") from e
        logger.debug("Recorded latest tag %s in %s", tag, self.path)

    async def read_version_deltas(self) -> list[VersionDelta]:
        document = await asyncio.to_thread(self.load)
        return list(document.packages)

    async def write_latest_tag(self, tag: str) -> None:
        await asyncio.to_thread(self.set_latest_tag, tag)
