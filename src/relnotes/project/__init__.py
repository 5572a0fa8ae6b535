"""Project metadata on disk."""

from __future__ import annotations

from relnotes.project.ledger import MetaLedger, VersionDelta

__all__ = ["MetaLedger", "VersionDelta"]
