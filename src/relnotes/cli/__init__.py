"""Command line interface for relnotes."""

from __future__ import annotations

from relnotes.cli.app import app, main

__all__ = ["app", "main"]
