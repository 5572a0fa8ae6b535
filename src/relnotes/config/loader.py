"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from relnotes.config.models import RelnotesConfig
from relnotes.exceptions import ConfigNotFoundError, ConfigValidationError

TOOL_NAME = "relnotes"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find the nearest pyproject.toml, searching upwards from ``start``.

    Args:
        start: Directory to start from (defaults to the current directory)

    Returns:
        Path to pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the filesystem root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_relnotes_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.relnotes]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_NAME, {})


def resolve_pyproject_path(path: Path | None = None) -> Path:
    """Return ``path`` if it is a file, else the nearest pyproject.toml above it.

    Relative paths in the configuration are anchored at this file's directory.
    """
    if path is not None and path.is_file():
        return path.resolve()
    return find_pyproject_toml(path)


def load_config(path: Path | None = None) -> RelnotesConfig:
    """Load and validate relnotes configuration.

    Args:
        path: Project directory or pyproject.toml path

    Returns:
        Validated configuration; defaults when the table is absent

    Raises:
        ConfigNotFoundError: If pyproject.toml cannot be found
        ConfigValidationError: If the configuration is invalid
    """
    raw = extract_relnotes_config(load_pyproject_toml(resolve_pyproject_path(path)))

    try:
        return RelnotesConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_NAME}] configuration: {e}") from e
