"""Typer application for the relnotes command line."""

from __future__ import annotations

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from relnotes import __version__

app = typer.Typer(
    name="relnotes",
    help="Release notes from conventional commits between release tags.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"relnotes {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """relnotes command line."""


@app.command()
def release(
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-d", help="Print the changelog without creating a release."),
    ] = False,
    new_tag: Annotated[
        bool,
        typer.Option(
            "--new-tag",
            "-n",
            help="Release the tag that was just pushed, diffed against the previous release tag.",
        ),
    ] = False,
    path: Annotated[
        str | None,
        typer.Option("--path", "-p", help="Project directory (defaults to the current one)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """Create a GitHub release with a changelog generated from commits."""
    from relnotes.cli.commands.release import run_release

    _configure_logging(verbose)
    run_release(
        path=path,
        dry_run=dry_run,
        new_tag=new_tag,
        console=console,
        err_console=err_console,
    )


def main() -> None:
    app()
