"""Implementation of the 'release' command.

The release command renders release notes for the latest release tag and
either previews them or publishes them as a GitHub release.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule

from relnotes.config import load_config
from relnotes.config.loader import resolve_pyproject_path
from relnotes.core.release import ReleaseOptions, ReleaseOrchestrator, ReleaseOutcome
from relnotes.core.tags import GitTagLookup
from relnotes.exceptions import RelnotesError, ReleaseError
from relnotes.forge.github import GitHubClient
from relnotes.project.ledger import MetaLedger
from relnotes.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from relnotes.config.models import RelnotesConfig


async def _execute(
    config: RelnotesConfig,
    repo: GitRepository,
    repo_ref: str,
    token: str | None,
    ledger: MetaLedger,
    options: ReleaseOptions,
) -> ReleaseOutcome:
    async with GitHubClient(
        token,
        tag_prefix=config.tag_prefix,
        api_url=config.github.api_url,
        timeout=config.github.timeout,
    ) as github:
        orchestrator = ReleaseOrchestrator(
            tags=GitTagLookup(repo, config.tag_prefix),
            commits=github,
            ledger=ledger,
            publisher=github,
            repo=repo_ref,
            duplicate_breaking=config.changelog.duplicate_breaking,
            link_commits=config.changelog.link_commits,
        )
        return await orchestrator.run(options)


def run_release(
    path: str | None,
    dry_run: bool,
    new_tag: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to project directory
        dry_run: Print the changelog instead of publishing
        new_tag: Release the latest tag against the previous one
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    # Load configuration
    try:
        pyproject_path = resolve_pyproject_path(project_path)
        config = load_config(pyproject_path)
    except RelnotesError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    # Initialize git repository
    try:
        repo = GitRepository(project_path)
    except RelnotesError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    repo_ref = config.repo or repo.get_github_repo()
    if repo_ref is None:
        err_console.print(
            "[red]Error:[/] Could not determine the GitHub repository.\n"
            "Set [cyan]repo = \"owner/name\"[/] under [cyan]\\[tool.relnotes][/]."
        )
        raise SystemExit(1)

    token = os.environ.get(config.github.token_env)
    if not dry_run and not token:
        err_console.print(
            f"[red]Error:[/] [cyan]{config.github.token_env}[/] is not set.\n"
            "A token is required to publish a release."
        )
        raise SystemExit(1)

    mode_str = "[yellow]DRY-RUN[/]" if dry_run else "[green]EXECUTING[/]"
    console.print(f"\n{mode_str} - Releasing [cyan]{repo_ref}[/]\n")

    # Relative to the directory holding pyproject.toml.
    ledger = MetaLedger(pyproject_path.parent / config.ledger.path)
    options = ReleaseOptions(dry_run=dry_run, new_tag=new_tag)

    try:
        outcome = asyncio.run(_execute(config, repo, repo_ref, token, ledger, options))
    except ReleaseError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        if e.hint:
            err_console.print(f"   [dim]→ {e.hint}[/]")
        raise SystemExit(1) from e
    except RelnotesError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    if dry_run:
        console.print(f"Release would be published with tag: [cyan]{outcome.range.head}[/]")
        console.print(Rule())
        console.out(outcome.changelog, end="")
        console.print(Rule())
        console.print("\n[green]✓[/] Dry run completed - no release was created")
        return

    console.print(
        Panel(
            f"[green]Published release {outcome.range.head}![/]\n\n"
            f"  • {outcome.commit_count} commit(s) {outcome.range.describe()}\n"
            f"  • Next release tag: [cyan]{outcome.next_tag}[/]",
            title="[green]Release Complete[/]",
            border_style="green",
        )
    )
