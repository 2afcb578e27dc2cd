"""Implementation of the 'release' command.

The release command evaluates every package in the repository and, unless
running dry, bumps, tags, releases and publishes the ones that changed.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from monorelease.config import load_config, load_environment
from monorelease.core.release import PackageState, ReleaseDecision, ReleaseOrchestrator
from monorelease.exceptions import MonoreleaseError
from monorelease.hosting import GitHubClient
from monorelease.publish import RegistryPublisher
from monorelease.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

_STATE_STYLES = {
    PackageState.RELEASED: "green",
    PackageState.PLANNED: "cyan",
    PackageState.FAILED: "red",
    PackageState.SKIPPED_PRIVATE: "dim",
    PackageState.NO_SEMANTIC_CHANGE: "yellow",
    PackageState.NO_FILE_CHANGE: "yellow",
}


def run_release(
    path: str | None,
    dry_run: bool,
    config_file: str | None,
    console: Console,
    err_console: Console,
) -> list[ReleaseDecision]:
    """Run the release command.

    Args:
        path: Optional path to the repository
        dry_run: Compute decisions and notes without side effects
        config_file: Explicit path to monorelease.toml
        console: Console for standard output
        err_console: Console for error output

    Returns:
        One decision per discovered package
    """
    project_path = Path(path) if path else Path.cwd()

    # Load configuration
    try:
        config = load_config(Path(config_file) if config_file else project_path)
    except MonoreleaseError as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    # Identity and credentials are only needed for side effects
    environment = None
    if not dry_run:
        try:
            environment = load_environment()
        except MonoreleaseError as e:
            err_console.print(f"[red]Error:[/] {e}")
            raise SystemExit(1) from e

    try:
        repo = GitRepository(
            project_path,
            timeout=config.git.timeout,
            environment=environment,
            remote=config.remote,
        )
        identity = repo.get_identity()
        registry = None
        if config.publish.enabled and not dry_run:
            registry = RegistryPublisher(
                tool=config.publish.tool,
                args=config.publish.args,
                timeout=config.publish.timeout,
            )
    except MonoreleaseError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    host = None
    if environment is not None:
        host = GitHubClient(
            token=environment.token,
            api_url=config.github.api_url,
            timeout=config.github.timeout,
        )

    mode_str = "[yellow]DRY-RUN[/]" if dry_run else "[green]EXECUTING[/]"
    console.print(f"\n{mode_str} - Releasing packages of [cyan]{identity.public_url}[/]\n")

    try:
        orchestrator = ReleaseOrchestrator(
            repo.path,
            config,
            repo,
            identity,
            host,
            registry,
            dry_run=dry_run,
        )
        decisions = orchestrator.run()
    except MonoreleaseError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e
    finally:
        if host is not None:
            host.close()

    console.print(render_summary(decisions))

    if dry_run:
        for decision in decisions:
            if decision.notes:
                console.print(
                    Panel(
                        Markdown(decision.notes),
                        title=f"[cyan]{decision.tag}[/]",
                        border_style="cyan",
                    )
                )
        if any(d.is_release for d in decisions):
            console.print("\n[dim]Run without [cyan]--dry-run[/] to publish these releases.[/]")

    failed = [d for d in decisions if d.state is PackageState.FAILED]
    for decision in failed:
        err_console.print(f"[red]Release of {decision.package.name} failed:[/] {decision.error}")
    if failed:
        raise SystemExit(1)

    if not any(d.is_release for d in decisions):
        console.print("[yellow]No releasable changes found. Nothing to do.[/]")

    return decisions


def render_summary(decisions: list[ReleaseDecision]) -> Table:
    """Build a table with one row per package."""
    table = Table(title="Release summary")
    table.add_column("Package", style="bold")
    table.add_column("State")
    table.add_column("Severity")
    table.add_column("Previous tag")
    table.add_column("Next version")

    for decision in decisions:
        style = _STATE_STYLES[decision.state]
        table.add_row(
            decision.package.name,
            f"[{style}]{decision.state}[/]",
            str(decision.severity) if decision.severity else "-",
            decision.package.last_release_tag or "-",
            decision.next_version or "-",
        )
    return table
