"""Main CLI application entry point."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from monorelease import __version__
from monorelease.cli.commands.release import run_release
from monorelease.config.models import VersionConfig
from monorelease.core.version import ReleaseType, resolve_next_version
from monorelease.exceptions import VersionParseError
from monorelease.log import setup_logging

app = typer.Typer(
    name="monorelease",
    help="Semantic releases for every package in a monorepo.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


@app.command(name="release")
def release(
    path: Optional[str] = typer.Argument(
        None,
        help="Path to the repository (defaults to the current directory)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would be released without changing anything",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to monorelease.toml",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every git command",
    ),
) -> None:
    """
    Release every package that changed since its last tag.

    Requires GIT_COMMITTER_NAME, GIT_COMMITTER_EMAIL and GITHUB_TOKEN
    unless running with --dry-run.
    """
    setup_logging(verbose)
    run_release(
        path=path,
        dry_run=dry_run,
        config_file=config,
        console=console,
        err_console=err_console,
    )


@app.command(name="next-version")
def next_version(
    tag: str = typer.Argument(..., help="Previous release tag, e.g. foo-v1.2.3"),
    release_type: ReleaseType = typer.Argument(..., help="Release severity"),
    prefix: Optional[str] = typer.Option(
        None,
        "--prefix",
        "-p",
        help="Tag prefix (defaults to everything up to the last '-v')",
    ),
) -> None:
    """Print the version that follows TAG for a release of the given type."""
    if prefix is None:
        separator = VersionConfig().tag_separator
        head, found, _ = tag.rpartition(separator)
        prefix = f"{head}{separator}" if found else ""
    try:
        console.print(resolve_next_version(tag, release_type, prefix))
    except VersionParseError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e


@app.command(name="version")
def version() -> None:
    """Print the monorelease version."""
    console.print(f"monorelease {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
