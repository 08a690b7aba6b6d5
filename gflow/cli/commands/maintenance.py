"""Repository maintenance commands: init, sync, clone."""

from __future__ import annotations

from pathlib import Path

import typer

from gflow.cli.commands._helpers import exit_on_error, fail, require_gitflow
from gflow.cli.context import build_context
from gflow.core.result import Err
from gflow.flow import maintenance
from gflow.git.adapter import GitAdapter
from gflow.output.console import RichConsole


def init(
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
) -> None:
    """Initialize git-flow with default branch names and prefixes."""
    ctx = build_context(dry_run=dry_run)
    exit_on_error(maintenance.init_gitflow(ctx.repo), ctx)
    if dry_run:
        return
    for key, value in sorted(ctx.repo.config_list().items()):
        ctx.console.print(f"  {key} = {value}")


def sync(
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
    offline: bool = typer.Option(False, "--offline", help="Skip remote operations"),
) -> None:
    """Update main and develop, merge main into develop, push both."""
    ctx = build_context(dry_run=dry_run, offline=offline)
    require_gitflow(ctx)
    exit_on_error(maintenance.sync(ctx.repo), ctx)


def clone(
    url: str = typer.Argument(..., help="Repository URL"),
    directory: Path | None = typer.Argument(None, help="Target directory"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
) -> None:
    """Clone a repository and initialize git-flow in it."""
    console = RichConsole()
    adapter = GitAdapter(root=Path.cwd(), console=console)
    result = maintenance.clone(adapter, url, directory, dry_run=dry_run)
    if isinstance(result, Err):
        fail(result.error, console)
