"""Branch lifecycle commands: start, finish, publish, track, delete."""

from __future__ import annotations

import typer

from gflow.cli.commands._helpers import exit_on_error, fail, require_gitflow
from gflow.cli.context import build_context
from gflow.core.result import Err
from gflow.flow.lifecycle import BranchLifecycle
from gflow.flow.model import (
    BranchType,
    DeleteOptions,
    FinishOptions,
    StartOptions,
    validate_branch_name,
)
from gflow.output.console import RichConsole

_TYPE_HELP = "Branch type: feature, release, hotfix or support"


def _validate_first(kind: BranchType, name: str) -> None:
    """Reject a bad name before any repository access."""
    validated = validate_branch_name(kind, name)
    if isinstance(validated, Err):
        fail(validated.error, RichConsole())


def start(
    kind: BranchType = typer.Argument(..., metavar="TYPE", help=_TYPE_HELP),
    name: str = typer.Argument(..., help="Branch name"),
    base: str | None = typer.Option(None, "--base", help="Base branch (default per type)"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Delete an existing local branch of the same name first"
    ),
    fetch: bool = typer.Option(False, "--fetch", help="Fast-forward the base branch first"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
    offline: bool = typer.Option(False, "--offline", help="Skip remote operations"),
) -> None:
    """Start a new branch of the given type."""
    _validate_first(kind, name)
    ctx = build_context(dry_run=dry_run, offline=offline)
    require_gitflow(ctx)

    opts = StartOptions(base=base, force=force, fetch=fetch)
    ref = exit_on_error(BranchLifecycle(ctx.repo).start(kind, name, opts), ctx)
    if not dry_run:
        ctx.console.info(f"Switched to branch: {ref.ref(ctx.config)}")


def finish(
    kind: BranchType = typer.Argument(..., metavar="TYPE", help=_TYPE_HELP),
    name: str = typer.Argument(..., help="Branch name"),
    tag: str | None = typer.Option(None, "--tag", help="Tag name (required for release/hotfix)"),
    message: str | None = typer.Option(
        None, "--message", "-m", help="Tag message (required for release/hotfix)"
    ),
    push: bool = typer.Option(False, "--push", help="Push branches and tags afterwards"),
    squash: bool = typer.Option(False, "--squash", help="Squash commits when merging"),
    keep_branch: bool = typer.Option(False, "--keep-branch", help="Keep the branch"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
    offline: bool = typer.Option(False, "--offline", help="Skip remote operations"),
) -> None:
    """Finish a branch and merge it into its target branches."""
    _validate_first(kind, name)
    ctx = build_context(dry_run=dry_run, offline=offline)
    opts = FinishOptions(
        tag=tag,
        message=message,
        push=push,
        squash=squash,
        keep_branch=keep_branch,
    )
    require_gitflow(ctx)
    exit_on_error(BranchLifecycle(ctx.repo).finish(kind, name, opts), ctx)


def publish(
    kind: BranchType = typer.Argument(..., metavar="TYPE", help=_TYPE_HELP),
    name: str = typer.Argument(..., help="Branch name"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
) -> None:
    """Publish a branch to the remote."""
    _validate_first(kind, name)
    ctx = build_context(dry_run=dry_run)
    require_gitflow(ctx)
    exit_on_error(BranchLifecycle(ctx.repo).publish(kind, name), ctx)


def track(
    kind: BranchType = typer.Argument(..., metavar="TYPE", help=_TYPE_HELP),
    name: str = typer.Argument(..., help="Branch name"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
) -> None:
    """Track a remote branch locally."""
    _validate_first(kind, name)
    ctx = build_context(dry_run=dry_run)
    require_gitflow(ctx)
    exit_on_error(BranchLifecycle(ctx.repo).track(kind, name), ctx)


def delete(
    kind: BranchType = typer.Argument(..., metavar="TYPE", help=_TYPE_HELP),
    name: str = typer.Argument(..., help="Branch name"),
    force: bool = typer.Option(False, "--force", "-f", help="Delete even if not merged"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
) -> None:
    """Delete a branch."""
    _validate_first(kind, name)
    ctx = build_context(dry_run=dry_run)
    require_gitflow(ctx)
    exit_on_error(BranchLifecycle(ctx.repo).delete(kind, name, DeleteOptions(force=force)), ctx)
