"""List command - local branches per type."""

from __future__ import annotations

import typer

from gflow.cli.commands._helpers import exit_on_error, require_gitflow
from gflow.cli.context import build_context
from gflow.flow.lifecycle import BranchLifecycle
from gflow.flow.model import BranchType


def list_branches(
    kind: BranchType | None = typer.Argument(
        None, metavar="[TYPE]", help="Branch type (all types if omitted)"
    ),
) -> None:
    """List local git-flow branches."""
    ctx = build_context()
    require_gitflow(ctx)
    lifecycle = BranchLifecycle(ctx.repo)

    if kind is not None:
        branches = exit_on_error(lifecycle.list_branches(kind), ctx)
        if not branches:
            ctx.console.info(f"No {kind} branches found.")
            return
        ctx.console.success(f"{kind} branches:")
        for branch in branches:
            ctx.console.print(f"  - {branch}")
        return

    grouped = exit_on_error(lifecycle.list_all(), ctx)
    if not any(grouped.values()):
        ctx.console.info("No git-flow branches found.")
        return
    for group, branches in grouped.items():
        if not branches:
            continue
        ctx.console.header(f"{group} branches")
        for branch in branches:
            ctx.console.print(f"  - {branch}")
