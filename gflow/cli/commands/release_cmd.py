"""`release` and `hotfix` command groups (start/init, finish/finalize)."""

from __future__ import annotations

from enum import StrEnum

import typer

from gflow.cli.commands._helpers import exit_on_error, fail
from gflow.cli.context import CLIContext, build_context
from gflow.core.result import Err
from gflow.flow.maintenance import ensure_gitflow_ready
from gflow.flow.model import BranchType, FinalizeOptions, InitOptions
from gflow.flow.orchestrator import FinalizeOutcome, InitOutcome, ReleaseOrchestrator
from gflow.output.console import Style
from gflow.output.journal import OperationLog


class Bump(StrEnum):
    major = "major"
    minor = "minor"
    patch = "patch"


def _print_init_summary(ctx: CLIContext, kind: BranchType, outcome: InitOutcome) -> None:
    console = ctx.console
    console.newline()
    console.print(f"Branch created: {outcome.branch}", Style.BOLD)
    console.print(f"Version: {outcome.version}", Style.BOLD)
    console.print(f"Type: {kind}", Style.BOLD)
    console.newline()
    console.print("Next steps:")
    console.print(f"  - Implement and stabilize changes on {outcome.branch}")
    hint = " (after removing --dry-run)" if ctx.mode.dry_run else ""
    console.print(f"  - Finalize with: gflow {kind} finish{hint}")


def _print_finalize_summary(ctx: CLIContext, outcome: FinalizeOutcome) -> None:
    ctx.console.newline()
    ctx.console.print(f"Version: {outcome.version}", Style.BOLD)
    ctx.console.print(f"Branch: {outcome.branch}", Style.BOLD)
    ctx.console.print(f"Tag: {outcome.tag}", Style.BOLD)


def run_init(
    kind: BranchType,
    *,
    name: str | None,
    base: str | None,
    bump: Bump | None,
    version: str | None,
    push: bool,
    no_changelog: bool,
    yes: bool,
    dry_run: bool,
    offline: bool,
) -> None:
    ctx = build_context(dry_run=dry_run, offline=offline, yes=yes)
    exit_on_error(ensure_gitflow_ready(ctx.repo), ctx)

    ctx.console.header(f"{kind.capitalize()} start")
    opts = InitOptions(
        kind=kind,
        name=name,
        base=base,
        bump=bump.value if bump is not None else None,
        version=version,
        push=push,
        no_changelog=no_changelog,
    )
    outcome = exit_on_error(ReleaseOrchestrator(ctx.repo).init_workflow(opts), ctx)
    _print_init_summary(ctx, kind, outcome)


def run_finalize(
    kind: BranchType,
    *,
    branch: str | None,
    tag: str | None,
    message: str | None,
    push: bool,
    keep_branch: bool,
    no_changelog: bool,
    json_summary: bool,
    yes: bool,
    dry_run: bool,
    offline: bool,
) -> None:
    ctx = build_context(dry_run=dry_run, offline=offline, yes=yes)
    log = OperationLog()

    ready = ensure_gitflow_ready(ctx.repo)
    result = (
        ready
        if isinstance(ready, Err)
        else ReleaseOrchestrator(ctx.repo).finalize_workflow(
            FinalizeOptions(
                kind=kind,
                branch=branch,
                tag=tag,
                message=message,
                push=push,
                keep_branch=keep_branch,
                no_changelog=no_changelog,
            ),
            log,
        )
    )

    if isinstance(result, Err):
        if json_summary:
            log.append("error", result.error.message)
            typer.echo(log.summary_json(status="error", branch="", version=""))
        fail(result.error, ctx.console)

    outcome = result.value
    _print_finalize_summary(ctx, outcome)
    if json_summary:
        typer.echo(
            log.summary_json(status="ok", branch=outcome.branch, version=str(outcome.version))
        )


def build_release_app(kind: BranchType) -> typer.Typer:
    """Command group for one versioned branch type."""
    app = typer.Typer(
        add_completion=False,
        invoke_without_command=True,
        help=f"Manage {kind} branches with automatic version bumping.",
    )

    @app.callback()
    def _group(ctx: typer.Context) -> None:  # pyright: ignore[reportUnusedFunction]
        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit(code=0)

    default_bump = "minor" if kind is BranchType.RELEASE else "patch"

    def start(
        name: str | None = typer.Option(None, "--name", help="Branch name (default v<version>)"),
        base: str | None = typer.Option(None, "--base", help="Base branch"),
        bump: Bump | None = typer.Option(
            None, "--bump", help=f"Version bump (default {default_bump})"
        ),
        version: str | None = typer.Option(None, "--version", help="Explicit version x.y.z"),
        push: bool = typer.Option(False, "--push", help="Push the new branch"),
        no_changelog: bool = typer.Option(
            False, "--no-changelog", help="Skip the changelog update"
        ),
        yes: bool = typer.Option(False, "--yes", "-y", help="Non-interactive mode"),
        dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
        offline: bool = typer.Option(False, "--offline", help="Skip remote operations"),
    ) -> None:
        """Create the branch, bump version.txt and note the changelog."""
        run_init(
            kind,
            name=name,
            base=base,
            bump=bump,
            version=version,
            push=push,
            no_changelog=no_changelog,
            yes=yes,
            dry_run=dry_run,
            offline=offline,
        )

    def finish(
        branch: str | None = typer.Option(
            None, "--branch", help="Branch to finalize (auto-detected if omitted)"
        ),
        tag: str | None = typer.Option(None, "--tag", help="Tag name (default v<version>)"),
        message: str | None = typer.Option(
            None, "--message", "-m", help="Tag message (default 'Release version <version>')"
        ),
        push: bool = typer.Option(False, "--push", help="Push branches and tags"),
        keep_branch: bool = typer.Option(False, "--keep-branch", help="Keep the branch"),
        no_changelog: bool = typer.Option(
            False, "--no-changelog", help="Skip the changelog update"
        ),
        json_summary: bool = typer.Option(False, "--json", help="Print a JSON summary"),
        yes: bool = typer.Option(False, "--yes", "-y", help="Non-interactive mode"),
        dry_run: bool = typer.Option(False, "--dry-run", help="Print actions without executing"),
        offline: bool = typer.Option(False, "--offline", help="Skip remote operations"),
    ) -> None:
        """Merge, tag, update the changelog and clean up the branch."""
        run_finalize(
            kind,
            branch=branch,
            tag=tag,
            message=message,
            push=push,
            keep_branch=keep_branch,
            no_changelog=no_changelog,
            json_summary=json_summary,
            yes=yes,
            dry_run=dry_run,
            offline=offline,
        )

    app.command("start")(start)
    app.command("init", help="Alias of start.")(start)
    app.command("finish")(finish)
    app.command("finalize", help="Alias of finish.")(finish)
    return app


release_app = build_release_app(BranchType.RELEASE)
hotfix_app = build_release_app(BranchType.HOTFIX)
