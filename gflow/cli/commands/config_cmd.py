"""Config command - read and write git-flow settings."""

from __future__ import annotations

import typer

from gflow.cli.commands._helpers import exit_on_error, fail, require_gitflow
from gflow.cli.context import build_context
from gflow.flow.errors import FlowError
from gflow.output.console import Style


def config(
    get: str | None = typer.Option(None, "--get", metavar="KEY", help="Print one value"),
    set_: tuple[str, str] | None = typer.Option(
        None, "--set", metavar="KEY VALUE", help="Set a value in git config"
    ),
    list_: bool = typer.Option(False, "--list", help="Show the effective configuration"),
) -> None:
    """Show or change git-flow configuration."""
    ctx = build_context()
    has_set = bool(set_ and all(set_))
    chosen = sum((get is not None, has_set, list_))
    if chosen != 1:
        fail(
            FlowError(
                kind="invalid_input",
                message="Specify exactly one of --get KEY, --set KEY VALUE or --list",
            ),
            ctx.console,
        )

    require_gitflow(ctx)

    if list_:
        cfg = ctx.config
        ctx.console.success("git-flow configuration:")
        ctx.console.print(f"  Main branch:     {cfg.branches.main}")
        ctx.console.print(f"  Develop branch:  {cfg.branches.develop}")
        ctx.console.print(f"  Feature prefix:  {cfg.prefixes.feature}")
        ctx.console.print(f"  Release prefix:  {cfg.prefixes.release}")
        ctx.console.print(f"  Hotfix prefix:   {cfg.prefixes.hotfix}")
        ctx.console.print(f"  Support prefix:  {cfg.prefixes.support}")
        ctx.console.print(f"  Remote:          {cfg.remote}")
        ctx.console.print(f"  Version file:    {cfg.files.version}", Style.DIM)
        ctx.console.print(f"  Changelog file:  {cfg.files.changelog}", Style.DIM)
        return

    if get is not None:
        value = ctx.repo.config_get(get)
        if value is None:
            ctx.console.info(f"Configuration key '{get}' not found.")
        else:
            typer.echo(value)
        return

    assert set_ is not None
    key, value = set_
    exit_on_error(ctx.repo.config_set(key, value), ctx)
    ctx.console.success(f"Set {key} = {value}")
