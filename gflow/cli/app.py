from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

import typer

from gflow import __version__
from gflow.cli.commands.branch import delete, finish, publish, start, track
from gflow.cli.commands.config_cmd import config
from gflow.cli.commands.list_cmd import list_branches
from gflow.cli.commands.maintenance import clone, init, sync
from gflow.cli.commands.release_cmd import hotfix_app, release_app
from gflow.cli.context import REPO_ENV
from gflow.core.errors import ErrorCode
from gflow.output.console import RichConsole

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    rich_markup_mode="rich",
    help="git-flow branch workflows with version bumps and changelogs.",
)


# Commands
app.command()(start)
app.command()(finish)
app.command()(publish)
app.command()(track)
app.command()(delete)
app.command("list")(list_branches)
app.command()(config)
app.command()(init)
app.command()(sync)
app.command()(clone)

# Sub-apps
app.add_typer(release_app, name="release")
app.add_typer(hotfix_app, name="hotfix")


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository root (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if repo is not None:
        try:
            root = repo.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --repo: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.FAILURE))

        if not (root / ".git").exists():
            typer.echo(f"error: --repo '{root}' is not a git repository", err=True)
            raise typer.Exit(code=int(ErrorCode.FAILURE))

        os.environ[REPO_ENV] = str(root)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def main(argv: Sequence[str] | None = None) -> int:
    """Console entry point; every failure maps to exit code 1."""
    try:
        result = app(args=list(argv) if argv is not None else None, standalone_mode=False)
    except typer.TyperException as e:
        typer.echo(f"Error: {e.format_message()}", err=True)
        return int(ErrorCode.FAILURE)
    except typer.Abort:
        typer.echo("Aborted.", err=True)
        return int(ErrorCode.FAILURE)
    except Exception as e:  # noqa: BLE001
        RichConsole().error(f"Unexpected error: {e}")
        return int(ErrorCode.FAILURE)

    if isinstance(result, int):
        return int(ErrorCode.OK) if result == 0 else int(ErrorCode.FAILURE)
    return int(ErrorCode.OK)
