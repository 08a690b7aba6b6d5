from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from gflow.core.config import FlowConfig, apply_git_config, load_project_config
from gflow.core.errors import ErrorCode
from gflow.core.result import Err, Ok, Result
from gflow.flow.errors import FlowError
from gflow.flow.model import RunMode
from gflow.flow.prompts import is_interactive
from gflow.git.adapter import CommandRunner, GitAdapter, default_runner
from gflow.git.repository import GitRepository
from gflow.output.console import ConsoleProtocol, RichConsole
from gflow.output.errors import print_flow_error

REPO_ENV = "GFLOW_REPO"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: FlowConfig
    console: ConsoleProtocol
    repo: GitRepository
    mode: RunMode


def detect_repo_root(start: Path | None = None) -> Result[Path, FlowError]:
    """Find the working copy: $GFLOW_REPO, else the nearest parent with `.git`."""
    env = os.environ.get(REPO_ENV)
    if env:
        root = Path(env).expanduser().resolve()
        if (root / ".git").exists():
            return Ok(root)
        return Err(FlowError(kind="invalid_input", message=f"{root} is not a git repository"))

    cwd = (start or Path.cwd()).resolve()
    for parent in (cwd, *cwd.parents):
        if (parent / ".git").exists():
            return Ok(parent)
    return Err(
        FlowError(
            kind="invalid_input",
            message="Not inside a git repository",
            hint="Run from a working copy or pass --repo PATH.",
        )
    )


def build_context(
    *,
    dry_run: bool = False,
    offline: bool = False,
    yes: bool = False,
    runner: CommandRunner = default_runner,
) -> CLIContext:
    console = RichConsole()

    root_result = detect_repo_root()
    if isinstance(root_result, Err):
        print_flow_error(root_result.error, console)
        raise typer.Exit(code=int(ErrorCode.FAILURE))
    root = root_result.value

    config_result = load_project_config(root)
    if isinstance(config_result, Err):
        error = config_result.error
        print_flow_error(
            FlowError(
                kind="config_error",
                message=f"config error: {error.message}",
                hint=str(error.path) if error.path else None,
            ),
            console,
        )
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    mode = RunMode(dry_run=dry_run, offline=offline, interactive=is_interactive(yes))
    adapter = GitAdapter(root=root, console=console, runner=runner)
    probe = GitRepository(adapter, config=config_result.value, mode=mode)
    config = apply_git_config(config_result.value, probe.config_get)

    return CLIContext(
        root=root,
        config=config,
        console=console,
        repo=GitRepository(adapter, config=config, mode=mode),
        mode=mode,
    )
