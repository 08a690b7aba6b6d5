"""Uniform invocation of git and git-flow.

Every repository read and write goes through `GitAdapter.invoke`, which
applies the three execution modes in one place:

- dry_run: the command is logged as `[dry-run] git ...` and never executed;
  the result is `Ok("")` ("success, no data")
- allow_fail: a non-zero exit yields `Ok(None)`, an absence signal for
  probes such as "does this branch exist"
- otherwise a non-zero exit yields `Err(FlowError(kind="subprocess_failure"))`
  carrying the captured stderr; the CLI aborts the run on it

Arguments are passed as lists and never through a shell, so branch names and
tag messages need no quoting.

Usage:
    adapter = GitAdapter(root=Path("."), console=RichConsole())
    match adapter.invoke(Tool.GIT, ["rev-parse", "--abbrev-ref", "HEAD"]):
        case Ok(branch):
            print(branch)
        case Err(e):
            print(e.pretty())
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from enum import StrEnum
from pathlib import Path
from typing import Protocol

from gflow.core.result import Err, Ok, Result
from gflow.flow.errors import FlowError
from gflow.output.console import ConsoleProtocol
from gflow.platform.process import ProcessError, run, run_streaming

__all__ = ["CommandRunner", "GitAdapter", "Tool", "command_line", "default_runner"]


class Tool(StrEnum):
    GIT = "git"
    GIT_FLOW = "git-flow"


def command_line(tool: Tool, args: Sequence[str]) -> list[str]:
    """Build the argv for a tool invocation."""
    if tool is Tool.GIT_FLOW:
        return ["git", "flow", *args]
    return ["git", *args]


class CommandRunner(Protocol):
    def __call__(self, cmd: list[str], *, cwd: Path, stream: bool) -> Result[str, ProcessError]: ...


def default_runner(cmd: list[str], *, cwd: Path, stream: bool) -> Result[str, ProcessError]:
    if stream:
        return run_streaming(cmd, cwd=cwd)
    return run(cmd, cwd=cwd)


class GitAdapter:
    """Runs git/git-flow in one working copy.

    Attributes:
        root: Working directory of every invocation
        console: Receives dry-run lines
    """

    def __init__(
        self,
        root: Path,
        console: ConsoleProtocol,
        runner: CommandRunner = default_runner,
    ) -> None:
        self.root = root
        self.console = console
        self._runner = runner

    def with_console(self, console: ConsoleProtocol) -> GitAdapter:
        """Same working copy and runner, different log sink."""
        return GitAdapter(root=self.root, console=console, runner=self._runner)

    def invoke(
        self,
        tool: Tool,
        args: Sequence[str],
        *,
        allow_fail: bool = False,
        dry_run: bool = False,
        stream: bool = False,
    ) -> Result[str | None, FlowError]:
        """Run one command.

        Args:
            tool: git or git-flow
            args: Arguments after `git` / `git flow`
            allow_fail: Return Ok(None) instead of an error on non-zero exit
            dry_run: Log the command instead of running it
            stream: Pass the child's stdout through to the terminal

        Returns:
            Ok(stdout, trailing whitespace removed), Ok("") in dry-run,
            Ok(None) for an allowed failure, Err(FlowError) for a fatal failure.
        """
        cmd = command_line(tool, args)
        display = shlex.join(cmd)

        if dry_run:
            self.console.info(f"[dry-run] {display}")
            return Ok("")

        result = self._runner(cmd, cwd=self.root, stream=stream)
        if isinstance(result, Ok):
            return Ok(result.value.rstrip())

        if allow_fail:
            return Ok(None)

        e = result.error
        return Err(
            FlowError(
                kind="subprocess_failure",
                message=f"{display} failed (exit {e.returncode})",
                hint=e.stderr.strip() or e.stdout.strip() or None,
            )
        )
