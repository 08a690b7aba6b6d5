"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from gflow.core.result import Err, Result
from gflow.flow.errors import FlowError
from gflow.flow.maintenance import ensure_gitflow_ready
from gflow.output.errors import flow_error_exit_code, print_flow_error

T = TypeVar("T")

if TYPE_CHECKING:
    from gflow.cli.context import CLIContext
    from gflow.output.console import ConsoleProtocol


def fail(error: FlowError, console: ConsoleProtocol) -> NoReturn:
    print_flow_error(error, console)
    raise typer.Exit(code=flow_error_exit_code(error))


def exit_on_error(result: Result[T, FlowError], ctx: CLIContext) -> T:
    """Return the value, or print the error and exit.

    This helper reduces boilerplate for the common pattern:
        match result:
            case Err(e):
                print_flow_error(e, ctx.console)
                raise typer.Exit(code=1)
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        fail(result.error, ctx.console)
    return result.value


def require_gitflow(ctx: CLIContext) -> None:
    """Exit unless git-flow is installed and initialized."""
    exit_on_error(ensure_gitflow_ready(ctx.repo), ctx)
