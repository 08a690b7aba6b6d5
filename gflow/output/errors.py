"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gflow.core.errors import ErrorCode
from gflow.output.console import Style

if TYPE_CHECKING:
    from gflow.flow.errors import FlowError
    from gflow.output.console import ConsoleProtocol

__all__ = ["flow_error_exit_code", "print_flow_error"]


def print_flow_error(error: FlowError, console: ConsoleProtocol) -> None:
    """Print one prefixed error line, plus the hint dimmed when present."""
    match error.kind:
        case "subprocess_failure" if error.hint:
            console.error(error.message)
            for line in error.hint.splitlines():
                console.print(f"  {line}", Style.DIM)
        case "dirty_tree" if error.hint:
            console.error(error.message)
            console.print(f"changes: {error.hint}", Style.DIM)
        case _:
            console.error(error.message)
            if error.hint:
                console.print(f"hint: {error.hint}", Style.DIM)


def flow_error_exit_code(error: FlowError) -> int:
    """Get exit code for a workflow error. Every kind exits with FAILURE."""
    return int(ErrorCode.FAILURE)
