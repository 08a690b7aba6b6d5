"""Per-run operation journal.

A release finalize can emit a machine-readable summary of everything it
logged. The journal is an explicit value owned by one workflow call: it is
created by the caller, filled through `JournalConsole`, and returned with the
outcome. Nothing is kept at module level, so repeated runs in one process
(tests, long-lived tools) never share entries.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Literal

from gflow.output.console import ConsoleProtocol, Style

__all__ = ["JournalConsole", "LoggedOperation", "OperationLog", "OperationType"]

OperationType = Literal["info", "warn", "error", "success"]


@dataclass(frozen=True, slots=True)
class LoggedOperation:
    type: OperationType
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"type": self.type, "message": self.message}


def _empty_entries() -> list[LoggedOperation]:
    return []


@dataclass
class OperationLog:
    """Append-only list of logged operations."""

    entries: list[LoggedOperation] = field(default_factory=_empty_entries)

    def append(self, type_: OperationType, message: str) -> None:
        self.entries.append(LoggedOperation(type=type_, message=message))

    def snapshot(self) -> tuple[LoggedOperation, ...]:
        return tuple(self.entries)

    def summary_json(self, *, status: Literal["ok", "error"], branch: str, version: str) -> str:
        """Render the CI summary: status, branch, version and every operation."""
        return json.dumps(
            {
                "status": status,
                "branch": branch,
                "version": version,
                "operations": [e.as_dict() for e in self.entries],
            }
        )


class JournalConsole:
    """Console decorator recording info/warning/error/success lines.

    Plain prints (command echoes, headers) are forwarded but not recorded,
    except dim command lines, which are recorded as info so dry-run plans
    appear in the summary.
    """

    def __init__(self, inner: ConsoleProtocol, log: OperationLog) -> None:
        self._inner = inner
        self.log = log

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        if style == Style.DIM and message:
            self.log.append("info", message)
        self._inner.print(message, style)

    def success(self, message: str) -> None:
        self.log.append("success", message)
        self._inner.success(message)

    def error(self, message: str) -> None:
        self.log.append("error", message)
        self._inner.error(message)

    def warning(self, message: str) -> None:
        self.log.append("warn", message)
        self._inner.warning(message)

    def info(self, message: str) -> None:
        self.log.append("info", message)
        self._inner.info(message)

    def header(self, message: str) -> None:
        self._inner.header(message)

    def newline(self) -> None:
        self._inner.newline()
