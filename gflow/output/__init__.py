"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)
from .errors import flow_error_exit_code, print_flow_error
from .journal import JournalConsole, LoggedOperation, OperationLog

__all__ = [
    "ConsoleProtocol",
    "JournalConsole",
    "LoggedOperation",
    "MockConsole",
    "OperationLog",
    "OutputRecord",
    "RichConsole",
    "Style",
    "flow_error_exit_code",
    "print_flow_error",
]
