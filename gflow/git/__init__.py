"""Git access: one adapter for every invocation, one repository facade."""

from gflow.git.adapter import CommandRunner, GitAdapter, Tool, command_line, default_runner
from gflow.git.repository import GitRepository, StatusEntry, parse_branch_list, parse_status

__all__ = [
    "CommandRunner",
    "GitAdapter",
    "GitRepository",
    "StatusEntry",
    "Tool",
    "command_line",
    "default_runner",
    "parse_branch_list",
    "parse_status",
]
