"""Error payload for branch and release workflows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

FlowErrorKind = Literal[
    "invalid_version_format",
    "version_regression",
    "missing_version_file",
    "dirty_tree",
    "branch_exists",
    "branch_not_found",
    "duplicate_tag",
    "missing_option",
    "ambiguous_branch",
    "subprocess_failure",
    "invalid_branch_name",
    "invalid_input",
    "gitflow_unavailable",
    "gitflow_not_initialized",
    "config_error",
    "io_error",
]


@dataclass(frozen=True, slots=True)
class FlowError:
    """Canonical workflow error.

    `kind` is stable and safe to match on; `message` is the single line shown
    to the operator; `hint` carries details such as captured git stderr.
    """

    kind: FlowErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
