"""Process exit codes.

Scripts and CI jobs only need to know whether a workflow went through.

- 0: success, or help was displayed
- 1: validation or precondition failure, a fatal git/git-flow failure,
     or an unexpected exception
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands. Values must remain stable."""

    OK = 0
    FAILURE = 1

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
