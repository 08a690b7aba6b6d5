"""Branch types, branch references and per-command option records."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from gflow.core.config import FlowConfig
from gflow.core.result import Err, Ok, Result
from gflow.flow.errors import FlowError

ReleaseBump = Literal["major", "minor", "patch"]

_NAME_RE = re.compile(r"^[\w-]+$")
# release/hotfix branches created by the orchestrator are named after the version
_VERSION_NAME_RE = re.compile(r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


class BranchType(StrEnum):
    FEATURE = "feature"
    RELEASE = "release"
    HOTFIX = "hotfix"
    SUPPORT = "support"

    @property
    def is_versioned(self) -> bool:
        """True for types whose finish creates a tag."""
        return self in (BranchType.RELEASE, BranchType.HOTFIX)

    def default_base(self, config: FlowConfig) -> str:
        """Branch a new branch of this type is created from."""
        if self in (BranchType.HOTFIX, BranchType.SUPPORT):
            return config.branches.main
        return config.branches.develop

    def integration_targets(self, config: FlowConfig) -> tuple[str, ...]:
        """Branches a finish merges into."""
        match self:
            case BranchType.FEATURE:
                return (config.branches.develop,)
            case BranchType.SUPPORT:
                return (config.branches.main,)
            case _:
                return (config.branches.main, config.branches.develop)


@dataclass(frozen=True, slots=True)
class BranchRef:
    type: BranchType
    name: str

    def ref(self, config: FlowConfig) -> str:
        """Full local branch name, e.g. `feature/login`."""
        return f"{config.prefixes.for_type(self.type.value)}{self.name}"


def validate_branch_name(kind: BranchType, name: str) -> Result[BranchRef, FlowError]:
    """Check a short branch name before any repository access.

    Word characters and hyphens only; release/hotfix names may also be a
    version tag name such as `v1.2.0`.
    """
    if _NAME_RE.fullmatch(name):
        return Ok(BranchRef(type=kind, name=name))
    if kind.is_versioned and _VERSION_NAME_RE.fullmatch(name):
        return Ok(BranchRef(type=kind, name=name))
    return Err(
        FlowError(
            kind="invalid_branch_name",
            message=f"Invalid {kind} branch name: {name!r}",
            hint="Use alphanumeric characters, hyphens, and underscores only.",
        )
    )


def branch_type_of(branch: str, config: FlowConfig) -> BranchType | None:
    """Return the branch type whose prefix matches a full branch name."""
    for kind in BranchType:
        if branch.startswith(config.prefixes.for_type(kind.value)):
            return kind
    return None


@dataclass(frozen=True, slots=True)
class RunMode:
    """Run-wide switches shared by every step of one invocation.

    Attributes:
        dry_run: Log mutating commands instead of executing them
        offline: Skip every pull, push and fetch
        interactive: Prompts may block on stdin (False with --yes or CI)
    """

    dry_run: bool = False
    offline: bool = False
    interactive: bool = True


@dataclass(frozen=True, slots=True)
class StartOptions:
    base: str | None = None
    force: bool = False
    fetch: bool = False


@dataclass(frozen=True, slots=True)
class FinishOptions:
    tag: str | None = None
    message: str | None = None
    push: bool = False
    squash: bool = False
    keep_branch: bool = False


@dataclass(frozen=True, slots=True)
class DeleteOptions:
    force: bool = False


@dataclass(frozen=True, slots=True)
class InitOptions:
    """Options for `release|hotfix start`.

    `bump` defaults to patch for hotfix and minor for release; an explicit
    `version` wins over `bump`.
    """

    kind: BranchType
    name: str | None = None
    base: str | None = None
    bump: ReleaseBump | None = None
    version: str | None = None
    push: bool = False
    no_changelog: bool = False


@dataclass(frozen=True, slots=True)
class FinalizeOptions:
    """Options for `release|hotfix finish`.

    With `branch` unset the target is auto-detected among existing
    release/hotfix branches (restricted to `kind` when given).
    """

    kind: BranchType | None = None
    branch: str | None = None
    tag: str | None = None
    message: str | None = None
    push: bool = False
    keep_branch: bool = False
    no_changelog: bool = False
