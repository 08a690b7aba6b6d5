"""Git repository abstraction.

`GitRepository` wraps a `GitAdapter` with the run-wide switches of one
invocation:

- read probes (status, show-ref, branch --list, describe, log, config --get)
  always execute, even in dry-run, since they never mutate anything
- mutations (checkout, commit, branch -D, git flow ...) are logged instead
  of executed in dry-run
- remote operations (pull, push) are skipped entirely when offline

Usage:
    repo = GitRepository(adapter, config=FlowConfig(), mode=RunMode(dry_run=True))

    match repo.branch_exists("develop"):
        case Ok(True):
            print("develop is there")
        case Ok(False):
            print("develop is missing")
        case Err(e):
            print(e.pretty())
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from gflow.core.config import FlowConfig
from gflow.core.result import Err, Ok, Result
from gflow.flow.errors import FlowError
from gflow.flow.model import RunMode
from gflow.git.adapter import GitAdapter, Tool
from gflow.output.console import ConsoleProtocol

__all__ = [
    "GitRepository",
    "StatusEntry",
    "parse_branch_list",
    "parse_status",
]


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry of `git status --porcelain`.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    def pretty_xy(self) -> str:
        """Format XY with dots for spaces (". M" instead of " M")."""
        return self.xy.replace(" ", ".")


def parse_status(output: str) -> tuple[StatusEntry, ...]:
    """Parse `git status --porcelain` output into entries."""
    entries: list[StatusEntry] = []
    for line in output.splitlines():
        if len(line) < 4:
            continue
        entries.append(StatusEntry(xy=line[:2], path=line[3:]))
    return tuple(entries)


def parse_branch_list(output: str) -> list[str]:
    """Parse `git branch --list` output, dropping current/worktree markers."""
    branches: list[str] = []
    for line in output.splitlines():
        name = line.strip().lstrip("*+").strip()
        if name:
            branches.append(name)
    return branches


class GitRepository:
    """One working copy, driven through the adapter.

    Attributes:
        adapter: Single invocation point for git/git-flow
        config: Branch names, prefixes, tracked files
        mode: dry-run / offline / interactive switches
    """

    def __init__(self, adapter: GitAdapter, *, config: FlowConfig, mode: RunMode) -> None:
        self.adapter = adapter
        self.config = config
        self.mode = mode

    @property
    def root(self) -> Path:
        return self.adapter.root

    @property
    def console(self) -> ConsoleProtocol:
        return self.adapter.console

    @property
    def version_file(self) -> Path:
        return self.root / self.config.files.version

    @property
    def changelog_file(self) -> Path:
        return self.root / self.config.files.changelog

    def with_console(self, console: ConsoleProtocol) -> GitRepository:
        return GitRepository(self.adapter.with_console(console), config=self.config, mode=self.mode)

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    def _probe(self, args: Sequence[str]) -> Result[str | None, FlowError]:
        return self.adapter.invoke(Tool.GIT, args, allow_fail=True)

    def status(self) -> Result[tuple[StatusEntry, ...], FlowError]:
        """Working tree entries; empty when clean."""
        result = self.adapter.invoke(Tool.GIT, ["status", "--porcelain"])
        if isinstance(result, Err):
            return result
        return Ok(parse_status(result.value or ""))

    def ensure_clean_tree(self) -> Result[None, FlowError]:
        """Fail with `dirty_tree` when anything is staged, modified or untracked."""
        status = self.status()
        if isinstance(status, Err):
            return status

        entries = status.value
        if not entries:
            return Ok(None)

        shown = ", ".join(f"{e.pretty_xy()} {e.path}" for e in entries[:5])
        if len(entries) > 5:
            shown += f", ... ({len(entries) - 5} more)"
        return Err(
            FlowError(
                kind="dirty_tree",
                message="Working tree is not clean; commit or stash your changes first",
                hint=shown,
            )
        )

    def require_branch(self, name: str) -> Result[None, FlowError]:
        """Fail with `branch_not_found` when a local branch is missing."""
        exists = self.branch_exists(name)
        if isinstance(exists, Err):
            return exists
        if not exists.value:
            return Err(FlowError(kind="branch_not_found", message=f"Branch {name} does not exist"))
        return Ok(None)

    def branch_exists(self, name: str) -> Result[bool, FlowError]:
        result = self._probe(["show-ref", "--verify", "--quiet", f"refs/heads/{name}"])
        if isinstance(result, Err):
            return result
        return Ok(result.value is not None)

    def tag_exists(self, tag: str) -> Result[bool, FlowError]:
        result = self._probe(["tag", "--list", tag])
        if isinstance(result, Err):
            return result
        listed = (result.value or "").splitlines()
        return Ok(tag in (t.strip() for t in listed))

    def list_branches(self, pattern: str) -> Result[list[str], FlowError]:
        """Local branches matching a glob such as `release/*`."""
        result = self._probe(["branch", "--list", pattern])
        if isinstance(result, Err):
            return result
        return Ok(parse_branch_list(result.value or ""))

    def current_branch(self) -> str | None:
        """Current branch name, None on detached HEAD or error."""
        result = self._probe(["rev-parse", "--abbrev-ref", "HEAD"])
        if isinstance(result, Err) or not result.value or result.value == "HEAD":
            return None
        return result.value

    def last_tag(self) -> str | None:
        """Most recent tag reachable from HEAD, None if there is none."""
        result = self._probe(["describe", "--tags", "--abbrev=0"])
        if isinstance(result, Err):
            return None
        return result.value or None

    def commit_subjects(self, since: str | None) -> list[str]:
        """Subjects of commits in `since..HEAD` (whole history if None)."""
        rev = f"{since}..HEAD" if since else "HEAD"
        result = self._probe(["log", rev, "--pretty=format:%s"])
        if isinstance(result, Err) or not result.value:
            return []
        return [line for line in result.value.splitlines() if line.strip()]

    def config_get(self, key: str) -> str | None:
        result = self._probe(["config", "--get", key])
        if isinstance(result, Err):
            return None
        return result.value or None

    def config_list(self, pattern: str = r"^gitflow\.") -> dict[str, str]:
        """git config entries whose key matches a regex."""
        result = self._probe(["config", "--get-regexp", pattern])
        if isinstance(result, Err) or not result.value:
            return {}
        out: dict[str, str] = {}
        for line in result.value.splitlines():
            key, _, value = line.partition(" ")
            if key:
                out[key] = value.strip()
        return out

    def flow_available(self) -> bool:
        result = self.adapter.invoke(Tool.GIT_FLOW, ["version"], allow_fail=True)
        return isinstance(result, Ok) and result.value is not None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def git(
        self,
        args: Sequence[str],
        *,
        allow_fail: bool = False,
        stream: bool = False,
    ) -> Result[str | None, FlowError]:
        """Run a mutating git command (logged only in dry-run)."""
        return self.adapter.invoke(
            Tool.GIT, args, allow_fail=allow_fail, dry_run=self.mode.dry_run, stream=stream
        )

    def flow(
        self,
        args: Sequence[str],
        *,
        allow_fail: bool = False,
        stream: bool = False,
    ) -> Result[str | None, FlowError]:
        """Run a git-flow command (logged only in dry-run)."""
        return self.adapter.invoke(
            Tool.GIT_FLOW, args, allow_fail=allow_fail, dry_run=self.mode.dry_run, stream=stream
        )

    def checkout(self, branch: str) -> Result[str | None, FlowError]:
        return self.git(["checkout", branch])

    def pull_ff(self, branch: str) -> Result[None, FlowError]:
        """Check out a branch and fast-forward it from the remote.

        Skipped when offline. A refused pull (diverged, no upstream) is
        reported as a warning and the local state is kept.
        """
        if self.mode.offline:
            return Ok(None)

        checkout = self.checkout(branch)
        if isinstance(checkout, Err):
            return checkout

        pulled = self.git(["pull", "--ff-only", self.config.remote, branch], allow_fail=True)
        if isinstance(pulled, Err):
            return pulled
        if pulled.value is None:
            self.console.warning(f"fast-forward pull of {branch} failed; using local state")
        return Ok(None)

    def push(
        self,
        branch: str,
        *,
        set_upstream: bool = False,
        allow_fail: bool = False,
    ) -> Result[bool, FlowError]:
        """Push a branch; Ok(False) when skipped (offline) or allowed to fail."""
        if self.mode.offline:
            self.console.warning(f"offline: skipped push of {branch}")
            return Ok(False)

        args = ["push", self.config.remote, branch]
        if set_upstream:
            args.insert(1, "-u")
        result = self.git(args, allow_fail=allow_fail)
        if isinstance(result, Err):
            return result
        return Ok(result.value is not None)

    def delete_branch(
        self,
        name: str,
        *,
        force: bool,
        allow_fail: bool = False,
    ) -> Result[str | None, FlowError]:
        return self.git(["branch", "-D" if force else "-d", name], allow_fail=allow_fail)

    def add(self, paths: Sequence[Path]) -> Result[str | None, FlowError]:
        rels = [str(p.relative_to(self.root)) if p.is_absolute() else str(p) for p in paths]
        return self.git(["add", "--", *rels])

    def commit(self, message: str) -> Result[str | None, FlowError]:
        return self.git(["commit", "-m", message])

    def merge(self, source: str, target: str) -> Result[None, FlowError]:
        """Merge source into target with a merge commit, streaming output."""
        checkout = self.checkout(target)
        if isinstance(checkout, Err):
            return checkout

        merged = self.git(["merge", source, "--no-ff", "--no-edit"], allow_fail=True, stream=True)
        if isinstance(merged, Err):
            return merged
        if merged.value is None:
            return Err(
                FlowError(
                    kind="subprocess_failure",
                    message=f"Merge of {source} into {target} failed",
                    hint="Resolve conflicts and retry.",
                )
            )
        return Ok(None)

    def stash_push(self, message: str) -> Result[bool, FlowError]:
        """Stash local changes; Ok(True) only when something was stashed."""
        result = self.git(["stash", "push", "--include-untracked", "-m", message])
        if isinstance(result, Err):
            return result
        output = result.value or ""
        return Ok(bool(output) and "No local changes" not in output)

    def stash_pop(self) -> Result[str | None, FlowError]:
        return self.git(["stash", "pop"])

    def config_set(self, key: str, value: str) -> Result[str | None, FlowError]:
        return self.git(["config", key, value])
