"""In-memory git/git-flow runner for tests.

`FakeGit` plugs into `GitAdapter(runner=...)` and answers the subset of git
and git-flow commands gflow issues, keeping branches, tags, config and
commits in plain Python collections. Every invocation is recorded so tests
can assert on exact argument lists or on the absence of mutating calls.

Usage:
    git = FakeGit(branches={"main", "develop"})
    adapter = GitAdapter(root=tmp_path, console=MockConsole(), runner=git)
    ...
    assert git.ran("flow", "release", "start")
"""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from pathlib import Path

from gflow.core.result import Err, Ok, Result
from gflow.platform.process import ProcessError

__all__ = ["FakeGit"]

_READ_ONLY = ("status", "show-ref", "tag", "rev-parse", "describe", "log")


def _default_config() -> dict[str, str]:
    return {
        "gitflow.branch.master": "main",
        "gitflow.branch.develop": "develop",
        "gitflow.prefix.feature": "feature/",
        "gitflow.prefix.release": "release/",
        "gitflow.prefix.hotfix": "hotfix/",
        "gitflow.prefix.support": "support/",
    }


def _default_branches() -> set[str]:
    return {"main", "develop"}


def _empty_list() -> list[str]:
    return []


def _empty_calls() -> list[list[str]]:
    return []


def _empty_failures() -> dict[tuple[str, ...], str]:
    return {}


@dataclass
class FakeGit:
    branches: set[str] = field(default_factory=_default_branches)
    tags: list[str] = field(default_factory=_empty_list)
    head: str = "develop"
    porcelain: str = ""
    subjects: list[str] = field(default_factory=_empty_list)
    commits: list[str] = field(default_factory=_empty_list)
    config: dict[str, str] = field(default_factory=_default_config)
    flow_installed: bool = True
    failures: dict[tuple[str, ...], str] = field(default_factory=_empty_failures)
    calls: list[list[str]] = field(default_factory=_empty_calls)
    streamed: list[list[str]] = field(default_factory=_empty_calls)

    # ------------------------------------------------------------------
    # Runner protocol
    # ------------------------------------------------------------------

    def __call__(self, cmd: list[str], *, cwd: Path, stream: bool) -> Result[str, ProcessError]:
        self.calls.append(list(cmd))
        if stream:
            self.streamed.append(list(cmd))

        args = cmd[1:]
        for prefix, stderr in self.failures.items():
            if tuple(args[: len(prefix)]) == prefix:
                return self._fail(cmd, stderr)

        if args[:1] == ["flow"]:
            return self._flow(cmd, args[1:])
        if args[:1] == ["-C"]:
            return Ok("")
        return self._git(cmd, args)

    # ------------------------------------------------------------------
    # Assertions helpers
    # ------------------------------------------------------------------

    def ran(self, *prefix: str) -> bool:
        """True if some `git <prefix...>` call was made."""
        return any(tuple(c[1 : 1 + len(prefix)]) == prefix for c in self.calls)

    def calls_starting(self, *prefix: str) -> list[list[str]]:
        return [c for c in self.calls if tuple(c[1 : 1 + len(prefix)]) == prefix]

    def mutating_calls(self) -> list[list[str]]:
        """Calls other than read probes."""
        out: list[list[str]] = []
        for c in self.calls:
            args = c[1:]
            if not args or args[0] in _READ_ONLY:
                continue
            if args[0] == "branch" and "--list" in args:
                continue
            if args[0] == "config" and args[1:2] in (["--get"], ["--get-regexp"]):
                continue
            if args[:2] == ["flow", "version"]:
                continue
            out.append(c)
        return out

    # ------------------------------------------------------------------
    # git
    # ------------------------------------------------------------------

    def _fail(self, cmd: list[str], stderr: str, returncode: int = 1) -> Err[ProcessError]:
        return Err(
            ProcessError(command=tuple(cmd), returncode=returncode, stdout="", stderr=stderr)
        )

    def _git(self, cmd: list[str], args: list[str]) -> Result[str, ProcessError]:
        match args:
            case ["status", "--porcelain"]:
                return Ok(self.porcelain)
            case ["show-ref", "--verify", "--quiet", ref]:
                name = ref.removeprefix("refs/heads/")
                return Ok("") if name in self.branches else self._fail(cmd, "")
            case ["tag", "--list", pattern]:
                return Ok("\n".join(t for t in self.tags if fnmatch.fnmatch(t, pattern)))
            case ["branch", "--list", pattern]:
                lines = [
                    f"{'*' if b == self.head else ' '} {b}"
                    for b in sorted(self.branches)
                    if fnmatch.fnmatch(b, pattern)
                ]
                return Ok("\n".join(lines))
            case ["branch", "-D" | "-d", name]:
                if name not in self.branches:
                    return self._fail(cmd, f"error: branch '{name}' not found.")
                self.branches.discard(name)
                return Ok(f"Deleted branch {name}")
            case ["rev-parse", "--abbrev-ref", "HEAD"]:
                return Ok(self.head)
            case ["describe", "--tags", "--abbrev=0"]:
                if not self.tags:
                    return self._fail(cmd, "fatal: No names found, cannot describe anything.")
                return Ok(self.tags[-1])
            case ["log", _, "--pretty=format:%s"]:
                return Ok("\n".join(self.subjects))
            case ["config", "--get", key]:
                value = self.config.get(key)
                return Ok(value) if value is not None else self._fail(cmd, "")
            case ["config", "--get-regexp", pattern]:
                rx = re.compile(pattern)
                lines = [f"{k} {v}" for k, v in sorted(self.config.items()) if rx.search(k)]
                return Ok("\n".join(lines)) if lines else self._fail(cmd, "")
            case ["config", key, value]:
                self.config[key] = value
                return Ok("")
            case ["checkout", name]:
                if name not in self.branches:
                    return self._fail(cmd, f"error: pathspec '{name}' did not match")
                self.head = name
                return Ok("")
            case ["pull", *_] | ["push", *_] | ["add", *_] | ["merge", *_]:
                return Ok("")
            case ["commit", "-m", message]:
                self.commits.append(message)
                return Ok(f"[{self.head}] {message}")
            case ["stash", "push", *_]:
                if not self.porcelain:
                    return Ok("No local changes to save")
                self.porcelain = ""
                return Ok("Saved working directory and index state")
            case ["stash", "pop"]:
                return Ok("")
            case ["clone", *_]:
                return Ok("")
            case _:
                return self._fail(cmd, f"fake git: unsupported command {' '.join(args)}")

    # ------------------------------------------------------------------
    # git flow
    # ------------------------------------------------------------------

    def _prefix(self, kind: str) -> str:
        return self.config.get(f"gitflow.prefix.{kind}", f"{kind}/")

    def _flow(self, cmd: list[str], args: list[str]) -> Result[str, ProcessError]:
        if not self.flow_installed:
            return self._fail(cmd, "git: 'flow' is not a git command.")

        match args:
            case ["version"]:
                return Ok("1.12.3 (AVH Edition)")
            case ["init", "-d"]:
                self.config.update(_default_config())
                return Ok("")
            case [kind, "start", name, *rest]:
                branch = self._prefix(kind) + name
                if branch in self.branches:
                    return self._fail(cmd, f"Branch '{branch}' already exists.")
                if rest and rest[0] not in self.branches:
                    return self._fail(cmd, f"Base '{rest[0]}' does not exist.")
                self.branches.add(branch)
                self.head = branch
                return Ok(f"Switched to a new branch '{branch}'")
            case [kind, "finish", *rest]:
                name = rest[-1]
                branch = self._prefix(kind) + name
                if branch not in self.branches:
                    return self._fail(cmd, f"Branch '{branch}' does not exist.")
                if "-T" in rest:
                    self.tags.append(rest[rest.index("-T") + 1])
                if "-k" not in rest:
                    self.branches.discard(branch)
                self.head = self.config.get("gitflow.branch.develop", "develop")
                return Ok("")
            case [_, "publish", _]:
                return Ok("")
            case [kind, "track", name]:
                self.branches.add(self._prefix(kind) + name)
                return Ok("")
            case [kind, "delete", *rest]:
                branch = self._prefix(kind) + rest[-1]
                if branch not in self.branches:
                    return self._fail(cmd, f"Branch '{branch}' does not exist.")
                self.branches.discard(branch)
                return Ok("")
            case _:
                return self._fail(cmd, f"fake git-flow: unsupported command {' '.join(args)}")
