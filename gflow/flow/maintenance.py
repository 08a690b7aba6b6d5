"""Repository maintenance: git-flow setup, main/develop sync, clone."""

from __future__ import annotations

from pathlib import Path

from gflow.core.result import Err, Ok, Result
from gflow.flow.errors import FlowError
from gflow.git.adapter import GitAdapter, Tool
from gflow.git.repository import GitRepository

GITFLOW_INIT_KEY = "gitflow.branch.master"
SYNC_STASH_MESSAGE = "gflow-sync"

_INSTALL_HINT = "Install git-flow (e.g. `apt install git-flow` or `brew install git-flow-avh`)."


def ensure_gitflow_ready(repo: GitRepository) -> Result[None, FlowError]:
    """git-flow must be installed and initialized in this repository."""
    if not repo.flow_available():
        return Err(
            FlowError(
                kind="gitflow_unavailable",
                message="git-flow is not available",
                hint=_INSTALL_HINT,
            )
        )
    if repo.config_get(GITFLOW_INIT_KEY) is None:
        return Err(
            FlowError(
                kind="gitflow_not_initialized",
                message="git-flow is not initialized in this repository",
                hint="Run `gflow init`.",
            )
        )
    return Ok(None)


def init_gitflow(repo: GitRepository) -> Result[bool, FlowError]:
    """Run `git flow init -d`; Ok(False) when already initialized."""
    if not repo.flow_available():
        return Err(
            FlowError(
                kind="gitflow_unavailable",
                message="git-flow is not available",
                hint=_INSTALL_HINT,
            )
        )

    if repo.config_get(GITFLOW_INIT_KEY) is not None:
        repo.console.info("git-flow is already initialized")
        return Ok(False)

    repo.console.info("Initializing git-flow with default branches...")
    result = repo.flow(["init", "-d"])
    if isinstance(result, Err):
        return result
    repo.console.success("git-flow initialized")
    return Ok(True)


def sync(repo: GitRepository) -> Result[None, FlowError]:
    """Bring main and develop up to date and merge main into develop.

    Local changes are stashed first and restored at the end, and the
    original branch is checked out again.
    """
    console = repo.console
    main = repo.config.branches.main
    develop = repo.config.branches.develop

    for branch in (main, develop):
        present = repo.require_branch(branch)
        if isinstance(present, Err):
            return present

    original = repo.current_branch()
    stashed = repo.stash_push(SYNC_STASH_MESSAGE)
    if isinstance(stashed, Err):
        return stashed

    console.info(f"Using base branch: {main}")
    result = _sync_branches(repo, main, develop)
    if isinstance(result, Err):
        if stashed.value:
            console.warning("Local changes are still stashed; run `git stash pop` when done")
        return result

    if original and original not in (main, develop):
        back = repo.checkout(original)
        if isinstance(back, Err):
            return back

    if stashed.value:
        popped = repo.stash_pop()
        if isinstance(popped, Err):
            return popped

    console.success("Sync complete")
    return Ok(None)


def _sync_branches(repo: GitRepository, main: str, develop: str) -> Result[None, FlowError]:
    for step in (
        lambda: repo.checkout(main),
        lambda: repo.pull_ff(main),
        lambda: _push_best_effort(repo, main),
        lambda: repo.checkout(develop),
        lambda: repo.pull_ff(develop),
        lambda: repo.merge(main, develop),
        lambda: _push_best_effort(repo, develop),
    ):
        result = step()
        if isinstance(result, Err):
            return result
    return Ok(None)


def _push_best_effort(repo: GitRepository, branch: str) -> Result[bool, FlowError]:
    pushed = repo.push(branch, allow_fail=True)
    if isinstance(pushed, Ok) and not pushed.value and not repo.mode.offline:
        repo.console.warning(f"push of {branch} failed; continuing")
    return pushed


def clone_target(url: str) -> str:
    """Directory name `git clone` would pick for a URL."""
    tail = url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    return tail.removesuffix(".git")


def clone(
    adapter: GitAdapter,
    url: str,
    directory: Path | None = None,
    *,
    dry_run: bool = False,
) -> Result[Path, FlowError]:
    """Clone a repository and initialize git-flow in it with defaults."""
    name = str(directory) if directory is not None else clone_target(url)
    if not name:
        return Err(
            FlowError(
                kind="invalid_input",
                message=f"Cannot derive a directory name from {url!r}",
                hint="Pass the target directory explicitly.",
            )
        )

    target = adapter.root / name
    if target.exists() and (not target.is_dir() or any(target.iterdir())):
        return Err(FlowError(kind="invalid_input", message=f"Destination {target} is not empty"))

    adapter.console.info(f"Cloning {url} into {name}...")
    cloned = adapter.invoke(Tool.GIT, ["clone", url, name], dry_run=dry_run, stream=True)
    if isinstance(cloned, Err):
        return cloned

    initialized = adapter.invoke(
        Tool.GIT, ["-C", name, "flow", "init", "-d"], dry_run=dry_run
    )
    if isinstance(initialized, Err):
        return initialized

    adapter.console.success(f"Cloned {url} with git-flow initialized")
    return Ok(target)
