"""Release and hotfix workflows.

Two phases, each a single call returning an outcome:

init (`release start`):
    clean tree -> read version.txt -> resolve the new version (explicit,
    bumped, or confirmed interactively) -> reject regressions ->
    `git flow <type> start v<version> <base>` -> write version.txt ->
    prepend the changelog section -> commit -> optionally push.

finalize (`release finish`):
    clean tree -> pick the branch (explicit, the only candidate, or a
    numbered choice) -> version from the branch name -> tag must be new ->
    fast-forward pulls -> changelog section committed on the branch ->
    `git flow <type> finish -T v<version> -m ...` -> delete the branch.

Every line logged during a call is recorded in an `OperationLog` owned by
that call (passed in, or created fresh) and returned with the outcome, so
CI can request a JSON summary of exactly one run.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import get_args

from gflow.core.result import Err, Ok, Result
from gflow.flow import changelog, version
from gflow.flow.errors import FlowError
from gflow.flow.lifecycle import BranchLifecycle
from gflow.flow.model import (
    BranchType,
    FinalizeOptions,
    FinishOptions,
    InitOptions,
    ReleaseBump,
    StartOptions,
    branch_type_of,
    validate_branch_name,
)
from gflow.flow.prompts import Prompter, TyperPrompter
from gflow.flow.version import SemVer
from gflow.git.repository import GitRepository
from gflow.output.journal import JournalConsole, LoggedOperation, OperationLog

_DEFAULT_BUMP: dict[BranchType, ReleaseBump] = {
    BranchType.RELEASE: "minor",
    BranchType.HOTFIX: "patch",
}


@dataclass(frozen=True, slots=True)
class InitOutcome:
    branch: str
    version: SemVer
    version_changed: bool
    changelog_changed: bool
    operations: tuple[LoggedOperation, ...]


@dataclass(frozen=True, slots=True)
class FinalizeOutcome:
    branch: str
    version: SemVer
    tag: str
    changelog_changed: bool
    operations: tuple[LoggedOperation, ...]


def _invalid(message: str, hint: str | None = None) -> Err[FlowError]:
    return Err(FlowError(kind="invalid_input", message=message, hint=hint))


def normalize_release_name(name: str) -> str:
    """Release/hotfix branch names always carry the `v` prefix."""
    return name if name.startswith("v") else f"v{name}"


class ReleaseOrchestrator:
    """Composes version, changelog and lifecycle steps into release workflows."""

    def __init__(
        self,
        repo: GitRepository,
        *,
        prompter: Prompter | None = None,
        today: date | None = None,
    ) -> None:
        self._repo = repo
        self._prompter: Prompter = prompter or TyperPrompter()
        self._today = today

    def _journaled(self, log: OperationLog) -> GitRepository:
        return self._repo.with_console(JournalConsole(self._repo.console, log))

    # ------------------------------------------------------------------
    # init
    # ------------------------------------------------------------------

    def init_workflow(
        self,
        opts: InitOptions,
        log: OperationLog | None = None,
    ) -> Result[InitOutcome, FlowError]:
        log = log if log is not None else OperationLog()
        repo = self._journaled(log)
        console = repo.console
        kind = opts.kind

        if not kind.is_versioned:
            return _invalid(f"{kind} branches are not versioned", "Use release or hotfix.")
        if opts.bump is not None and opts.bump not in get_args(ReleaseBump):
            return _invalid(f"Unknown bump kind: {opts.bump!r}", "Use major, minor or patch.")

        clean = repo.ensure_clean_tree()
        if isinstance(clean, Err):
            return clean
        for integration in repo.config.integration_branches:
            present = repo.require_branch(integration)
            if isinstance(present, Err):
                return present

        current = version.read_version_file(repo.version_file)
        if isinstance(current, Err):
            return current

        resolved = self._resolve_version(current.value, opts, interactive=repo.mode.interactive)
        if isinstance(resolved, Err):
            return resolved
        target = resolved.value

        progress = version.ensure_progress(current.value, target)
        if isinstance(progress, Err):
            return progress

        name = normalize_release_name(opts.name) if opts.name else target.to_tag()
        validated = validate_branch_name(kind, name)
        if isinstance(validated, Err):
            return validated
        branch = validated.value.ref(repo.config)

        exists = repo.branch_exists(branch)
        if isinstance(exists, Err):
            return exists
        if exists.value:
            return Err(FlowError(kind="branch_exists", message=f"Branch {branch} already exists"))

        console.info(f"Current version: {current.value} -> {target}")
        base = opts.base or kind.default_base(repo.config)
        started = BranchLifecycle(repo).start(kind, name, StartOptions(base=base, fetch=True))
        if isinstance(started, Err):
            return started

        written = version.write_version_file(
            repo.version_file,
            target,
            dry_run=repo.mode.dry_run,
            console=console,
        )
        if isinstance(written, Err):
            return written
        version_changed = written.value

        changelog_changed = False
        if not opts.no_changelog:
            update = changelog.generate(repo, target, today=self._today)
            if isinstance(update, Err):
                return update
            changelog_changed = update.value.applied

        if repo.mode.dry_run or version_changed or changelog_changed:
            paths = [repo.version_file]
            if repo.changelog_file.exists():
                paths.append(repo.changelog_file)
            added = repo.add(paths)
            if isinstance(added, Err):
                return added
            committed = repo.commit(f"chore: bump version to {target} for {kind}")
            if isinstance(committed, Err):
                return committed
        else:
            console.warning("No files were changed (version/changelog); nothing committed")

        if opts.push:
            pushed = repo.push(branch, set_upstream=True)
            if isinstance(pushed, Err):
                return pushed
            if pushed.value and not repo.mode.dry_run:
                console.success(f"Pushed {branch}")

        if repo.mode.dry_run:
            console.warning("Dry-run completed. No changes were applied.")
        else:
            console.success(f"{kind} initialized: {branch} (version {target})")

        return Ok(
            InitOutcome(
                branch=branch,
                version=target,
                version_changed=version_changed,
                changelog_changed=changelog_changed,
                operations=log.snapshot(),
            )
        )

    def _resolve_version(
        self,
        current: SemVer,
        opts: InitOptions,
        *,
        interactive: bool,
    ) -> Result[SemVer, FlowError]:
        if opts.version:
            return version.validate(opts.version)

        bumped = version.bump(current, opts.bump or _DEFAULT_BUMP[opts.kind])
        if self._prompter.confirm(f"Use version {bumped}?", default=True, interactive=interactive):
            return Ok(bumped)

        custom = self._prompter.text(
            "Enter custom version (x.y.z)",
            default=str(bumped),
            interactive=interactive,
        )
        return version.validate(custom)

    # ------------------------------------------------------------------
    # finalize
    # ------------------------------------------------------------------

    def finalize_workflow(
        self,
        opts: FinalizeOptions,
        log: OperationLog | None = None,
    ) -> Result[FinalizeOutcome, FlowError]:
        log = log if log is not None else OperationLog()
        repo = self._journaled(log)
        console = repo.console
        lifecycle = BranchLifecycle(repo)

        if opts.kind is not None and not opts.kind.is_versioned:
            return _invalid(f"{opts.kind} branches cannot be finalized", "Use release or hotfix.")

        clean = repo.ensure_clean_tree()
        if isinstance(clean, Err):
            return clean
        for integration in repo.config.integration_branches:
            present = repo.require_branch(integration)
            if isinstance(present, Err):
                return present

        detected = self._detect_branch(repo, opts)
        if isinstance(detected, Err):
            return detected
        branch = detected.value

        kind = branch_type_of(branch, repo.config)
        if kind is None or not kind.is_versioned:
            return _invalid(f"Branch {branch} is not a release or hotfix branch")
        if opts.kind is not None and opts.kind is not kind:
            return _invalid(f"Branch {branch} does not match type {opts.kind}")

        target = version.version_from_branch(branch)
        if target is None:
            return _invalid(
                f"Branch {branch} does not carry a version",
                "Name it like release/v1.2.0.",
            )

        on_file = version.read_version_file(repo.version_file)
        match on_file:
            case Ok(file_version) if file_version != target:
                console.warning(
                    f"{repo.version_file.name} says {file_version} but branch says {target}; "
                    f"using {target}"
                )
            case Err(e):
                console.warning(e.message)
            case _:
                pass

        tag = opts.tag or target.to_tag()
        message = opts.message or f"Release version {target}"
        finish_opts = FinishOptions(
            tag=tag,
            message=message,
            push=opts.push,
            keep_branch=opts.keep_branch,
        )
        name = branch.removeprefix(repo.config.prefixes.for_type(kind.value))

        checked = lifecycle.check_finish(kind, name, finish_opts)
        if isinstance(checked, Err):
            return checked
        ref = checked.value

        pulled = lifecycle.pull_for_finish(ref)
        if isinstance(pulled, Err):
            return pulled

        changelog_changed = False
        if opts.no_changelog:
            console.info("Skipping changelog (--no-changelog)")
        else:
            # read and commit on the branch so the section travels through the merge
            checkout = repo.checkout(branch)
            if isinstance(checkout, Err):
                return checkout
            if changelog.has_section(repo.changelog_file, target):
                console.info(f"{repo.changelog_file.name} already has v{target}")
            else:
                update = changelog.generate(repo, target, today=self._today)
                if isinstance(update, Err):
                    return update
                changelog_changed = update.value.applied
                if changelog_changed or repo.mode.dry_run:
                    committed = changelog.commit_changelog(repo, target)
                    if isinstance(committed, Err):
                        return committed

        finished = lifecycle.run_finish(ref, finish_opts)
        if isinstance(finished, Err):
            return finished

        if repo.mode.dry_run:
            console.warning("Dry-run completed. No changes were applied.")
        else:
            console.success(f"{kind} finalized: {branch} (tag {tag})")

        return Ok(
            FinalizeOutcome(
                branch=branch,
                version=target,
                tag=tag,
                changelog_changed=changelog_changed,
                operations=log.snapshot(),
            )
        )

    def _detect_branch(
        self,
        repo: GitRepository,
        opts: FinalizeOptions,
    ) -> Result[str, FlowError]:
        """Resolve the branch to finalize.

        Exactly one candidate is picked automatically; several need either
        `--branch` or an interactive choice.
        """
        if opts.branch:
            present = repo.require_branch(opts.branch)
            if isinstance(present, Err):
                return present
            return Ok(opts.branch)

        kinds = (opts.kind,) if opts.kind is not None else (BranchType.RELEASE, BranchType.HOTFIX)
        candidates: list[str] = []
        for kind in kinds:
            listed = repo.list_branches(f"{repo.config.prefixes.for_type(kind.value)}*")
            if isinstance(listed, Err):
                return listed
            candidates.extend(listed.value)

        label = "/".join(str(k) for k in kinds)
        if not candidates:
            return Err(FlowError(kind="branch_not_found", message=f"No {label} branches found"))
        if len(candidates) == 1:
            return Ok(candidates[0])

        choice = self._prompter.choose(
            f"Select {label} branch to finalize:",
            candidates,
            interactive=repo.mode.interactive,
        )
        if choice is None:
            return Err(
                FlowError(
                    kind="ambiguous_branch",
                    message=f"Multiple {label} branches found: {', '.join(candidates)}",
                    hint="Specify --branch.",
                )
            )
        return Ok(candidates[choice])
