"""Branch lifecycle: start, finish, publish, track, delete, list.

Each branch moves through

    Missing --start--> Existing --publish/track--> Existing --finish/delete--> Missing

and every transition checks its preconditions before the first mutating
call. The name is validated before the repository is touched at all.

Nothing is rolled back: when a step fails after an earlier mutation
succeeded, the working copy is left as the last successful command made it
and the error says which step failed.
"""

from __future__ import annotations

from gflow.core.config import FlowConfig
from gflow.core.result import Err, Ok, Result
from gflow.flow.errors import FlowError
from gflow.flow.model import (
    BranchRef,
    BranchType,
    DeleteOptions,
    FinishOptions,
    StartOptions,
    validate_branch_name,
)
from gflow.git.repository import GitRepository
from gflow.output.console import ConsoleProtocol


class BranchLifecycle:
    """Drives git-flow branch transitions for one repository."""

    def __init__(self, repo: GitRepository) -> None:
        self._repo = repo

    @property
    def repo(self) -> GitRepository:
        return self._repo

    @property
    def config(self) -> FlowConfig:
        return self._repo.config

    @property
    def console(self) -> ConsoleProtocol:
        return self._repo.console

    # ------------------------------------------------------------------
    # start
    # ------------------------------------------------------------------

    def start(
        self,
        kind: BranchType,
        name: str,
        opts: StartOptions | None = None,
    ) -> Result[BranchRef, FlowError]:
        """Create `<prefix><name>` from its base branch.

        With `force`, an existing local branch of the same name is deleted
        first (local only, unmerged commits are lost).
        """
        opts = opts or StartOptions()
        validated = validate_branch_name(kind, name)
        if isinstance(validated, Err):
            return validated
        ref = validated.value
        branch = ref.ref(self.config)

        clean = self._repo.ensure_clean_tree()
        if isinstance(clean, Err):
            return clean

        base = opts.base or kind.default_base(self.config)
        base_ok = self._repo.require_branch(base)
        if isinstance(base_ok, Err):
            return base_ok

        if opts.fetch and not self._repo.mode.offline:
            self.console.info(f"Fetching {base}...")
            pulled = self._repo.pull_ff(base)
            if isinstance(pulled, Err):
                return pulled

        exists = self._repo.branch_exists(branch)
        if isinstance(exists, Err):
            return exists
        if exists.value:
            if not opts.force:
                return Err(
                    FlowError(
                        kind="branch_exists",
                        message=f"Branch {branch} already exists",
                        hint="Use --force to delete and recreate it.",
                    )
                )
            self.console.warning(f"Force mode: deleting existing branch {branch}")
            deleted = self._repo.delete_branch(branch, force=True, allow_fail=True)
            if isinstance(deleted, Err):
                return deleted

        self.console.info(f"Starting {kind} branch: {branch}")
        started = self._repo.flow([kind.value, "start", ref.name, base])
        if isinstance(started, Err):
            return started

        self.console.success(f"{kind} branch started: {branch}")
        return Ok(ref)

    # ------------------------------------------------------------------
    # finish
    # ------------------------------------------------------------------

    def check_finish(
        self,
        kind: BranchType,
        name: str,
        opts: FinishOptions,
    ) -> Result[BranchRef, FlowError]:
        """Preconditions of `finish`; performs read probes only."""
        validated = validate_branch_name(kind, name)
        if isinstance(validated, Err):
            return validated
        ref = validated.value

        if kind.is_versioned and (not opts.tag or not opts.message):
            return Err(
                FlowError(
                    kind="missing_option",
                    message=f"--tag and --message are required to finish a {kind} branch",
                )
            )

        clean = self._repo.ensure_clean_tree()
        if isinstance(clean, Err):
            return clean

        branch_ok = self._repo.require_branch(ref.ref(self.config))
        if isinstance(branch_ok, Err):
            return branch_ok

        if opts.tag:
            tagged = self._repo.tag_exists(opts.tag)
            if isinstance(tagged, Err):
                return tagged
            if tagged.value:
                return Err(
                    FlowError(
                        kind="duplicate_tag",
                        message=f"Tag {opts.tag} already exists",
                        hint="Bump the version or delete the tag first.",
                    )
                )

        for target in kind.integration_targets(self.config):
            target_ok = self._repo.require_branch(target)
            if isinstance(target_ok, Err):
                return target_ok

        return Ok(ref)

    def pull_for_finish(self, ref: BranchRef) -> Result[None, FlowError]:
        """Fast-forward the branch and its merge targets (skipped offline)."""
        if self._repo.mode.offline:
            self.console.info("Offline: skipping pulls")
            return Ok(None)

        self.console.info("Pulling latest changes...")
        for branch in (ref.ref(self.config), *ref.type.integration_targets(self.config)):
            pulled = self._repo.pull_ff(branch)
            if isinstance(pulled, Err):
                return pulled
        return Ok(None)

    def run_finish(self, ref: BranchRef, opts: FinishOptions) -> Result[None, FlowError]:
        """Invoke `git flow <type> finish` and clean up the local branch."""
        offline = self._repo.mode.offline
        branch = ref.ref(self.config)

        flags: list[str] = []
        if opts.push and not offline:
            flags.append("-p")
        if opts.squash:
            flags.append("--squash")
        if opts.keep_branch:
            flags.append("-k")
        if opts.tag:
            flags.extend(["-T", opts.tag])
        if opts.message:
            flags.extend(["-m", opts.message])

        self.console.info(f"Finishing {ref.type} branch: {branch}")
        finished = self._repo.flow([ref.type.value, "finish", *flags, ref.name], stream=True)
        if isinstance(finished, Err):
            return finished
        self.console.success(f"{ref.type} branch finished: {branch}")

        if opts.push and offline:
            self.console.warning("--push ignored in offline mode")

        if opts.keep_branch:
            self.console.info(f"Keeping branch: {branch}")
        else:
            self.console.info(f"Deleting branch: {branch}")
            # git flow usually deletes the branch itself
            deleted = self._repo.delete_branch(branch, force=True, allow_fail=True)
            if isinstance(deleted, Err):
                return deleted

        if opts.tag:
            self.console.success(f"Created tag: {opts.tag}")
        return Ok(None)

    def finish(
        self,
        kind: BranchType,
        name: str,
        opts: FinishOptions | None = None,
    ) -> Result[BranchRef, FlowError]:
        opts = opts or FinishOptions()
        checked = self.check_finish(kind, name, opts)
        if isinstance(checked, Err):
            return checked
        ref = checked.value

        pulled = self.pull_for_finish(ref)
        if isinstance(pulled, Err):
            return pulled

        finished = self.run_finish(ref, opts)
        if isinstance(finished, Err):
            return finished
        return Ok(ref)

    # ------------------------------------------------------------------
    # publish / track / delete
    # ------------------------------------------------------------------

    def publish(self, kind: BranchType, name: str) -> Result[BranchRef, FlowError]:
        validated = validate_branch_name(kind, name)
        if isinstance(validated, Err):
            return validated
        ref = validated.value
        branch = ref.ref(self.config)

        exists = self._repo.require_branch(branch)
        if isinstance(exists, Err):
            return exists

        self.console.info(f"Publishing {kind} branch: {branch}")
        published = self._repo.flow([kind.value, "publish", ref.name])
        if isinstance(published, Err):
            return published
        self.console.success(f"{kind} branch published: {branch}")
        return Ok(ref)

    def track(self, kind: BranchType, name: str) -> Result[BranchRef, FlowError]:
        validated = validate_branch_name(kind, name)
        if isinstance(validated, Err):
            return validated
        ref = validated.value
        branch = ref.ref(self.config)

        self.console.info(f"Tracking {kind} branch: {branch}")
        tracked = self._repo.flow([kind.value, "track", ref.name])
        if isinstance(tracked, Err):
            return tracked
        self.console.success(f"{kind} branch tracked: {branch}")
        return Ok(ref)

    def delete(
        self,
        kind: BranchType,
        name: str,
        opts: DeleteOptions | None = None,
    ) -> Result[BranchRef, FlowError]:
        opts = opts or DeleteOptions()
        validated = validate_branch_name(kind, name)
        if isinstance(validated, Err):
            return validated
        ref = validated.value
        branch = ref.ref(self.config)

        exists = self._repo.require_branch(branch)
        if isinstance(exists, Err):
            return exists

        args = [kind.value, "delete"]
        if opts.force:
            args.append("-f")
            self.console.warning(f"Force delete: unmerged commits on {branch} may be lost")
        args.append(ref.name)

        self.console.info(f"Deleting {kind} branch: {branch}")
        deleted = self._repo.flow(args)
        if isinstance(deleted, Err):
            return deleted
        self.console.success(f"{kind} branch deleted: {branch}")
        return Ok(ref)

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------

    def list_branches(self, kind: BranchType) -> Result[list[str], FlowError]:
        """Local branches carrying the type's prefix."""
        return self._repo.list_branches(f"{self.config.prefixes.for_type(kind.value)}*")

    def list_all(self) -> Result[dict[BranchType, list[str]], FlowError]:
        out: dict[BranchType, list[str]] = {}
        for kind in BranchType:
            listed = self.list_branches(kind)
            if isinstance(listed, Err):
                return listed
            out[kind] = listed.value
        return Ok(out)
