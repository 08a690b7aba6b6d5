"""Tests for gflow.flow.orchestrator module."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pytest

from gflow.core.config import FlowConfig
from gflow.core.result import Err, Ok, Result
from gflow.flow.model import BranchType, FinalizeOptions, InitOptions, RunMode
from gflow.flow.orchestrator import ReleaseOrchestrator, normalize_release_name
from gflow.flow.version import SemVer
from gflow.git.adapter import GitAdapter
from gflow.git.fake import FakeGit
from gflow.git.repository import GitRepository
from gflow.output.console import MockConsole
from gflow.output.journal import LoggedOperation, OperationLog
from gflow.platform.process import ProcessError

TODAY = date(2026, 10, 18)


@dataclass
class ScriptedPrompter:
    """Answers prompts from fixed values and records what was asked."""

    confirm_answer: bool = True
    text_answer: str = ""
    choice: int | None = 0
    asked: list[str] = field(default_factory=lambda: [])
    offered: list[list[str]] = field(default_factory=lambda: [])

    def confirm(self, message: str, *, default: bool, interactive: bool) -> bool:
        self.asked.append(message)
        return self.confirm_answer if interactive else default

    def text(self, message: str, *, default: str, interactive: bool) -> str:
        self.asked.append(message)
        return self.text_answer if interactive else default

    def choose(self, message: str, options: Sequence[str], *, interactive: bool) -> int | None:
        self.asked.append(message)
        self.offered.append(list(options))
        return self.choice if interactive else None


@dataclass
class CheckoutTreeGit(FakeGit):
    """Rewrites CHANGELOG.md on checkout the way a working tree would."""

    trees: dict[str, str] = field(default_factory=lambda: {})

    def __call__(self, cmd: list[str], *, cwd: Path, stream: bool) -> Result[str, ProcessError]:
        result = super().__call__(cmd, cwd=cwd, stream=stream)
        if cmd[1:2] == ["checkout"] and isinstance(result, Ok):
            (cwd / "CHANGELOG.md").write_text(self.trees.get(self.head, ""), encoding="utf-8")
        return result


@pytest.fixture
def version_file(tmp_path: Path) -> Path:
    path = tmp_path / "version.txt"
    path.write_text("1.9.0\n", encoding="utf-8")
    return path


def test_normalize_release_name() -> None:
    assert normalize_release_name("1.2.0") == "v1.2.0"
    assert normalize_release_name("v1.2.0") == "v1.2.0"


# =============================================================================
# init
# =============================================================================


class TestInitWorkflow:
    def test_minor_bump_end_to_end(
        self, make_repo, fake_git: FakeGit, version_file: Path, tmp_path: Path
    ) -> None:
        fake_git.tags = ["v1.9.0"]
        fake_git.subjects = ["feat: search", "fix: typo"]
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE, bump="minor"))

        assert isinstance(result, Ok)
        outcome = result.value
        assert outcome.branch == "release/v1.10.0"
        assert outcome.version == SemVer(1, 10, 0)
        assert outcome.version_changed and outcome.changelog_changed
        assert "release/v1.10.0" in fake_git.branches
        assert fake_git.ran("flow", "release", "start", "v1.10.0", "develop")
        assert version_file.read_text(encoding="utf-8") == "1.10.0\n"
        assert (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8").startswith(
            "## v1.10.0 - 2026-10-18\n- feat: search\n- fix: typo\n"
        )
        assert fake_git.ran("add", "--", "version.txt", "CHANGELOG.md")
        assert fake_git.commits == ["chore: bump version to 1.10.0 for release"]
        assert LoggedOperation("info", "Current version: 1.9.0 -> 1.10.0") in outcome.operations

    def test_hotfix_defaults_to_patch_from_main(
        self, make_repo, fake_git: FakeGit, version_file: Path
    ) -> None:
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.HOTFIX))

        assert isinstance(result, Ok)
        assert result.value.branch == "hotfix/v1.9.1"
        assert fake_git.ran("flow", "hotfix", "start", "v1.9.1", "main")

    def test_interactive_custom_version(
        self, make_repo, fake_git: FakeGit, version_file: Path
    ) -> None:
        prompter = ScriptedPrompter(confirm_answer=False, text_answer="2.0.0")
        orchestrator = ReleaseOrchestrator(
            make_repo(interactive=True), prompter=prompter, today=TODAY
        )

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE))

        assert isinstance(result, Ok)
        assert result.value.version == SemVer(2, 0, 0)
        assert prompter.asked == ["Use version 1.10.0?", "Enter custom version (x.y.z)"]

    def test_invalid_custom_version(self, make_repo, fake_git: FakeGit, version_file: Path) -> None:
        prompter = ScriptedPrompter(confirm_answer=False, text_answer="2.0")
        orchestrator = ReleaseOrchestrator(make_repo(interactive=True), prompter=prompter)

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE))

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version_format"
        assert fake_git.mutating_calls() == []

    def test_explicit_version_skips_prompt(
        self, make_repo, fake_git: FakeGit, version_file: Path
    ) -> None:
        prompter = ScriptedPrompter()
        orchestrator = ReleaseOrchestrator(make_repo(interactive=True), prompter=prompter)

        result = orchestrator.init_workflow(
            InitOptions(kind=BranchType.RELEASE, version="3.0.0", no_changelog=True)
        )

        assert isinstance(result, Ok)
        assert result.value.branch == "release/v3.0.0"
        assert prompter.asked == []

    def test_regression_rejected(self, make_repo, fake_git: FakeGit, version_file: Path) -> None:
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE, version="1.8.0"))

        assert isinstance(result, Err)
        assert result.error.kind == "version_regression"
        assert fake_git.mutating_calls() == []

    def test_feature_not_versioned(self, make_repo, fake_git: FakeGit) -> None:
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.FEATURE))

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"
        assert fake_git.calls == []

    def test_missing_version_file(self, make_repo, fake_git: FakeGit) -> None:
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE))

        assert isinstance(result, Err)
        assert result.error.kind == "missing_version_file"

    def test_custom_name_normalized(self, make_repo, fake_git: FakeGit, version_file: Path) -> None:
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE, name="1.10.0"))

        assert isinstance(result, Ok)
        assert result.value.branch == "release/v1.10.0"

    def test_existing_branch(self, make_repo, fake_git: FakeGit, version_file: Path) -> None:
        fake_git.branches.add("release/v1.10.0")
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE))

        assert isinstance(result, Err)
        assert result.error.kind == "branch_exists"
        assert fake_git.mutating_calls() == []

    def test_nothing_changed_skips_commit(
        self, make_repo, fake_git: FakeGit, version_file: Path, console: MockConsole
    ) -> None:
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.init_workflow(
            InitOptions(kind=BranchType.RELEASE, version="1.9.0", no_changelog=True)
        )

        assert isinstance(result, Ok)
        assert fake_git.commits == []
        assert console.find("No files were changed")

    def test_push_sets_upstream(self, make_repo, fake_git: FakeGit, version_file: Path) -> None:
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE, push=True))

        assert fake_git.ran("push", "-u", "origin", "release/v1.10.0")

    def test_dry_run_changes_nothing(
        self, make_repo, fake_git: FakeGit, version_file: Path, tmp_path: Path
    ) -> None:
        orchestrator = ReleaseOrchestrator(
            make_repo(dry_run=True), prompter=ScriptedPrompter(), today=TODAY
        )

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE, push=True))

        assert isinstance(result, Ok)
        assert fake_git.mutating_calls() == []
        assert fake_git.branches == {"main", "develop"}
        assert version_file.read_text(encoding="utf-8") == "1.9.0\n"
        assert not (tmp_path / "CHANGELOG.md").exists()
        messages = [op.message for op in result.value.operations]
        assert "[dry-run] git commit -m 'chore: bump version to 1.10.0 for release'" in messages
        assert "Dry-run completed. No changes were applied." in messages

    def test_caller_owned_log(self, make_repo, fake_git: FakeGit, version_file: Path) -> None:
        log = OperationLog()
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        result = orchestrator.init_workflow(InitOptions(kind=BranchType.RELEASE), log)

        assert isinstance(result, Ok)
        assert result.value.operations == log.snapshot()


# =============================================================================
# finalize
# =============================================================================


class TestFinalizeWorkflow:
    def test_single_candidate(
        self, make_repo, fake_git: FakeGit, version_file: Path, tmp_path: Path
    ) -> None:
        version_file.write_text("1.10.0\n", encoding="utf-8")
        fake_git.branches.add("release/v1.10.0")
        fake_git.tags = ["v1.9.0"]
        fake_git.subjects = ["feat: search"]
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        result = orchestrator.finalize_workflow(FinalizeOptions())

        assert isinstance(result, Ok)
        outcome = result.value
        assert outcome.branch == "release/v1.10.0"
        assert outcome.tag == "v1.10.0"
        assert outcome.changelog_changed
        assert fake_git.commits == ["docs: update changelog for v1.10.0"]
        assert fake_git.streamed == [
            [
                "git",
                "flow",
                "release",
                "finish",
                "-T",
                "v1.10.0",
                "-m",
                "Release version 1.10.0",
                "v1.10.0",
            ]
        ]
        assert fake_git.tags == ["v1.9.0", "v1.10.0"]
        assert "release/v1.10.0" not in fake_git.branches
        assert LoggedOperation("success", "Created tag: v1.10.0") in outcome.operations
        assert (tmp_path / "CHANGELOG.md").read_text(encoding="utf-8").startswith(
            "## v1.10.0 - 2026-10-18\n"
        )

    def test_changelog_committed_on_branch(
        self, make_repo, fake_git: FakeGit, version_file: Path
    ) -> None:
        fake_git.branches.add("release/v1.10.0")
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        orchestrator.finalize_workflow(FinalizeOptions())

        commit_index = next(i for i, c in enumerate(fake_git.calls) if c[1] == "commit")
        checkouts = [c for c in fake_git.calls[:commit_index] if c[1] == "checkout"]
        assert checkouts[-1] == ["git", "checkout", "release/v1.10.0"]

    def test_prompt_restricted_to_kind(
        self, make_repo, fake_git: FakeGit, version_file: Path
    ) -> None:
        fake_git.branches |= {"release/v1.2.0", "release/v1.3.0", "hotfix/v1.1.1"}
        prompter = ScriptedPrompter(choice=1)
        orchestrator = ReleaseOrchestrator(
            make_repo(interactive=True), prompter=prompter, today=TODAY
        )

        result = orchestrator.finalize_workflow(FinalizeOptions(kind=BranchType.RELEASE))

        assert isinstance(result, Ok)
        assert prompter.offered == [["release/v1.2.0", "release/v1.3.0"]]
        assert result.value.branch == "release/v1.3.0"

    def test_ambiguous_without_prompt(
        self, make_repo, fake_git: FakeGit, version_file: Path
    ) -> None:
        fake_git.branches |= {"release/v1.10.0", "hotfix/v1.9.1"}
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.finalize_workflow(FinalizeOptions())

        assert isinstance(result, Err)
        assert result.error.kind == "ambiguous_branch"
        assert result.error.hint == "Specify --branch."
        assert fake_git.mutating_calls() == []

    def test_no_candidates(self, make_repo, fake_git: FakeGit, version_file: Path) -> None:
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.finalize_workflow(FinalizeOptions(kind=BranchType.HOTFIX))

        assert isinstance(result, Err)
        assert result.error.kind == "branch_not_found"
        assert result.error.message == "No hotfix branches found"

    def test_explicit_branch_type_mismatch(
        self, make_repo, fake_git: FakeGit, version_file: Path
    ) -> None:
        fake_git.branches.add("hotfix/v1.9.1")
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.finalize_workflow(
            FinalizeOptions(kind=BranchType.RELEASE, branch="hotfix/v1.9.1")
        )

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_branch_without_version(
        self, make_repo, fake_git: FakeGit, version_file: Path
    ) -> None:
        fake_git.branches.add("release/spring")
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.finalize_workflow(FinalizeOptions(branch="release/spring"))

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_duplicate_tag(self, make_repo, fake_git: FakeGit, version_file: Path) -> None:
        fake_git.branches.add("release/v1.9.0")
        fake_git.tags = ["v1.9.0"]
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter())

        result = orchestrator.finalize_workflow(FinalizeOptions())

        assert isinstance(result, Err)
        assert result.error.kind == "duplicate_tag"
        assert fake_git.mutating_calls() == []

    def test_version_mismatch_warns(
        self, make_repo, fake_git: FakeGit, version_file: Path, console: MockConsole
    ) -> None:
        fake_git.branches.add("hotfix/v1.9.1")
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        result = orchestrator.finalize_workflow(FinalizeOptions())

        assert isinstance(result, Ok)
        assert console.find("version.txt says 1.9.0 but branch says 1.9.1")

    def test_existing_section_not_rewritten(
        self, make_repo, fake_git: FakeGit, version_file: Path, tmp_path: Path
    ) -> None:
        version_file.write_text("1.10.0\n", encoding="utf-8")
        changelog_file = tmp_path / "CHANGELOG.md"
        changelog_file.write_text("## v1.10.0 - 2026-10-01\n- feat: a\n", encoding="utf-8")
        fake_git.branches.add("release/v1.10.0")
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        result = orchestrator.finalize_workflow(FinalizeOptions())

        assert isinstance(result, Ok)
        assert not result.value.changelog_changed
        assert fake_git.commits == []
        assert changelog_file.read_text(encoding="utf-8") == "## v1.10.0 - 2026-10-01\n- feat: a\n"

    def test_section_checked_on_finalized_branch(
        self, tmp_path: Path, version_file: Path, console: MockConsole
    ) -> None:
        """develop lacks the section; the release branch already has it."""
        git = CheckoutTreeGit(
            branches={"main", "develop", "release/v1.10.0"},
            trees={"release/v1.10.0": "## v1.10.0 - 2026-10-01\n- feat: a\n"},
        )
        repo = GitRepository(
            GitAdapter(root=tmp_path, console=console, runner=git),
            config=FlowConfig(),
            mode=RunMode(interactive=False),
        )
        orchestrator = ReleaseOrchestrator(repo, prompter=ScriptedPrompter(), today=TODAY)

        result = orchestrator.finalize_workflow(FinalizeOptions())

        assert isinstance(result, Ok)
        assert not result.value.changelog_changed
        assert console.find("CHANGELOG.md already has v1.10.0")
        assert git.commits == []

    def test_tag_and_message_overrides(
        self, make_repo, fake_git: FakeGit, version_file: Path
    ) -> None:
        fake_git.branches.add("release/v1.10.0")
        orchestrator = ReleaseOrchestrator(make_repo(), prompter=ScriptedPrompter(), today=TODAY)

        result = orchestrator.finalize_workflow(
            FinalizeOptions(tag="release-1.10", message="Spring release", no_changelog=True)
        )

        assert isinstance(result, Ok)
        assert result.value.tag == "release-1.10"
        assert fake_git.streamed[0][4:8] == ["-T", "release-1.10", "-m", "Spring release"]

    def test_dry_run(self, make_repo, fake_git: FakeGit, version_file: Path) -> None:
        fake_git.branches.add("release/v1.10.0")
        orchestrator = ReleaseOrchestrator(
            make_repo(dry_run=True), prompter=ScriptedPrompter(), today=TODAY
        )

        result = orchestrator.finalize_workflow(FinalizeOptions(push=True))

        assert isinstance(result, Ok)
        assert fake_git.mutating_calls() == []
        assert fake_git.tags == []
        assert "release/v1.10.0" in fake_git.branches
