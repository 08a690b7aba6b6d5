"""Tests for gflow.git.adapter module."""

from __future__ import annotations

from pathlib import Path

from gflow.core.result import Err, Ok
from gflow.git.adapter import GitAdapter, Tool, command_line
from gflow.git.fake import FakeGit
from gflow.output.console import MockConsole


class TestCommandLine:
    def test_git(self) -> None:
        assert command_line(Tool.GIT, ["status"]) == ["git", "status"]

    def test_git_flow(self) -> None:
        assert command_line(Tool.GIT_FLOW, ["release", "start", "v1.0.0"]) == [
            "git",
            "flow",
            "release",
            "start",
            "v1.0.0",
        ]


class TestInvoke:
    """The three execution modes of GitAdapter.invoke."""

    def test_success_strips_trailing_newline(
        self, tmp_path: Path, fake_git: FakeGit, console: MockConsole
    ) -> None:
        adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)

        result = adapter.invoke(Tool.GIT, ["rev-parse", "--abbrev-ref", "HEAD"])

        assert result == Ok("develop")

    def test_keeps_leading_status_columns(
        self, tmp_path: Path, fake_git: FakeGit, console: MockConsole
    ) -> None:
        fake_git.porcelain = " M a.txt\n"
        adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)

        assert adapter.invoke(Tool.GIT, ["status", "--porcelain"]) == Ok(" M a.txt")

    def test_dry_run_logs_and_skips(
        self, tmp_path: Path, fake_git: FakeGit, console: MockConsole
    ) -> None:
        adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)

        result = adapter.invoke(Tool.GIT_FLOW, ["feature", "start", "login"], dry_run=True)

        assert result == Ok("")
        assert fake_git.calls == []
        assert console.messages == ["info: [dry-run] git flow feature start login"]

    def test_dry_run_quotes_arguments(
        self, tmp_path: Path, fake_git: FakeGit, console: MockConsole
    ) -> None:
        adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)

        adapter.invoke(Tool.GIT, ["commit", "-m", "chore: bump version"], dry_run=True)

        assert console.messages == ["info: [dry-run] git commit -m 'chore: bump version'"]

    def test_allow_fail_returns_none(
        self, tmp_path: Path, fake_git: FakeGit, console: MockConsole
    ) -> None:
        adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)

        result = adapter.invoke(
            Tool.GIT, ["show-ref", "--verify", "--quiet", "refs/heads/nope"], allow_fail=True
        )

        assert result == Ok(None)

    def test_fatal_failure_carries_stderr(
        self, tmp_path: Path, fake_git: FakeGit, console: MockConsole
    ) -> None:
        fake_git.failures[("push",)] = "rejected: non-fast-forward\n"
        adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)

        result = adapter.invoke(Tool.GIT, ["push", "origin", "develop"])

        assert isinstance(result, Err)
        assert result.error.kind == "subprocess_failure"
        assert result.error.message == "git push origin develop failed (exit 1)"
        assert result.error.hint == "rejected: non-fast-forward"

    def test_stream_flag_forwarded(
        self, tmp_path: Path, fake_git: FakeGit, console: MockConsole
    ) -> None:
        adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)

        adapter.invoke(Tool.GIT, ["merge", "main", "--no-ff", "--no-edit"], stream=True)

        assert fake_git.streamed == [["git", "merge", "main", "--no-ff", "--no-edit"]]

    def test_with_console_keeps_runner(
        self, tmp_path: Path, fake_git: FakeGit, console: MockConsole
    ) -> None:
        adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)
        other = MockConsole()

        adapter.with_console(other).invoke(Tool.GIT, ["push", "origin", "x"], dry_run=True)

        assert other.messages == ["info: [dry-run] git push origin x"]
        assert console.messages == []
