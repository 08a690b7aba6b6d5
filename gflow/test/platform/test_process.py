"""Tests for gflow.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from gflow.core.result import Err, Ok
from gflow.platform.process import ProcessError, run, run_streaming


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "flow", "release", "finish", "-T", "v1.0.0", "v1.0.0"),
            returncode=128,
            stdout="",
            stderr="error",
        )
        assert str(error) == "git flow release ... failed (exit 128)"

    def test_frozen(self) -> None:
        error = ProcessError(("git",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    """Test run function."""

    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(42)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert "boom" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert Path(result.value.strip()).resolve() == tmp_path.resolve()


class TestRunStreaming:
    """Test run_streaming function."""

    def test_success_returns_empty(self, tmp_path: Path) -> None:
        result = run_streaming([sys.executable, "-c", "print('streamed')"], cwd=tmp_path)

        assert result == Ok("")

    def test_failure_captures_stderr(self, tmp_path: Path) -> None:
        result = run_streaming(
            [sys.executable, "-c", "import sys; sys.stderr.write('CONFLICT'); sys.exit(1)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 1
        assert result.error.stdout == ""
        assert "CONFLICT" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run_streaming(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
