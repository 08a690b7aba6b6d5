from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import pytest

from gflow.core.config import FlowConfig
from gflow.flow.model import RunMode
from gflow.git.adapter import GitAdapter
from gflow.git.fake import FakeGit
from gflow.git.repository import GitRepository
from gflow.output.console import MockConsole

RepoFactory: TypeAlias = Callable[..., GitRepository]


@pytest.fixture(autouse=True)
def _no_ci(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests decide interactivity explicitly."""
    monkeypatch.delenv("CI", raising=False)
    monkeypatch.delenv("GFLOW_REPO", raising=False)


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def make_repo(tmp_path: Path, fake_git: FakeGit, console: MockConsole) -> RepoFactory:
    """Build a GitRepository over the fake runner rooted at tmp_path."""

    def _make(
        *,
        dry_run: bool = False,
        offline: bool = False,
        interactive: bool = False,
        config: FlowConfig | None = None,
    ) -> GitRepository:
        adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)
        return GitRepository(
            adapter,
            config=config or FlowConfig(),
            mode=RunMode(dry_run=dry_run, offline=offline, interactive=interactive),
        )

    return _make
