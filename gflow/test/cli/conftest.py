from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from types import ModuleType
from typing import TypeAlias

import pytest

from gflow.cli.context import CLIContext
from gflow.core.config import FlowConfig
from gflow.flow.model import RunMode
from gflow.git.adapter import CommandRunner, GitAdapter
from gflow.git.fake import FakeGit
from gflow.git.repository import GitRepository
from gflow.output.console import MockConsole

ContextPatcher: TypeAlias = Callable[[ModuleType], list[CLIContext]]


@pytest.fixture
def patch_context(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    fake_git: FakeGit,
    console: MockConsole,
) -> ContextPatcher:
    """Replace a command module's build_context with one over FakeGit.

    Returns the list of contexts built, so tests can inspect run modes.
    """

    def _patch(module: ModuleType) -> list[CLIContext]:
        built: list[CLIContext] = []

        def _build(
            *,
            dry_run: bool = False,
            offline: bool = False,
            yes: bool = False,
            runner: CommandRunner | None = None,
        ) -> CLIContext:
            mode = RunMode(dry_run=dry_run, offline=offline, interactive=False)
            adapter = GitAdapter(root=tmp_path, console=console, runner=fake_git)
            config = FlowConfig()
            ctx = CLIContext(
                root=tmp_path,
                config=config,
                console=console,
                repo=GitRepository(adapter, config=config, mode=mode),
                mode=mode,
            )
            built.append(ctx)
            return ctx

        monkeypatch.setattr(module, "build_context", _build)
        return built

    return _patch
