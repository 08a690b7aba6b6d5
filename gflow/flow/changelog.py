"""Changelog sections derived from commit history.

`CHANGELOG.md` is reverse-chronological: each release prepends

    ## v1.10.0 - 2026-10-18
    - feat: add login
    - fix: handle empty input

above the existing content. A version whose heading is already present is
never written again, so re-running a workflow is a no-op for the changelog.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from gflow.core.result import Err, Ok, Result
from gflow.flow.errors import FlowError
from gflow.flow.version import SemVer
from gflow.output.console import ConsoleProtocol

if TYPE_CHECKING:
    from gflow.git.repository import GitRepository

PLACEHOLDER_ENTRY = "- Internal changes"


def _heading_re(version: SemVer) -> re.Pattern[str]:
    return re.compile(rf"^## v{re.escape(str(version))}(?:[ \t\r]|$)", re.MULTILINE)


@dataclass(frozen=True, slots=True)
class ChangelogSection:
    """One release entry.

    Attributes:
        version: Released version
        date: Release day (rendered ISO-8601)
        entries: Changelog lines, each `- <subject>`; never empty
    """

    version: SemVer
    date: date
    entries: tuple[str, ...]

    @property
    def heading(self) -> str:
        return f"## v{self.version} - {self.date.isoformat()}"

    def render(self) -> str:
        return "\n".join((self.heading, *self.entries)) + "\n"


@dataclass(frozen=True, slots=True)
class ChangelogUpdate:
    applied: bool
    section: ChangelogSection


def last_tag(repo: GitRepository) -> str | None:
    return repo.last_tag()


def commits_since(repo: GitRepository, tag: str | None) -> list[str]:
    """Changelog lines for commits after `tag` (full history when None)."""
    return [f"- {subject}" for subject in repo.commit_subjects(tag)]


def build_section(version: SemVer, day: date, commits: Sequence[str]) -> ChangelogSection:
    entries = tuple(commits) if commits else (PLACEHOLDER_ENTRY,)
    return ChangelogSection(version=version, date=day, entries=entries)


def has_section(path: Path, version: SemVer) -> bool:
    """True when the file has a `## v<version>` heading line."""
    if not path.exists():
        return False
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return False
    return _heading_re(version).search(text) is not None


def append(
    path: Path,
    section: ChangelogSection,
    *,
    dry_run: bool,
    console: ConsoleProtocol,
) -> Result[ChangelogUpdate, FlowError]:
    """Prepend a section unless the version is already present.

    Returns:
        Ok(applied=False) without writing when the heading exists or in
        dry-run; Err(io_error) when the real write fails.
    """
    try:
        existing = ""
        if path.exists():
            with path.open(encoding="utf-8", newline="") as f:
                existing = f.read()
    except OSError as e:
        return Err(FlowError(kind="io_error", message=f"failed to read {path.name}: {e}"))

    if _heading_re(section.version).search(existing):
        console.info(f"{path.name} already contains v{section.version}; skipping")
        return Ok(ChangelogUpdate(applied=False, section=section))

    if dry_run:
        console.info(f"[dry-run] would update {path.name} with v{section.version}")
        return Ok(ChangelogUpdate(applied=False, section=section))

    rendered = section.render()
    if "\r\n" in existing:
        rendered = rendered.replace("\n", "\r\n")

    try:
        path.write_text(rendered + existing, encoding="utf-8", newline="")
    except OSError as e:
        return Err(FlowError(kind="io_error", message=f"failed to write {path.name}: {e}"))

    return Ok(ChangelogUpdate(applied=True, section=section))


def generate(
    repo: GitRepository,
    version: SemVer,
    *,
    today: date | None = None,
) -> Result[ChangelogUpdate, FlowError]:
    """Build the section for `version` from history and prepend it."""
    tag = last_tag(repo)
    section = build_section(version, today or date.today(), commits_since(repo, tag))
    return append(
        repo.changelog_file,
        section,
        dry_run=repo.mode.dry_run,
        console=repo.console,
    )


def commit_changelog(repo: GitRepository, version: SemVer) -> Result[None, FlowError]:
    added = repo.add([repo.changelog_file])
    if isinstance(added, Err):
        return added
    committed = repo.commit(f"docs: update changelog for v{version}")
    if isinstance(committed, Err):
        return committed
    return Ok(None)
