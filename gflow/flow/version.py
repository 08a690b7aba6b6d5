"""Semantic versions and the tracked `version.txt` file.

Versions are plain `major.minor.patch` without leading zeros; tags are the
version prefixed with `v`. Only the first line of `version.txt` is
authoritative, any following lines are preserved untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from gflow.core.result import Err, Ok, Result
from gflow.flow.errors import FlowError
from gflow.output.console import ConsoleProtocol

_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")
_BRANCH_VERSION_RE = re.compile(r"v(\d+\.\d+\.\d+)$")


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_tag(self) -> str:
        return f"v{self}"


def parse(text: str) -> SemVer | None:
    """Parse a canonical version string, or return None.

    Leading zeros, missing segments and non-numeric parts are rejected:

        >>> parse("1.10.0")
        SemVer(major=1, minor=10, patch=0)
        >>> parse("1.02.3") is None
        True
        >>> parse("1.2") is None
        True
    """
    m = _VERSION_RE.fullmatch(text)
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def compare(a: SemVer, b: SemVer) -> int:
    """Return -1, 0 or 1 comparing major, then minor, then patch."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def bump(version: SemVer, kind: str) -> SemVer:
    """Increment a version.

    An unknown kind returns the version unchanged; callers that need
    strictness validate the kind before calling.
    """
    match kind.lower():
        case "major":
            return SemVer(version.major + 1, 0, 0)
        case "minor":
            return SemVer(version.major, version.minor + 1, 0)
        case "patch":
            return SemVer(version.major, version.minor, version.patch + 1)
        case _:
            return version


def validate(text: str) -> Result[SemVer, FlowError]:
    parsed = parse(text)
    if parsed is None:
        return Err(
            FlowError(
                kind="invalid_version_format",
                message=f"Invalid version format: {text!r}",
                hint="Expected semver x.y.z without leading zeros.",
            )
        )
    return Ok(parsed)


def ensure_progress(current: SemVer, new: SemVer) -> Result[None, FlowError]:
    """Reject a new version lower than the current one."""
    if compare(new, current) < 0:
        return Err(
            FlowError(
                kind="version_regression",
                message=f"New version {new} cannot be lower than current {current}",
            )
        )
    return Ok(None)


def version_from_branch(branch: str) -> SemVer | None:
    """Extract the version from a branch such as `release/v1.2.0`."""
    m = _BRANCH_VERSION_RE.search(branch)
    if m is None:
        return None
    return parse(m.group(1))


def read_version_file(path: Path) -> Result[SemVer, FlowError]:
    """Load the current version from the first non-empty line of a file."""
    if not path.exists():
        return Err(
            FlowError(
                kind="missing_version_file",
                message=f"{path.name} not found at {path}",
            )
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(FlowError(kind="io_error", message=f"failed to read {path.name}: {e}"))

    first = text.strip().split("\n")[0].strip()
    parsed = parse(first)
    if parsed is None:
        return Err(
            FlowError(
                kind="invalid_version_format",
                message=f"Invalid version format in {path.name}: {first!r}",
            )
        )
    return Ok(parsed)


def write_version_file(
    path: Path,
    version: SemVer,
    *,
    dry_run: bool,
    console: ConsoleProtocol,
) -> Result[bool, FlowError]:
    """Replace the first non-empty line of the version file.

    Returns:
        Ok(True) if the file content changed, Ok(False) when it already held
        the version or in dry-run mode.
    """
    if not path.exists():
        return Err(
            FlowError(
                kind="missing_version_file",
                message=f"{path.name} not found at {path}",
            )
        )

    try:
        with path.open(encoding="utf-8", newline="") as f:
            current = f.read()
    except OSError as e:
        return Err(FlowError(kind="io_error", message=f"failed to read {path.name}: {e}"))

    lines = current.split("\n")
    index = next((i for i, line in enumerate(lines) if line.strip()), 0)
    ending = "\r" if lines[index].endswith("\r") else ""
    lines[index] = f"{version}{ending}"
    updated = "\n".join(lines)

    if dry_run:
        console.info(f"[dry-run] would write {path.name} => {version}")
        return Ok(False)

    if updated == current:
        return Ok(False)

    try:
        path.write_text(updated, encoding="utf-8", newline="")
    except OSError as e:
        return Err(FlowError(kind="io_error", message=f"failed to write {path.name}: {e}"))

    return Ok(True)
