"""Typed configuration loading and access.

Configuration is layered:

1. built-in defaults (git-flow's own defaults, `main` as main-line branch)
2. an optional `.gitflow.toml` at the repository root
3. git config keys written by `git flow init` (`gitflow.branch.*`,
   `gitflow.prefix.*`), which always win

Example `.gitflow.toml`:

    remote = "upstream"

    [branches]
    main = "master"
    develop = "develop"

    [prefixes]
    feature = "feat/"

    [files]
    version = "VERSION"
    changelog = "CHANGELOG.md"
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "BranchesConfig",
    "ConfigError",
    "FilesConfig",
    "FlowConfig",
    "GIT_CONFIG_KEYS",
    "PROJECT_CONFIG_FILE",
    "PrefixesConfig",
    "apply_git_config",
    "load_config",
    "load_project_config",
]

PROJECT_CONFIG_FILE = ".gitflow.toml"

DEFAULT_MAIN_BRANCH = "main"
DEFAULT_DEVELOP_BRANCH = "develop"
DEFAULT_REMOTE = "origin"
DEFAULT_VERSION_FILE = "version.txt"
DEFAULT_CHANGELOG_FILE = "CHANGELOG.md"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BranchesConfig:
    """Long-lived branch names."""

    main: str = DEFAULT_MAIN_BRANCH
    develop: str = DEFAULT_DEVELOP_BRANCH


@dataclass(frozen=True, slots=True)
class PrefixesConfig:
    """Naming prefix per branch type."""

    feature: str = "feature/"
    release: str = "release/"
    hotfix: str = "hotfix/"
    support: str = "support/"

    def for_type(self, kind: str) -> str:
        """Return the prefix for a branch type name (e.g. "release")."""
        match kind:
            case "feature":
                return self.feature
            case "release":
                return self.release
            case "hotfix":
                return self.hotfix
            case "support":
                return self.support
            case _:
                raise ValueError(f"unknown branch type: {kind}")


@dataclass(frozen=True, slots=True)
class FilesConfig:
    """Tracked files, relative to the repository root."""

    version: str = DEFAULT_VERSION_FILE
    changelog: str = DEFAULT_CHANGELOG_FILE


@dataclass(frozen=True, slots=True)
class FlowConfig:
    """Main configuration container."""

    branches: BranchesConfig = field(default_factory=BranchesConfig)
    prefixes: PrefixesConfig = field(default_factory=PrefixesConfig)
    files: FilesConfig = field(default_factory=FilesConfig)
    remote: str = DEFAULT_REMOTE

    @property
    def integration_branches(self) -> tuple[str, str]:
        return (self.branches.main, self.branches.develop)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> FlowConfig:
        """Create FlowConfig from a mapping (parsed TOML)."""
        branches: StrDict = get_table(data, "branches") or {}
        prefixes: StrDict = get_table(data, "prefixes") or {}
        files: StrDict = get_table(data, "files") or {}

        defaults = PrefixesConfig()
        return cls(
            branches=BranchesConfig(
                main=get_str(branches, "main") or DEFAULT_MAIN_BRANCH,
                develop=get_str(branches, "develop") or DEFAULT_DEVELOP_BRANCH,
            ),
            prefixes=PrefixesConfig(
                feature=get_str(prefixes, "feature") or defaults.feature,
                release=get_str(prefixes, "release") or defaults.release,
                hotfix=get_str(prefixes, "hotfix") or defaults.hotfix,
                support=get_str(prefixes, "support") or defaults.support,
            ),
            files=FilesConfig(
                version=get_str(files, "version") or DEFAULT_VERSION_FILE,
                changelog=get_str(files, "changelog") or DEFAULT_CHANGELOG_FILE,
            ),
            remote=get_str(data, "remote") or DEFAULT_REMOTE,
        )


# git config key -> (section, attribute) on FlowConfig
GIT_CONFIG_KEYS: dict[str, tuple[str, str]] = {
    "gitflow.branch.master": ("branches", "main"),
    "gitflow.branch.develop": ("branches", "develop"),
    "gitflow.prefix.feature": ("prefixes", "feature"),
    "gitflow.prefix.release": ("prefixes", "release"),
    "gitflow.prefix.hotfix": ("prefixes", "hotfix"),
    "gitflow.prefix.support": ("prefixes", "support"),
}


def apply_git_config(config: FlowConfig, lookup: Callable[[str], str | None]) -> FlowConfig:
    """Overlay values written by `git flow init` on top of config.

    Args:
        config: Config built from defaults and `.gitflow.toml`
        lookup: Returns the value of a git config key, or None if unset

    Returns:
        A new FlowConfig; unset keys keep their current value.
    """
    branches = config.branches
    prefixes = config.prefixes
    for key, (section, attr) in GIT_CONFIG_KEYS.items():
        value = lookup(key)
        if not value:
            continue
        if section == "branches":
            branches = replace(branches, **{attr: value})
        else:
            prefixes = replace(prefixes, **{attr: value})
    return replace(config, branches=branches, prefixes=prefixes)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[FlowConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(FlowConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(FlowConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_project_config(root: Path) -> Result[FlowConfig, ConfigError]:
    """Load `.gitflow.toml` from a repository root.

    A missing file is not an error: defaults are returned.
    """
    path = root / PROJECT_CONFIG_FILE
    if not path.exists():
        return Ok(FlowConfig())
    return load_config(path)
