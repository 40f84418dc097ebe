"""Typed configuration loading and access.

This module provides frozen dataclasses for the ``mgf.toml`` structure:

    [gitflow]            branch names, prefixes, remote
    [build]              switches for git/Maven invocations
    [changelist]         per-branch-type changelist values

Configuration is loaded once per invocation and read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .branch import BranchType
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_raw_str, get_str, get_table

__all__ = [
    "ChangelistConfig",
    "Config",
    "ConfigError",
    "FlowSettings",
    "GitFlowConfig",
    "CONFIG_FILENAME",
    "load_config",
]

CONFIG_FILENAME = "mgf.toml"

DEFAULT_CHANGELIST_PROPERTY = "changelist"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GitFlowConfig:
    """Branch names, branch prefixes and remote used by the workflow."""

    production_branch: str = "master"
    development_branch: str = "develop"
    feature_prefix: str = "feature/"
    release_prefix: str = "release/"
    hotfix_prefix: str = "hotfix/"
    support_prefix: str = "support/"
    version_tag_prefix: str = ""
    origin: str = "origin"

    @property
    def same_production_and_development(self) -> bool:
        return self.production_branch == self.development_branch


def _empty_values() -> dict[BranchType, str]:
    return {}


@dataclass(frozen=True, slots=True)
class ChangelistConfig:
    """CI-friendly ``changelist`` values per branch type.

    Attributes:
        property_name: Name of the Maven property to set.
        values: Configured value per branch type. A branch type missing from
            the mapping means "remove the property" while on that branch.
    """

    property_name: str | None = DEFAULT_CHANGELIST_PROPERTY
    values: Mapping[BranchType, str] = field(default_factory=_empty_values)

    @property
    def is_unused(self) -> bool:
        """True when there is nothing to propagate."""
        return not (self.property_name and self.property_name.strip()) or not self.values

    def value_for(self, branch_type: BranchType) -> str | None:
        return self.values.get(branch_type)


@dataclass(frozen=True, slots=True)
class FlowSettings:
    """Switches controlling how git and Maven are invoked."""

    tycho_build: bool = False
    fetch_remote: bool = True
    verbose: bool = False
    arg_line: str | None = None
    gpg_sign_commit: bool = False
    versions_force_update: bool = False
    version_property: str | None = None
    skip_update_version: bool = False
    commit_message_prefix: str | None = None
    mvn_executable: str | None = None
    git_executable: str | None = None
    update_output_timestamp: bool = True
    changelist: ChangelistConfig = field(default_factory=ChangelistConfig)


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    gitflow: GitFlowConfig = field(default_factory=GitFlowConfig)
    settings: FlowSettings = field(default_factory=FlowSettings)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        gitflow: StrDict = get_table(data, "gitflow") or {}
        build: StrDict = get_table(data, "build") or {}
        changelist: StrDict = get_table(data, "changelist") or {}

        defaults = GitFlowConfig()
        flow = GitFlowConfig(
            production_branch=get_str(gitflow, "production_branch") or defaults.production_branch,
            development_branch=get_str(gitflow, "development_branch")
            or defaults.development_branch,
            feature_prefix=_raw_or(gitflow, "feature_prefix", defaults.feature_prefix),
            release_prefix=_raw_or(gitflow, "release_prefix", defaults.release_prefix),
            hotfix_prefix=_raw_or(gitflow, "hotfix_prefix", defaults.hotfix_prefix),
            support_prefix=_raw_or(gitflow, "support_prefix", defaults.support_prefix),
            version_tag_prefix=_raw_or(gitflow, "version_tag_prefix", defaults.version_tag_prefix),
            origin=get_str(gitflow, "origin") or defaults.origin,
        )

        values: dict[BranchType, str] = {}
        for branch_type in BranchType:
            value = get_raw_str(changelist, str(branch_type))
            if value is not None:
                values[branch_type] = value

        settings = FlowSettings(
            tycho_build=get_bool(build, "tycho_build", False),
            fetch_remote=get_bool(build, "fetch_remote", True),
            verbose=get_bool(build, "verbose", False),
            arg_line=get_raw_str(build, "arg_line"),
            gpg_sign_commit=get_bool(build, "gpg_sign_commit", False),
            versions_force_update=get_bool(build, "versions_force_update", False),
            version_property=get_str(build, "version_property"),
            skip_update_version=get_bool(build, "skip_update_version", False),
            commit_message_prefix=get_raw_str(build, "commit_message_prefix"),
            mvn_executable=get_str(build, "mvn_executable"),
            git_executable=get_str(build, "git_executable"),
            update_output_timestamp=get_bool(build, "update_output_timestamp", True),
            changelist=ChangelistConfig(
                property_name=_raw_or(changelist, "property", DEFAULT_CHANGELIST_PROPERTY),
                values=values,
            ),
        )

        return cls(gitflow=flow, settings=settings)


def _raw_or(table: Mapping[str, object], key: str, default: str) -> str:
    value = get_raw_str(table, key)
    return default if value is None else value


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling import and parse errors."""
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


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to mgf.toml file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = Config.from_dict(result.value)
        return Ok(config)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))

