"""Project configuration loaded from ey.yml and process environment."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from deployctl.core.errors import ConfigError

DEPLOYCTL_ENVIRONMENT_ENV = "DEPLOYCTL_ENVIRONMENT"
CONFIG_FILE_NAMES = ("ey.yml", "config/ey.yml")


@dataclass(frozen=True)
class EnvironmentSettings:
    """Per-environment settings from the project file."""

    default: bool = False
    branch: str | None = None


@dataclass(frozen=True)
class DeployctlConfig:
    """Resolved configuration threaded into every resolution call."""

    environments: dict[str, EnvironmentSettings] = field(default_factory=dict)
    default_environment_override: str | None = None
    source: Path | None = None

    @property
    def default_environment(self) -> str | None:
        """Return the environment used when none is named on the command line."""
        if self.default_environment_override:
            return self.default_environment_override
        for name, settings in self.environments.items():
            if settings.default:
                return name
        return None

    def default_branch(self, env_name: str) -> str | None:
        """Return the branch pinned for an environment in the project file."""
        settings = self.environments.get(env_name)
        return settings.branch if settings is not None else None

    @classmethod
    def from_dict(
        cls,
        payload: Mapping[str, Any] | None,
        *,
        source: Path | None = None,
        default_environment_override: str | None = None,
    ) -> DeployctlConfig:
        """Validate a parsed project file."""
        origin = str(source) if source is not None else "configuration"
        data = payload or {}
        if not isinstance(data, Mapping):
            raise ConfigError(f"{origin} must contain a mapping at the top level.")
        raw_environments = data.get("environments") or {}
        if not isinstance(raw_environments, Mapping):
            raise ConfigError(f"{origin}: 'environments' must be a mapping.")
        environments: dict[str, EnvironmentSettings] = {}
        for name, raw in raw_environments.items():
            raw = raw or {}
            if not isinstance(raw, Mapping):
                raise ConfigError(f"{origin}: environments.{name} must be a mapping.")
            default = raw.get("default", False)
            if not isinstance(default, bool):
                raise ConfigError(f"{origin}: environments.{name}.default must be a boolean.")
            branch = raw.get("branch")
            if branch is not None and (not isinstance(branch, str) or not branch.strip()):
                raise ConfigError(
                    f"{origin}: environments.{name}.branch must be a non-empty string."
                )
            environments[str(name)] = EnvironmentSettings(
                default=default,
                branch=branch.strip() if branch else None,
            )
        defaults = sorted(name for name, item in environments.items() if item.default)
        if len(defaults) > 1:
            raise ConfigError(
                f"{origin}: more than one environment is marked default: {', '.join(defaults)}."
            )
        return cls(
            environments=environments,
            default_environment_override=default_environment_override,
            source=source,
        )


def find_config_file(search_dirs: Iterable[Path]) -> Path | None:
    """Return the first project file found in the given directories."""
    for directory in search_dirs:
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def load_config(search_dirs: Iterable[Path]) -> DeployctlConfig:
    """Load ey.yml from the first matching directory and apply env overrides."""
    override = os.environ.get(DEPLOYCTL_ENVIRONMENT_ENV) or None
    path = find_config_file(search_dirs)
    if path is None:
        return DeployctlConfig(default_environment_override=override)
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path} is not valid YAML: {exc}") from exc
    return DeployctlConfig.from_dict(
        payload,
        source=path,
        default_environment_override=override,
    )


def parse_key_value_pairs(raw_values: Iterable[str], field_name: str) -> dict[str, str]:
    """Parse ``k=v,k2=v2`` option values into a mapping."""
    output: dict[str, str] = {}
    for raw in raw_values:
        for item in raw.split(","):
            pair = item.strip()
            if not pair:
                continue
            key, separator, value = pair.partition("=")
            if not separator or not key.strip():
                raise ValueError(f"{field_name} entries must look like key=value, got '{pair}'.")
            output[key.strip()] = value.strip()
    return output


def split_names(raw_values: Iterable[str]) -> list[str]:
    """Split repeated, comma separated name options into a flat list."""
    names: list[str] = []
    for raw in raw_values:
        for item in raw.split(","):
            name = item.strip()
            if name and name not in names:
                names.append(name)
    return names
