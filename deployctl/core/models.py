"""Schema-first models for catalog snapshot records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from deployctl.core.errors import CatalogError

DEFAULT_SSH_USERNAME = "deploy"


class Role(str, Enum):
    """Closed set of server roles an instance can carry."""

    SOLO = "solo"
    APP = "app"
    APP_MASTER = "app_master"
    DB_MASTER = "db_master"
    DB_SLAVE = "db_slave"
    UTIL = "util"


def _require_string(value: Any, field_name: str) -> str:
    """Validate a non-empty string field."""
    if not isinstance(value, str):
        raise CatalogError(f"Expected '{field_name}' to be a string.")
    cleaned = value.strip()
    if not cleaned:
        raise CatalogError(f"Expected '{field_name}' to be non-empty.")
    return cleaned


def _require_optional_string(value: Any, field_name: str) -> str | None:
    """Validate an optional string field."""
    if value is None:
        return None
    return _require_string(value, field_name)


def _optional_text(value: Any, field_name: str) -> str | None:
    """Validate optional free text, keeping whitespace as-is."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise CatalogError(f"Expected '{field_name}' to be a string.")
    return value


def _require_list(value: Any, field_name: str) -> list[Any]:
    """Validate an optional list field, treating a missing value as empty."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise CatalogError(f"Expected '{field_name}' to be a list.")
    return value


def _require_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise CatalogError(f"Expected '{field_name}' to be an object.")
    return value


def _require_role(value: Any, field_name: str) -> Role:
    raw = _require_string(value, field_name)
    try:
        return Role(raw)
    except ValueError as exc:
        allowed = ", ".join(role.value for role in Role)
        raise CatalogError(f"Expected '{field_name}' to be one of: {allowed}.") from exc


@dataclass(frozen=True)
class Application:
    """Deployable unit tied to a source repository."""

    name: str
    repository_uri: str | None = None

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "apps[]") -> Application:
        """Build an application from an untrusted mapping."""
        data = _require_mapping(payload, path)
        return cls(
            name=_require_string(data.get("name"), f"{path}.name"),
            repository_uri=_require_optional_string(
                data.get("repository_uri"), f"{path}.repository_uri"
            ),
        )


@dataclass(frozen=True)
class Instance:
    """One server within an environment."""

    public_hostname: str
    role: Role
    environment_name: str
    name: str | None = None

    @classmethod
    def from_dict(cls, payload: Any, *, environment_name: str, path: str) -> Instance:
        """Build an instance from an untrusted mapping."""
        data = _require_mapping(payload, path)
        return cls(
            public_hostname=_require_string(
                data.get("public_hostname"), f"{path}.public_hostname"
            ),
            role=_require_role(data.get("role"), f"{path}.role"),
            environment_name=environment_name,
            name=_require_optional_string(data.get("name"), f"{path}.name"),
        )


@dataclass(frozen=True)
class LogEntry:
    """Configuration log output captured for one instance."""

    instance_name: str
    main: str | None = None
    custom: str | None = None

    @classmethod
    def from_dict(cls, payload: Any, *, path: str) -> LogEntry:
        """Build a log entry from an untrusted mapping."""
        data = _require_mapping(payload, path)
        return cls(
            instance_name=_require_string(data.get("instance_name"), f"{path}.instance_name"),
            main=_optional_text(data.get("main"), f"{path}.main"),
            custom=_optional_text(data.get("custom"), f"{path}.custom"),
        )


@dataclass(frozen=True)
class Environment:
    """Named deployment target made of server instances."""

    name: str
    app_names: tuple[str, ...] = ()
    default_branch: str | None = None
    username: str = DEFAULT_SSH_USERNAME
    instances: tuple[Instance, ...] = field(default=(), repr=False)
    logs: tuple[LogEntry, ...] = field(default=(), repr=False)

    def runs(self, app: Application) -> bool:
        """Return whether the application is linked to this environment."""
        return app.name in self.app_names

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "environments[]") -> Environment:
        """Build an environment, its instances and logs from an untrusted mapping."""
        data = _require_mapping(payload, path)
        name = _require_string(data.get("name"), f"{path}.name")
        app_names = tuple(
            _require_string(item, f"{path}.apps[{index}]")
            for index, item in enumerate(_require_list(data.get("apps"), f"{path}.apps"))
        )
        instances = tuple(
            Instance.from_dict(item, environment_name=name, path=f"{path}.instances[{index}]")
            for index, item in enumerate(
                _require_list(data.get("instances"), f"{path}.instances")
            )
        )
        logs = tuple(
            LogEntry.from_dict(item, path=f"{path}.logs[{index}]")
            for index, item in enumerate(_require_list(data.get("logs"), f"{path}.logs"))
        )
        return cls(
            name=name,
            app_names=app_names,
            default_branch=_require_optional_string(
                data.get("default_branch"), f"{path}.default_branch"
            ),
            username=_require_optional_string(data.get("username"), f"{path}.username")
            or DEFAULT_SSH_USERNAME,
            instances=instances,
            logs=logs,
        )
