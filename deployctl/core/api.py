"""Control plane API collaborator: protocol and file-backed snapshot client."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

import yaml

from deployctl.core.errors import CatalogError
from deployctl.core.models import Application, Environment, LogEntry
from deployctl.logging_utils import get_logger

LOGGER = get_logger()

DEPLOYCTL_CATALOG_ENV = "DEPLOYCTL_CATALOG"
DEPLOYCTL_JOURNAL_ENV = "DEPLOYCTL_JOURNAL"

SERVERSIDE_INSTALLING = "installing"
SERVERSIDE_UPGRADING = "upgrading"


class ControlPlaneAPI(Protocol):
    """Interface implemented by control plane clients."""

    def apps(self) -> list[Application]:
        """Return every application visible to the current tenant."""
        ...

    def environments(self) -> list[Environment]:
        """Return every environment visible to the current tenant."""
        ...

    def deploy(
        self,
        app: Application,
        environment: Environment,
        ref: str,
        options: Mapping[str, Any],
    ) -> bool:
        """Deploy a git ref of an application; return whether it succeeded."""
        ...

    def rebuild(self, environment: Environment) -> bool:
        """Re-run the configuration of every server in an environment."""
        ...

    def rollback(self, app: Application, environment: Environment, verbose: bool) -> bool:
        """Restore the previous release of an application."""
        ...

    def logs(self, environment: Environment) -> list[LogEntry]:
        """Return the latest configuration logs for an environment."""
        ...

    def ensure_serverside(self, environment: Environment) -> str | None:
        """Make sure the deploy agent is present; return the action taken, if any."""
        ...


class SnapshotAPI:
    """Control plane client backed by a YAML/JSON catalog snapshot.

    Remote operations are appended to a JSONL journal and reported as
    successful unless the snapshot lists the operation under ``failing``
    for that environment. The snapshot is read once per instance.
    """

    def __init__(self, catalog_path: Path, journal_path: Path | None = None) -> None:
        """Initialize snapshot and journal paths."""
        self.catalog_path = catalog_path.expanduser().resolve()
        self.journal_path = (journal_path or default_journal_path()).expanduser().resolve()
        self._apps: list[Application] | None = None
        self._environments: list[Environment] | None = None
        self._failing: dict[str, set[str]] = {}
        self._serverside: dict[str, str] = {}

    def apps(self) -> list[Application]:
        """Return applications in snapshot order."""
        self._load()
        return list(self._apps or [])

    def environments(self) -> list[Environment]:
        """Return environments in snapshot order."""
        self._load()
        return list(self._environments or [])

    def deploy(
        self,
        app: Application,
        environment: Environment,
        ref: str,
        options: Mapping[str, Any],
    ) -> bool:
        """Record a deploy request."""
        return self._record(
            "deploy",
            environment,
            {"app": app.name, "ref": ref, "options": dict(options)},
        )

    def rebuild(self, environment: Environment) -> bool:
        """Record a rebuild request."""
        return self._record("rebuild", environment, {})

    def rollback(self, app: Application, environment: Environment, verbose: bool) -> bool:
        """Record a rollback request."""
        return self._record("rollback", environment, {"app": app.name, "verbose": verbose})

    def logs(self, environment: Environment) -> list[LogEntry]:
        """Return the log entries stored with the environment."""
        return list(environment.logs)

    def ensure_serverside(self, environment: Environment) -> str | None:
        """Return the server-side component action recorded in the snapshot."""
        self._load()
        return self._serverside.get(environment.name)

    def _record(self, action: str, environment: Environment, details: dict[str, Any]) -> bool:
        self._load()
        success = action not in self._failing.get(environment.name, set())
        payload = {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "action": action,
            "environment": environment.name,
            "success": success,
            **details,
        }
        self.journal_path.parent.mkdir(parents=True, exist_ok=True)
        with self.journal_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, ensure_ascii=True, default=str))
            handle.write("\n")
        LOGGER.debug(
            "Operation journaled",
            extra={"action": action, "environment": environment.name, "success": success},
        )
        return success

    def _load(self) -> None:
        if self._apps is not None:
            return
        payload = load_snapshot(self.catalog_path)
        apps = [
            Application.from_dict(item, path=f"apps[{index}]")
            for index, item in enumerate(_list_field(payload, "apps"))
        ]
        raw_environments = _list_field(payload, "environments")
        environments = [
            Environment.from_dict(item, path=f"environments[{index}]")
            for index, item in enumerate(raw_environments)
        ]
        _check_unique([app.name for app in apps], "application")
        _check_unique([env.name for env in environments], "environment")
        known_apps = {app.name for app in apps}
        for env in environments:
            unknown = sorted(set(env.app_names) - known_apps)
            if unknown:
                raise CatalogError(
                    f"Environment '{env.name}' links unknown applications: {', '.join(unknown)}."
                )
        for env, raw in zip(environments, raw_environments, strict=True):
            failing = raw.get("failing") or []
            if not isinstance(failing, list):
                raise CatalogError(f"Expected 'environments[{env.name}].failing' to be a list.")
            self._failing[env.name] = {str(item) for item in failing}
            serverside = raw.get("serverside")
            if serverside is not None:
                if not isinstance(serverside, str) or serverside not in {
                    SERVERSIDE_INSTALLING,
                    SERVERSIDE_UPGRADING,
                }:
                    raise CatalogError(
                        f"Expected 'environments[{env.name}].serverside' to be "
                        f"'{SERVERSIDE_INSTALLING}' or '{SERVERSIDE_UPGRADING}'."
                    )
                self._serverside[env.name] = serverside
        self._apps = apps
        self._environments = environments
        LOGGER.debug(
            "Catalog snapshot loaded",
            extra={
                "catalog_path": str(self.catalog_path),
                "apps": len(apps),
                "environments": len(environments),
            },
        )


def load_snapshot(path: Path) -> Mapping[str, Any]:
    """Read and parse a catalog snapshot file."""
    if not path.exists():
        raise CatalogError(
            f"Catalog snapshot not found at {path}. Set {DEPLOYCTL_CATALOG_ENV} to its location."
        )
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise CatalogError(f"Catalog snapshot {path} is not valid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise CatalogError(f"Catalog snapshot {path} must contain a mapping at the top level.")
    return data


def default_catalog_path() -> Path:
    """Resolve the catalog snapshot path from env or home directory."""
    env_value = os.environ.get(DEPLOYCTL_CATALOG_ENV)
    if env_value:
        return Path(env_value)
    return Path.home() / ".deployctl" / "catalog.yml"


def default_journal_path() -> Path:
    """Resolve the operations journal path from env or home directory."""
    env_value = os.environ.get(DEPLOYCTL_JOURNAL_ENV)
    if env_value:
        return Path(env_value)
    return Path.home() / ".deployctl" / "operations.jsonl"


def _list_field(payload: Mapping[str, Any], key: str) -> list[Any]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise CatalogError(f"Expected '{key}' to be a list.")
    return value


def _check_unique(names: list[str], kind: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise CatalogError(f"Duplicate {kind} name '{name}' in catalog snapshot.")
        seen.add(name)
