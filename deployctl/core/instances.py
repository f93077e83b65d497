"""Select environment instances by server role."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from deployctl.core.errors import NoCommandError, NoInstancesError
from deployctl.core.models import Environment, Instance, Role


class RoleSelection(str, Enum):
    """Which servers a command targets, in flag precedence order."""

    ALL = "all"
    APP_SERVERS = "app_servers"
    DB_SERVERS = "db_servers"
    DB_MASTER = "db_master"
    DB_SLAVES = "db_slaves"
    UTILITIES = "utilities"
    DEFAULT = "default"


ROLES_BY_SELECTION: dict[RoleSelection, frozenset[Role]] = {
    RoleSelection.APP_SERVERS: frozenset({Role.SOLO, Role.APP, Role.APP_MASTER}),
    RoleSelection.DB_SERVERS: frozenset({Role.SOLO, Role.DB_MASTER, Role.DB_SLAVE}),
    RoleSelection.DB_MASTER: frozenset({Role.SOLO, Role.DB_MASTER}),
    RoleSelection.DB_SLAVES: frozenset({Role.DB_SLAVE}),
    RoleSelection.UTILITIES: frozenset({Role.UTIL}),
    RoleSelection.DEFAULT: frozenset({Role.SOLO, Role.APP_MASTER}),
}


@dataclass(frozen=True)
class InstanceFilter:
    """A role selection; ``utility_names`` of None means every utility server."""

    selection: RoleSelection = RoleSelection.DEFAULT
    utility_names: frozenset[str] | None = None

    @classmethod
    def from_flags(
        cls,
        *,
        all_servers: bool = False,
        app_servers: bool = False,
        db_servers: bool = False,
        db_master: bool = False,
        db_slaves: bool = False,
        utilities: Iterable[str] | None = None,
    ) -> InstanceFilter:
        """Build the filter from CLI flags; the first flag set wins.

        ``utilities`` is None when the flag is absent and an empty
        iterable when given without names.
        """
        if all_servers:
            return cls(RoleSelection.ALL)
        if app_servers:
            return cls(RoleSelection.APP_SERVERS)
        if db_servers:
            return cls(RoleSelection.DB_SERVERS)
        if db_master:
            return cls(RoleSelection.DB_MASTER)
        if db_slaves:
            return cls(RoleSelection.DB_SLAVES)
        if utilities is not None:
            names = frozenset(utilities)
            return cls(RoleSelection.UTILITIES, names or None)
        return cls(RoleSelection.DEFAULT)

    def matches(self, instance: Instance) -> bool:
        """Return whether the instance is selected."""
        if self.selection is RoleSelection.ALL:
            return True
        if instance.role not in ROLES_BY_SELECTION[self.selection]:
            return False
        if self.selection is RoleSelection.UTILITIES and self.utility_names is not None:
            return instance.name in self.utility_names
        return True


def select_instances(
    instances: Iterable[Instance],
    instance_filter: InstanceFilter,
) -> list[Instance]:
    """Return the selected instances in catalog order."""
    return [instance for instance in instances if instance_filter.matches(instance)]


def ssh_hosts(environment: Environment, instance_filter: InstanceFilter) -> list[str]:
    """Return the hostnames to open sessions on, without duplicates."""
    selected = select_instances(environment.instances, instance_filter)
    if not selected:
        raise NoInstancesError(environment.name)
    hosts: list[str] = []
    for instance in selected:
        if instance.public_hostname not in hosts:
            hosts.append(instance.public_hostname)
    return hosts


def require_session_target(hosts: list[str], command: str | None) -> None:
    """An interactive session needs exactly one host."""
    if not command and len(hosts) != 1:
        raise NoCommandError()
