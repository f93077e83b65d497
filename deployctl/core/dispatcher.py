"""Run one command end-to-end: resolve targets, call the API, report outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from deployctl.core.api import SERVERSIDE_INSTALLING, SERVERSIDE_UPGRADING
from deployctl.core.catalog import ResourceCatalog
from deployctl.core.config import DeployctlConfig
from deployctl.core.errors import (
    EnvironmentUnlinkedError,
    NoAppError,
    NoEnvironmentError,
    OperationFailedError,
)
from deployctl.core.instances import InstanceFilter, require_session_target, ssh_hosts
from deployctl.core.models import Environment
from deployctl.core.refs import effective_default_branch, resolve_ref
from deployctl.core.repo import Repository
from deployctl.core.resolver import fetch_app, fetch_environment
from deployctl.core.sessions import SessionRunner, SshSessionRunner
from deployctl.logging_utils import get_logger
from deployctl.ui import TerminalUI

LOGGER = get_logger()


@dataclass(frozen=True)
class DeployRequest:
    """Parsed deploy flags."""

    app_name: str | None = None
    env_name: str | None = None
    ref: str | None = None
    ignore_default_branch: bool = False
    ignore_bad_master: bool = False
    migrate: bool | str | None = None
    verbose: bool | None = None
    extra_hook_options: dict[str, str] = field(default_factory=dict)

    def deploy_options(self) -> dict[str, Any]:
        """Options forwarded to the control plane with the deploy call."""
        options: dict[str, Any] = {
            "extras": dict(self.extra_hook_options),
            "ignore_bad_master": self.ignore_bad_master,
        }
        if self.migrate is not None:
            options["migrate"] = self.migrate
        if self.verbose is not None:
            options["verbose"] = self.verbose
        return options


class CommandDispatcher:
    """Coordinates resolution and remote operations for CLI commands."""

    def __init__(
        self,
        *,
        catalog: ResourceCatalog,
        repo: Repository,
        config: DeployctlConfig,
        ui: TerminalUI,
        sessions: SessionRunner | None = None,
    ) -> None:
        """Initialize dispatcher collaborators."""
        self.catalog = catalog
        self.repo = repo
        self.config = config
        self.ui = ui
        self.sessions = sessions or SshSessionRunner()

    def _environment(self, env_name: str | None) -> Environment:
        return fetch_environment(
            env_name,
            catalog=self.catalog,
            repo=self.repo,
            config=self.config,
        )

    def deploy(self, request: DeployRequest) -> None:
        """Deploy a git ref of an application to an environment."""
        LOGGER.info(
            "Deploy requested",
            extra={
                "app_name": request.app_name,
                "env_name": request.env_name,
                "ref": request.ref,
            },
        )
        app = fetch_app(request.app_name, catalog=self.catalog, repo=self.repo)
        try:
            environment = fetch_environment(
                request.env_name,
                app,
                catalog=self.catalog,
                repo=self.repo,
                config=self.config,
            )
        except NoEnvironmentError as exc:
            literal = request.env_name or self.config.default_environment
            if literal and self.catalog.environments_named(literal):
                raise EnvironmentUnlinkedError(literal, app.name) from exc
            raise

        needs_local_branch = not request.ref and not request.app_name
        deploy_ref = resolve_ref(
            request.ref,
            request.ignore_default_branch,
            effective_default_branch(environment, self.config),
            self.repo.current_branch() if needs_local_branch else None,
            app_is_explicit=bool(request.app_name),
        )

        self.ui.debug(f"Resolved ref '{deploy_ref}' for '{app.name}' in '{environment.name}'")
        self.ui.info("Connecting to the server...")
        self._check_serverside(environment)
        self.ui.info(f"Beginning deploy for '{app.name}' in '{environment.name}' on server...")
        if self.catalog.api.deploy(app, environment, deploy_ref, request.deploy_options()):
            LOGGER.info(
                "Deploy succeeded",
                extra={"app": app.name, "environment": environment.name, "ref": deploy_ref},
            )
            self.ui.info("Deploy complete")
            return
        LOGGER.warning(
            "Deploy failed",
            extra={"app": app.name, "environment": environment.name, "ref": deploy_ref},
        )
        raise OperationFailedError("deploy", environment.name, app.name)

    def rebuild(self, env_name: str | None) -> None:
        """Re-run configuration on every server of an environment."""
        environment = self._environment(env_name)
        if not self.catalog.api.rebuild(environment):
            LOGGER.warning("Rebuild failed", extra={"environment": environment.name})
            raise OperationFailedError("rebuild", environment.name)
        LOGGER.info("Rebuild requested", extra={"environment": environment.name})
        self.ui.info(f"Rebuilding {environment.name}")

    def rollback(self, app_name: str | None, env_name: str | None, verbose: bool) -> None:
        """Roll an application back to its previous release."""
        app = fetch_app(app_name, catalog=self.catalog, repo=self.repo)
        environment = fetch_environment(
            env_name,
            app,
            catalog=self.catalog,
            repo=self.repo,
            config=self.config,
        )
        self._check_serverside(environment)
        self.ui.info(f"Rolling back '{app.name}' in '{environment.name}'")
        if not self.catalog.api.rollback(app, environment, verbose):
            LOGGER.warning(
                "Rollback failed",
                extra={"app": app.name, "environment": environment.name},
            )
            raise OperationFailedError("rollback", environment.name, app.name)
        LOGGER.info(
            "Rollback succeeded",
            extra={"app": app.name, "environment": environment.name},
        )
        self.ui.info("Rollback complete")

    def ssh(
        self,
        command: str | None,
        env_name: str | None,
        instance_filter: InstanceFilter,
    ) -> int:
        """Open a session or run a command on each selected host, one at a time.

        Every host is attempted; the last non-zero exit status is returned.
        """
        environment = self._environment(env_name)
        hosts = ssh_hosts(environment, instance_filter)
        require_session_target(hosts, command)
        LOGGER.info(
            "Opening ssh sessions",
            extra={
                "environment": environment.name,
                "selection": instance_filter.selection.value,
                "hosts": hosts,
            },
        )
        status = 0
        for host in hosts:
            returncode = self.sessions.run(environment.username, host, command)
            if returncode != 0:
                LOGGER.warning("ssh session failed", extra={"host": host, "status": returncode})
                status = returncode
        return status

    def logs(self, env_name: str | None) -> None:
        """Print the latest configuration logs of each instance."""
        environment = self._environment(env_name)
        for log in self.catalog.api.logs(environment):
            self.ui.info(log.instance_name)
            if log.main:
                self.ui.info(f"Main logs for {environment.name}:")
                self.ui.say(log.main)
            if log.custom:
                self.ui.info(f"Custom logs for {environment.name}:")
                self.ui.say(log.custom)

    def environments(self, *, all_apps: bool, simple: bool) -> None:
        """List environments for the working directory's application or for all."""
        if all_apps and simple:
            for environment in self.catalog.all_environments():
                self.ui.say(environment.name)
            return
        if all_apps:
            apps = self.catalog.all_applications()
        else:
            apps = self.catalog.applications_for_repo(self.repo)
            if len(apps) > 1:
                listing = "".join(f"\t{app.name}\n" for app in apps)
                self.ui.warn(
                    "This git repo matches multiple applications:\n"
                    f"{listing}"
                    "The following environments contain those applications:\n"
                )
            elif not apps:
                self.ui.warn(str(NoAppError.for_repo(self.repo.urls())))
        self.ui.print_envs(
            [(app, self.catalog.environments_for(app)) for app in apps],
            self.config.default_environment,
            simple=simple,
        )

    def _check_serverside(self, environment: Environment) -> None:
        action = self.catalog.api.ensure_serverside(environment)
        if action == SERVERSIDE_INSTALLING:
            self.ui.warn("Instance does not have server-side component installed")
            self.ui.info("Installing server-side component...")
        elif action == SERVERSIDE_UPGRADING:
            self.ui.info("Upgrading server-side component...")
