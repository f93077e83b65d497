"""Resolve partial or implicit names to exactly one application or environment.

Resolution never guesses. A lookup either produces a single resource or
raises an error carrying the candidate names so the user can pick one on
the next invocation:

* an exact name match always wins;
* otherwise a name is matched as a substring of candidate names, and must
  match exactly one of them;
* with no name at all, the application comes from the git remotes of the
  working directory and the environment is that application's only one.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

from deployctl.core.catalog import ResourceCatalog
from deployctl.core.config import DeployctlConfig
from deployctl.core.errors import (
    AmbiguousEnvironmentError,
    AmbiguousNameError,
    NoAppError,
    NoEnvironmentError,
    NotFoundError,
)
from deployctl.core.models import Application, Environment
from deployctl.core.repo import Repository
from deployctl.logging_utils import get_logger

LOGGER = get_logger()

T = TypeVar("T", Application, Environment)


def match_one(
    name: str,
    candidates: Iterable[T],
    *,
    kind: str,
    not_found: Callable[[str], NotFoundError] = NotFoundError,
) -> T:
    """Return the single candidate matching ``name`` or raise."""
    items = list(candidates)
    for item in items:
        if item.name == name:
            return item
    matches = [item for item in items if name in item.name]
    if len(matches) > 1:
        raise AmbiguousNameError(kind, name, [item.name for item in matches])
    if not matches:
        raise not_found(name)
    return matches[0]


def require_application_for_repo(catalog: ResourceCatalog, repo: Repository) -> Application:
    """Return the application for the working directory or raise NoAppError."""
    app = catalog.application_for_repo(repo)
    if app is None:
        raise NoAppError.for_repo(repo.urls())
    return app


def sole_environment(catalog: ResourceCatalog, app: Application) -> Environment:
    """Return the only environment linked to an application."""
    environments = catalog.environments_for(app)
    if len(environments) > 1:
        raise AmbiguousEnvironmentError(app.name, [env.name for env in environments])
    if not environments:
        raise NoEnvironmentError.for_app(app.name)
    return environments[0]


def fetch_environment(
    env_name: str | None,
    app: Application | None = None,
    *,
    catalog: ResourceCatalog,
    repo: Repository,
    config: DeployctlConfig,
) -> Environment:
    """Resolve the target environment.

    When an application is given it constrains both the named lookup and
    the implicit one.
    """
    name = env_name or config.default_environment
    if name:
        candidates = catalog.environments_for(app) if app else catalog.all_environments()
        environment = match_one(
            name,
            candidates,
            kind="environment",
            not_found=NoEnvironmentError,
        )
    else:
        environment = sole_environment(
            catalog,
            app or require_application_for_repo(catalog, repo),
        )
    LOGGER.debug(
        "Environment resolved",
        extra={"query": name, "environment": environment.name},
    )
    return environment


def fetch_app(
    app_name: str | None,
    *,
    catalog: ResourceCatalog,
    repo: Repository,
) -> Application:
    """Resolve the target application from a name or the working directory."""
    if app_name:
        return match_one(
            app_name,
            catalog.all_applications(),
            kind="application",
            not_found=NoAppError,
        )
    return require_application_for_repo(catalog, repo)
