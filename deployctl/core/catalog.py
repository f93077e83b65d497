"""Typed lookups over the control plane catalog."""

from __future__ import annotations

from deployctl.core.api import ControlPlaneAPI
from deployctl.core.errors import AmbiguousApplicationError
from deployctl.core.models import Application, Environment
from deployctl.core.repo import Repository, normalize_repo_url
from deployctl.logging_utils import get_logger

LOGGER = get_logger()


class ResourceCatalog:
    """Snapshot of applications and environments for one command invocation."""

    def __init__(self, api: ControlPlaneAPI) -> None:
        """Initialize the accessor around an API client."""
        self.api = api
        self._apps: list[Application] | None = None
        self._environments: list[Environment] | None = None

    def all_applications(self) -> list[Application]:
        """Return every application in catalog order."""
        if self._apps is None:
            self._apps = list(self.api.apps())
        return list(self._apps)

    def all_environments(self) -> list[Environment]:
        """Return every environment in catalog order."""
        if self._environments is None:
            self._environments = list(self.api.environments())
        return list(self._environments)

    def environments_for(self, app: Application) -> list[Environment]:
        """Return the environments the application is linked to."""
        return [env for env in self.all_environments() if env.runs(app)]

    def environments_named(self, name: str) -> list[Environment]:
        """Return environments whose name is exactly ``name``."""
        return [env for env in self.all_environments() if env.name == name]

    def applications_for_repo(self, repo: Repository) -> list[Application]:
        """Return every application whose repository matches a local remote."""
        remotes = {normalize_repo_url(url) for url in repo.urls()}
        if not remotes:
            return []
        return [
            app
            for app in self.all_applications()
            if app.repository_uri is not None
            and normalize_repo_url(app.repository_uri) in remotes
        ]

    def application_for_repo(self, repo: Repository) -> Application | None:
        """Return the application for the working directory, if exactly one matches."""
        matches = self.applications_for_repo(repo)
        if len(matches) > 1:
            LOGGER.warning(
                "Repository matches multiple applications",
                extra={"candidates": [app.name for app in matches]},
            )
            raise AmbiguousApplicationError(repo.urls(), [app.name for app in matches])
        return matches[0] if matches else None
