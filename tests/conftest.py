"""Shared fakes and catalog fixtures for deployctl tests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from deployctl.core.catalog import ResourceCatalog
from deployctl.core.models import Application, Environment, Instance, LogEntry, Role

SHOP_REPO = "git@github.com:acme/shop.git"
BLOG_REPO = "git@github.com:acme/blog.git"


class FakeRepo:
    """In-memory stand-in for a git working directory."""

    def __init__(self, urls: tuple[str, ...] = (), branch: str | None = None) -> None:
        self._urls = list(urls)
        self.branch = branch
        self.branch_lookups = 0

    def current_branch(self) -> str | None:
        self.branch_lookups += 1
        return self.branch

    def urls(self) -> list[str]:
        return list(self._urls)


class FakeAPI:
    """Control plane double that records every remote call."""

    def __init__(
        self,
        apps: list[Application],
        environments: list[Environment],
        *,
        succeed: bool = True,
        serverside: str | None = None,
    ) -> None:
        self._apps = apps
        self._environments = environments
        self.succeed = succeed
        self.serverside = serverside
        self.calls: list[tuple[Any, ...]] = []
        self.fetches = 0

    def apps(self) -> list[Application]:
        self.fetches += 1
        return list(self._apps)

    def environments(self) -> list[Environment]:
        self.fetches += 1
        return list(self._environments)

    def deploy(
        self,
        app: Application,
        environment: Environment,
        ref: str,
        options: Mapping[str, Any],
    ) -> bool:
        self.calls.append(("deploy", app.name, environment.name, ref, dict(options)))
        return self.succeed

    def rebuild(self, environment: Environment) -> bool:
        self.calls.append(("rebuild", environment.name))
        return self.succeed

    def rollback(self, app: Application, environment: Environment, verbose: bool) -> bool:
        self.calls.append(("rollback", app.name, environment.name, verbose))
        return self.succeed

    def logs(self, environment: Environment) -> list[LogEntry]:
        return list(environment.logs)

    def ensure_serverside(self, environment: Environment) -> str | None:
        return self.serverside


class FakeSessions:
    """Session runner that records hosts instead of running ssh."""

    def __init__(self, statuses: dict[str, int] | None = None) -> None:
        self.statuses = statuses or {}
        self.sessions: list[tuple[str, str, str | None]] = []

    def run(self, username: str, host: str, command: str | None) -> int:
        self.sessions.append((username, host, command))
        return self.statuses.get(host, 0)


def _instance(host: str, role: Role, env: str, name: str | None = None) -> Instance:
    return Instance(public_hostname=host, role=role, environment_name=env, name=name)


def build_catalog_records() -> tuple[list[Application], list[Environment]]:
    apps = [
        Application("shop", SHOP_REPO),
        Application("blog", BLOG_REPO),
        Application("admin", "https://github.com/acme/admin"),
    ]
    environments = [
        Environment(
            "shop_production",
            app_names=("shop",),
            default_branch="main",
            instances=(
                _instance("h1", Role.APP_MASTER, "shop_production"),
                _instance("h2", Role.DB_SLAVE, "shop_production"),
                _instance("h3", Role.APP, "shop_production"),
                _instance("h4", Role.DB_MASTER, "shop_production"),
                _instance("u1", Role.UTIL, "shop_production", "foo"),
                _instance("u2", Role.UTIL, "shop_production", "bar"),
            ),
        ),
        Environment(
            "shop_staging",
            app_names=("shop",),
            instances=(_instance("s1", Role.SOLO, "shop_staging"),),
        ),
        Environment(
            "blog_production",
            app_names=("blog",),
            username="blogger",
            instances=(_instance("b1", Role.SOLO, "blog_production"),),
            logs=(
                LogEntry("b1", main="main output", custom="custom output"),
                LogEntry("b2", main=None, custom=None),
            ),
        ),
        Environment("sandbox", app_names=()),
    ]
    return apps, environments


@pytest.fixture()
def fake_api() -> FakeAPI:
    apps, environments = build_catalog_records()
    return FakeAPI(apps, environments)


@pytest.fixture()
def catalog(fake_api: FakeAPI) -> ResourceCatalog:
    return ResourceCatalog(fake_api)


CATALOG_YAML = f"""
apps:
  - name: shop
    repository_uri: {SHOP_REPO}
  - name: blog
    repository_uri: {BLOG_REPO}
environments:
  - name: shop_production
    apps: [shop]
    default_branch: main
    instances:
      - {{public_hostname: h1, role: app_master}}
      - {{public_hostname: h2, role: db_slave}}
      - {{public_hostname: u1, role: util, name: foo}}
      - {{public_hostname: u2, role: util, name: bar}}
  - name: shop_staging
    apps: [shop]
    failing: [rollback]
    serverside: upgrading
    instances:
      - {{public_hostname: s1, role: solo}}
  - name: blog_production
    apps: [blog]
    instances:
      - {{public_hostname: b1, role: solo}}
    logs:
      - instance_name: b1
        main: main output
        custom: custom output
"""
