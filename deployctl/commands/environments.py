"""CLI command registrations."""

from __future__ import annotations

# mypy: ignore-errors
# ruff: noqa: B008,F403,F405,I001
from deployctl.commands.common import *


@app.command("environments")
def environments(
    all_environments: Annotated[
        bool,
        typer.Option("--all", "-a", help="List environments for every application."),
    ] = False,
    simple: Annotated[
        bool,
        typer.Option("--simple", "-s", help="Print environment names only."),
    ] = False,
) -> None:
    """List environments for this app; use --all to list all environments."""
    with _reported_errors():
        _create_dispatcher().environments(all_apps=all_environments, simple=simple)


app.command("envs", hidden=True, help="Alias for environments.")(environments)


@app.command("logs")
def logs(
    environment: Annotated[
        str | None,
        typer.Option("--environment", "-e", help="Environment with the interesting logs."),
    ] = None,
) -> None:
    """Retrieve the latest logs for an environment."""
    with _reported_errors():
        _create_dispatcher().logs(environment)
