"""CLI command registrations."""

from __future__ import annotations

# mypy: ignore-errors
# ruff: noqa: B008,F403,F405,I001
from deployctl.commands.common import *


class DeployCommand(OptionalValueCommand):
    optional_values = {"-m": "--migrate", "--migrate": "--migrate"}


@app.command("deploy", cls=DeployCommand)
def deploy(
    environment: Annotated[
        str | None,
        typer.Option("--environment", "-e", help="Environment in which to deploy this application."),
    ] = None,
    ref: Annotated[
        str | None,
        typer.Option(
            "--ref",
            "-r",
            "--branch",
            "--tag",
            help="Git ref to deploy. May be a branch, a tag, or a SHA.",
        ),
    ] = None,
    app_name: Annotated[
        str | None,
        typer.Option("--app", "-a", help="Name of the application to deploy."),
    ] = None,
    migrate: Annotated[
        str | None,
        typer.Option(
            "--migrate",
            "-m",
            metavar="[CMD]",
            help="Run migrations, with CMD instead of the default command when given.",
        ),
    ] = None,
    no_migrate: Annotated[
        bool,
        typer.Option("--no-migrate", help="Skip migrations."),
    ] = False,
    ignore_default_branch: Annotated[
        bool,
        typer.Option(
            "--ignore-default-branch",
            help="Force a deploy of the specified branch even if a default is set.",
        ),
    ] = False,
    ignore_bad_master: Annotated[
        bool,
        typer.Option(
            "--ignore-bad-master",
            help="Force a deploy even if the master is in a bad state.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Be verbose."),
    ] = False,
    extra_deploy_hook_options: Annotated[
        list[str] | None,
        typer.Option(
            "--extra-deploy-hook-options",
            help="Additional key=value options made available to deploy hooks.",
        ),
    ] = None,
) -> None:
    """Deploy specified branch, tag, or sha to specified environment.

    Example:
        deployctl deploy -e production --ref main
    """
    request = DeployRequest(
        app_name=app_name,
        env_name=environment,
        ref=ref,
        ignore_default_branch=ignore_default_branch,
        ignore_bad_master=ignore_bad_master,
        migrate=_migrate_value(migrate, no_migrate),
        verbose=verbose or None,
        extra_hook_options=_parse_hook_options(extra_deploy_hook_options),
    )
    with _reported_errors():
        _create_dispatcher(verbose=verbose).deploy(request)


@app.command("rebuild")
def rebuild(
    environment: Annotated[
        str | None,
        typer.Option("--environment", "-e", help="Environment to rebuild."),
    ] = None,
) -> None:
    """Rebuild specified environment."""
    with _reported_errors():
        _create_dispatcher().rebuild(environment)


@app.command("rollback")
def rollback(
    environment: Annotated[
        str | None,
        typer.Option(
            "--environment",
            "-e",
            help="Environment in which to roll back the application.",
        ),
    ] = None,
    app_name: Annotated[
        str | None,
        typer.Option("--app", "-a", help="Name of the application to roll back."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Be verbose."),
    ] = False,
) -> None:
    """Rollback to the previous deploy."""
    with _reported_errors():
        _create_dispatcher(verbose=verbose).rollback(app_name, environment, verbose)
