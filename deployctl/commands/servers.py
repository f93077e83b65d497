"""CLI command registrations."""

from __future__ import annotations

# mypy: ignore-errors
# ruff: noqa: B008,F403,F405,I001
from deployctl.commands.common import *


class SshCommand(OptionalValueCommand):
    optional_values = {"--utilities": "--utilities"}


@app.command("ssh", cls=SshCommand)
def ssh(
    command: Annotated[
        str | None,
        typer.Argument(help="Command to run; opens an interactive session when omitted."),
    ] = None,
    environment: Annotated[
        str | None,
        typer.Option("--environment", "-e", help="Environment to ssh into."),
    ] = None,
    all_servers: Annotated[
        bool,
        typer.Option("--all", "-a", help="Run command on all servers."),
    ] = False,
    app_servers: Annotated[
        bool,
        typer.Option("--app-servers", help="Run command on all application servers."),
    ] = False,
    db_servers: Annotated[
        bool,
        typer.Option("--db-servers", help="Run command on the database servers."),
    ] = False,
    db_master: Annotated[
        bool,
        typer.Option("--db-master", help="Run command on the master database server."),
    ] = False,
    db_slaves: Annotated[
        bool,
        typer.Option("--db-slaves", help="Run command on the slave database servers."),
    ] = False,
    utilities: Annotated[
        list[str] | None,
        typer.Option(
            "--utilities",
            metavar="[NAME,...]",
            help=(
                "Run command on the utility servers with the given names. "
                "If no names are given, run on all utility servers."
            ),
        ),
    ] = None,
) -> None:
    """Open an ssh session to the master app server, or run a command.

    Example:
        deployctl ssh "rm -f /some/file" -e my-environment --all
    """
    instance_filter = InstanceFilter.from_flags(
        all_servers=all_servers,
        app_servers=app_servers,
        db_servers=db_servers,
        db_master=db_master,
        db_slaves=db_slaves,
        utilities=split_names(utilities) if utilities is not None else None,
    )
    with _reported_errors():
        status = _create_dispatcher().ssh(command, environment, instance_filter)
    if status != 0:
        raise typer.Exit(code=status)
