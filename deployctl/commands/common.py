"""Shared CLI application, console and helpers for command modules."""

from __future__ import annotations

# ruff: noqa: F401
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from typer.core import TyperCommand

from deployctl import __version__
from deployctl.core.api import SnapshotAPI, default_catalog_path
from deployctl.core.catalog import ResourceCatalog
from deployctl.core.config import load_config, parse_key_value_pairs, split_names
from deployctl.core.dispatcher import CommandDispatcher, DeployRequest
from deployctl.core.errors import DeployctlError
from deployctl.core.help_table import BANNER_BASE, find_command, grouped_rows
from deployctl.core.instances import InstanceFilter
from deployctl.core.repo import LocalRepo
from deployctl.core.sessions import SshSessionRunner
from deployctl.logging_utils import configure_logging, default_log_file, get_logger
from deployctl.ui import TerminalUI

LOGGER = get_logger()

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()


def _version_callback(value: bool) -> None:
    """Print package version and exit when requested."""
    if value:
        console.print(f"{BANNER_BASE} version {__version__}", highlight=False)
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=_version_callback,
            is_eager=True,
            help="Print version number and exit.",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(help="Write a debug log of this run to the given file."),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log at debug level."),
    ] = False,
) -> None:
    """Deploy and operate applications on the hosting control plane."""
    del version
    resolved_log_file = log_file or default_log_file()
    if resolved_log_file is not None:
        configure_logging(log_file=resolved_log_file, verbose=debug)


def fill_optional_values(args: list[str], options: Mapping[str, str]) -> list[str]:
    """Give a bare optional-value option an explicit empty value.

    ``options`` maps each accepted spelling to its long name. The option
    keeps the following token as its value unless that token is another
    option or the list ends, in which case it becomes ``--long-name=``.
    """
    filled: list[str] = []
    for index, arg in enumerate(args):
        if arg == "--":
            filled.extend(args[index:])
            break
        long_name = options.get(arg)
        if long_name is None:
            filled.append(arg)
            continue
        following = args[index + 1] if index + 1 < len(args) else None
        if following is None or following.startswith("-"):
            filled.append(f"{long_name}=")
        else:
            filled.append(long_name)
    return filled


class OptionalValueCommand(TyperCommand):
    """Command whose ``optional_values`` options may be given without a value."""

    optional_values: dict[str, str] = {}

    def parse_args(self, ctx: Any, args: list[str]) -> list[str]:
        return super().parse_args(ctx, fill_optional_values(args, self.optional_values))


def _create_dispatcher(*, verbose: bool = False) -> CommandDispatcher:
    """Wire the dispatcher to the working directory and configured catalog."""
    repo = LocalRepo()
    search_dirs = [repo.path]
    toplevel = repo.toplevel()
    if toplevel is not None and toplevel not in search_dirs:
        search_dirs.append(toplevel)
    config = load_config(search_dirs)
    if config.source is not None:
        LOGGER.debug("Loaded project configuration", extra={"source": str(config.source)})
    api = SnapshotAPI(default_catalog_path())
    return CommandDispatcher(
        catalog=ResourceCatalog(api),
        repo=repo,
        config=config,
        ui=TerminalUI(verbose=verbose),
        sessions=SshSessionRunner(),
    )


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Render resolution and remote errors and exit non-zero."""
    try:
        yield
    except DeployctlError as exc:
        LOGGER.error(
            "Command failed",
            extra={"error_type": type(exc).__name__, "error": str(exc)},
        )
        TerminalUI().error(str(exc))
        raise typer.Exit(code=1) from exc


def _migrate_value(migrate: str | None, no_migrate: bool) -> bool | str | None:
    """Map -m/--migrate[=CMD] and --no-migrate onto the deploy option."""
    if no_migrate:
        if migrate is not None:
            raise typer.BadParameter("--migrate and --no-migrate cannot be combined.")
        return False
    if migrate is None:
        return None
    return migrate.strip() or True


def _parse_hook_options(raw_values: list[str] | None) -> dict[str, str]:
    """Parse --extra-deploy-hook-options values."""
    try:
        return parse_key_value_pairs(raw_values or [], "extra_deploy_hook_options")
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


__all__ = [name for name in globals() if not name.startswith("__")]
