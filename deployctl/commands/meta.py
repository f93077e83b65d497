"""CLI command registrations."""

from __future__ import annotations

# mypy: ignore-errors
# ruff: noqa: B008,F403,F405,I001
from deployctl import __version__
from deployctl.commands.common import *


@app.command("version")
def version() -> None:
    """Print version number."""
    console.print(f"{BANNER_BASE} version {__version__}", highlight=False)


@app.command("help")
def help_command(
    command: Annotated[
        str | None,
        typer.Argument(help="Command to describe."),
    ] = None,
) -> None:
    """Describe all commands or one specific command."""
    ui = TerminalUI()
    if command is None:
        ui.say("Usage:")
        ui.say(f"  {BANNER_BASE} [--help] [--version] COMMAND [ARGS]")
        ui.say()
        for title, rows in grouped_rows():
            ui.say(title)
            ui.print_help(rows)
            ui.say()
        ui.say(f"See '{BANNER_BASE} help COMMAND' for more information on a specific command.")
        return
    info = find_command(command)
    if info is None:
        ui.error(f"Could not find command '{command}'.")
        raise typer.Exit(code=1)
    ui.say("Usage:")
    ui.say(f"  {BANNER_BASE} {info.usage}")
    ui.say()
    ui.say(info.description)
