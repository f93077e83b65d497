"""Terminal rendering for command output."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from deployctl.core.models import Application, Environment


class TerminalUI:
    """Writes informational lines, warnings and tables to the terminal."""

    def __init__(
        self,
        console: Console | None = None,
        error_console: Console | None = None,
        *,
        verbose: bool = False,
    ) -> None:
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)
        self.verbose = verbose

    def say(self, message: str = "") -> None:
        """Print text exactly as given."""
        self.console.print(message, markup=False, highlight=False, soft_wrap=True)

    def info(self, message: str) -> None:
        """Print a status line."""
        self.console.print(message, style="bold", markup=False, highlight=False, soft_wrap=True)

    def debug(self, message: str) -> None:
        """Print a line only in verbose mode."""
        if self.verbose:
            self.console.print(message, style="dim", markup=False, highlight=False, soft_wrap=True)

    def warn(self, message: str) -> None:
        """Print a warning to stderr."""
        self.error_console.print(
            message, style="yellow", markup=False, highlight=False, soft_wrap=True
        )

    def error(self, message: str) -> None:
        """Print an error to stderr."""
        self.error_console.print(
            message, style="bold red", markup=False, highlight=False, soft_wrap=True
        )

    def print_envs(
        self,
        apps: Sequence[tuple[Application, Sequence[Environment]]],
        default_env_name: str | None,
        *,
        simple: bool = False,
    ) -> None:
        """Render applications with the environments they are linked to."""
        if simple:
            seen: list[str] = []
            for _, environments in apps:
                for env in environments:
                    if env.name not in seen:
                        seen.append(env.name)
            for name in seen:
                self.say(name)
            return
        if not apps:
            self.say("No applications to list.")
            return
        table = Table(title="Environments")
        table.add_column("Application")
        table.add_column("Environment")
        table.add_column("Instances")
        table.add_column("Default")
        for app, environments in apps:
            if not environments:
                table.add_row(app.name, "-", "-", "(not in any environment)")
                continue
            for env in environments:
                count = len(env.instances)
                table.add_row(
                    app.name,
                    env.name,
                    f"{count} instance" if count == 1 else f"{count} instances",
                    "yes" if env.name == default_env_name else "",
                )
        self.console.print(table)

    def print_help(self, rows: Sequence[tuple[str, str]]) -> None:
        """Render a usage/summary table of commands."""
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Usage", no_wrap=True)
        table.add_column("Summary")
        for usage, summary in rows:
            table.add_row(usage, summary)
        self.console.print(table)
