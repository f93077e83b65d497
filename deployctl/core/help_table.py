"""Static command metadata used to render help text."""

from __future__ import annotations

from dataclasses import dataclass

BANNER_BASE = "deployctl"


@dataclass(frozen=True)
class CommandInfo:
    """Usage and description for one CLI command."""

    name: str
    usage: str
    summary: str
    description: str
    group: str
    aliases: tuple[str, ...] = ()


COMMANDS: tuple[CommandInfo, ...] = (
    CommandInfo(
        name="deploy",
        usage="deploy [--environment ENVIRONMENT] [--ref GIT-REF]",
        summary="Deploy specified branch, tag, or sha to specified environment.",
        description=(
            "This command must be run with the current directory containing the app to be\n"
            "deployed, unless --app is given. If ey.yml pins a default branch for the\n"
            "environment, that branch must be passed with --ref; deploying any other ref\n"
            "requires --ignore-default-branch.\n"
            "\n"
            "Migrations run with the default command when -m/--migrate is given; a\n"
            "different command can be given as its value: --migrate \"ruby migrate.rb\".\n"
            "Use --no-migrate to skip migrations."
        ),
        group="deploy",
    ),
    CommandInfo(
        name="environments",
        usage="environments [--all] [--simple]",
        summary="List environments for this app; use --all to list all environments.",
        description=(
            "By default, environments for this app are displayed. The --all option will\n"
            "display all environments, including those for this app."
        ),
        group="deploy",
        aliases=("envs",),
    ),
    CommandInfo(
        name="logs",
        usage="logs [--environment ENVIRONMENT]",
        summary="Retrieve the latest logs for an environment.",
        description=(
            "Displays configuration logs for all servers in the environment. Custom\n"
            "logs are displayed beneath the main configuration logs."
        ),
        group="deploy",
    ),
    CommandInfo(
        name="rebuild",
        usage="rebuild [--environment ENVIRONMENT]",
        summary="Rebuild specified environment.",
        description=(
            "Re-runs the main configuration on all servers. Mainly used to fix failed\n"
            "configuration of new or existing servers, or to pick up a stack update."
        ),
        group="deploy",
    ),
    CommandInfo(
        name="rollback",
        usage="rollback [--environment ENVIRONMENT]",
        summary="Rollback to the previous deploy.",
        description=(
            "Uses code from the previous deploy on the remote server(s) to restart\n"
            "application servers."
        ),
        group="deploy",
    ),
    CommandInfo(
        name="ssh",
        usage="ssh [COMMAND] [--all] [--utilities[=NAME,...]] [-e ENVIRONMENT]",
        summary="Open an ssh session to the master app server, or run a command.",
        description=(
            "If a command is supplied, it will be run, otherwise a session will be\n"
            "opened. The application master is used for environments with clusters.\n"
            "Option --all requires a command to be supplied and runs it on all servers.\n"
            "Option --utilities runs on utility servers, only those named when names\n"
            "are given: --utilities resque,sidekiq.\n"
            "\n"
            "To run a command with arguments on all servers, quote it:\n"
            "\n"
            f'  $ {BANNER_BASE} ssh "rm -f /some/file" -e my-environment --all'
        ),
        group="other",
    ),
    CommandInfo(
        name="help",
        usage="help [COMMAND]",
        summary="Describe all commands or one specific command.",
        description="Describe all commands or one specific command.",
        group="meta",
    ),
    CommandInfo(
        name="version",
        usage="version",
        summary="Print version number.",
        description="Print version number.",
        group="meta",
    ),
)

GROUP_TITLES = {"deploy": "Deploy commands:", "other": "Other commands:"}


def find_command(name: str) -> CommandInfo | None:
    """Return metadata for a command name or alias."""
    for command in COMMANDS:
        if name == command.name or name in command.aliases:
            return command
    return None


def grouped_rows() -> list[tuple[str, list[tuple[str, str]]]]:
    """Return (title, [(usage, summary)]) sections for the command overview."""
    sections: list[tuple[str, list[tuple[str, str]]]] = []
    for group, title in GROUP_TITLES.items():
        rows = [
            (f"{BANNER_BASE} {command.usage}", command.summary)
            for command in COMMANDS
            if command.group == group
        ]
        if rows:
            sections.append((title, rows))
    return sections
