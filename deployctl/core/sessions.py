"""Remote shell sessions over ssh."""

from __future__ import annotations

import shutil
import subprocess  # nosec B404
from typing import Protocol

from deployctl.core.errors import DeployctlError


class SessionRunner(Protocol):
    """Interface for the remote shell transport."""

    def run(self, username: str, host: str, command: str | None) -> int:
        """Open a session (or run a command) on one host and return its exit status."""
        ...


class SshSessionRunner:
    """Runs the system ssh client in the foreground."""

    def __init__(self, ssh_executable: str = "ssh") -> None:
        self.ssh_executable = ssh_executable

    def run(self, username: str, host: str, command: str | None) -> int:
        """Run ssh attached to the current terminal."""
        ssh_path = shutil.which(self.ssh_executable)
        if ssh_path is None:
            raise DeployctlError(f"{self.ssh_executable} executable not found on PATH.")
        args = [ssh_path, f"{username}@{host}"]
        if command:
            args.append(command)
        completed = subprocess.run(args, check=False)  # nosec B603
        return int(completed.returncode)
