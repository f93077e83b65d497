"""Local git working directory inspection."""

from __future__ import annotations

import shutil
import subprocess  # nosec B404
from pathlib import Path
from typing import Protocol


class Repository(Protocol):
    """Interface for the local source-control collaborator."""

    def current_branch(self) -> str | None:
        """Return the checked-out branch name, if any."""
        ...

    def urls(self) -> list[str]:
        """Return the configured remote URLs."""
        ...


class LocalRepo:
    """Reads branch and remote information from a git working directory."""

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the repository root used for git commands."""
        self.path = path or Path.cwd()

    def toplevel(self) -> Path | None:
        """Return the working tree root, or None outside a repository."""
        result = self._run_git(["rev-parse", "--show-toplevel"])
        if result is None or result.returncode != 0:
            return None
        output = result.stdout.strip()
        return Path(output) if output else None

    def current_branch(self) -> str | None:
        """Return current git branch or None when unavailable (detached HEAD included)."""
        result = self._run_git(["branch", "--show-current"])
        if result is None or result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def urls(self) -> list[str]:
        """Return remote URLs in git config order, without duplicates."""
        result = self._run_git(["config", "--get-regexp", r"^remote\..*\.url$"])
        if result is None or result.returncode != 0:
            return []
        urls: list[str] = []
        for line in result.stdout.splitlines():
            parts = line.split(maxsplit=1)
            if len(parts) == 2 and parts[1] not in urls:
                urls.append(parts[1])
        return urls

    def _run_git(self, args: list[str]) -> subprocess.CompletedProcess[str] | None:
        """Run a git command in the repository directory; None when git is missing."""
        git_path = shutil.which("git")
        if git_path is None:
            return None
        return subprocess.run(  # nosec B603
            [git_path, *args],
            cwd=str(self.path),
            check=False,
            text=True,
            capture_output=True,
        )


def normalize_repo_url(url: str) -> str:
    """Normalize a repository URL for comparison."""
    cleaned = url.strip().rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]
    return cleaned
