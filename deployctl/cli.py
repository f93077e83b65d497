"""Command-line interface for deployctl."""

from __future__ import annotations

# ruff: noqa: F401
from deployctl.commands import deploy, environments, meta, servers
from deployctl.commands.common import app

if __name__ == "__main__":
    app()
