"""Tests for local git repository inspection."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from deployctl.core.repo import LocalRepo

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(path: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=str(path), check=True, capture_output=True, text=True)


def test_local_repo_reads_branch_and_remotes(tmp_path: Path) -> None:
    _git(tmp_path, "init")
    _git(tmp_path, "checkout", "-b", "feature-x")
    _git(tmp_path, "remote", "add", "origin", "git@github.com:acme/shop.git")
    _git(tmp_path, "remote", "add", "mirror", "https://example.test/shop.git")

    repo = LocalRepo(tmp_path)
    assert repo.toplevel() is not None
    assert repo.current_branch() == "feature-x"
    assert repo.urls() == ["git@github.com:acme/shop.git", "https://example.test/shop.git"]


def test_local_repo_outside_git_tree(tmp_path: Path) -> None:
    repo = LocalRepo(tmp_path)
    assert repo.urls() == []
    assert repo.current_branch() is None
    assert repo.toplevel() is None
