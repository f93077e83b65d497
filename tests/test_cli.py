"""CLI tests for deploy, environments, ssh, logs and help commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import CATALOG_YAML, FakeSessions
from typer.testing import CliRunner

import deployctl.commands.common as common
from deployctl import __version__
from deployctl.cli import app

runner = CliRunner()


@pytest.fixture()
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    catalog_path = tmp_path / "catalog.yml"
    catalog_path.write_text(CATALOG_YAML, encoding="utf-8")
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setenv("DEPLOYCTL_CATALOG", str(catalog_path))
    monkeypatch.setenv("DEPLOYCTL_JOURNAL", str(tmp_path / "journal.jsonl"))
    monkeypatch.delenv("DEPLOYCTL_ENVIRONMENT", raising=False)
    monkeypatch.delenv("DEPLOYCTL_LOG_FILE", raising=False)
    monkeypatch.chdir(project)
    return tmp_path


def _journal(workspace: Path) -> list[dict[str, object]]:
    path = workspace / "journal.jsonl"
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_version_flag_and_command() -> None:
    flag = runner.invoke(app, ["--version"])
    command = runner.invoke(app, ["version"])
    assert flag.exit_code == 0
    assert command.exit_code == 0
    assert f"deployctl version {__version__}" in flag.output
    assert flag.output == command.output


def test_help_lists_command_groups() -> None:
    result = runner.invoke(app, ["help"])
    assert result.exit_code == 0
    assert "Deploy commands:" in result.output
    assert "Other commands:" in result.output
    assert "deployctl deploy [--environment ENVIRONMENT] [--ref GIT-REF]" in result.output


def test_help_for_single_command_and_alias() -> None:
    deploy = runner.invoke(app, ["help", "deploy"])
    alias = runner.invoke(app, ["help", "envs"])
    missing = runner.invoke(app, ["help", "launch"])
    assert deploy.exit_code == 0
    assert "--ignore-default-branch" in deploy.output
    assert "environments [--all] [--simple]" in alias.output
    assert missing.exit_code == 1
    assert "Could not find command 'launch'" in missing.output


def test_deploy_with_explicit_app_and_ref(workspace: Path) -> None:
    result = runner.invoke(
        app,
        [
            "deploy",
            "-a",
            "blog",
            "-e",
            "blog_prod",
            "-r",
            "main",
            "-m",
            "rake db:migrate",
            "--extra-deploy-hook-options",
            "tier=web",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Beginning deploy for 'blog' in 'blog_production'" in result.output
    assert "Deploy complete" in result.output
    record = _journal(workspace)[0]
    assert record["action"] == "deploy"
    assert record["ref"] == "main"
    assert record["options"] == {
        "extras": {"tier": "web"},
        "ignore_bad_master": False,
        "migrate": "rake db:migrate",
    }


def test_deploy_without_repo_reports_missing_application(workspace: Path) -> None:
    result = runner.invoke(app, ["deploy", "-e", "blog_production"])
    assert result.exit_code == 1
    assert "No application found" in result.output
    assert _journal(workspace) == []


def test_deploy_ambiguous_environment_name(workspace: Path) -> None:
    result = runner.invoke(app, ["deploy", "-a", "shop", "-e", "shop", "-r", "main"])
    assert result.exit_code == 1
    assert "ambiguous" in result.output
    assert "shop_production" in result.output
    assert "shop_staging" in result.output


def test_deploy_default_branch_conflict(workspace: Path) -> None:
    conflict = runner.invoke(
        app,
        ["deploy", "-a", "shop", "-e", "shop_production", "-r", "feature"],
    )
    forced = runner.invoke(
        app,
        [
            "deploy",
            "-a",
            "shop",
            "-e",
            "shop_production",
            "-r",
            "feature",
            "--ignore-default-branch",
        ],
    )
    assert conflict.exit_code == 1
    assert "--ignore-default-branch" in conflict.output
    assert forced.exit_code == 0, forced.output
    assert [record["ref"] for record in _journal(workspace)] == ["feature"]


def test_deploy_rejects_malformed_hook_options(workspace: Path) -> None:
    result = runner.invoke(
        app,
        ["deploy", "-a", "blog", "-r", "main", "--extra-deploy-hook-options", "broken"],
    )
    assert result.exit_code != 0
    assert _journal(workspace) == []


def test_rollback_failure_exits_non_zero(workspace: Path) -> None:
    result = runner.invoke(app, ["rollback", "-a", "shop", "-e", "shop_staging"])
    assert result.exit_code == 1
    assert "Upgrading server-side component..." in result.output
    assert "Rollback failed for 'shop' in 'shop_staging'." in result.output


def test_rebuild_journals_request(workspace: Path) -> None:
    result = runner.invoke(app, ["rebuild", "-e", "blog_production"])
    assert result.exit_code == 0, result.output
    assert _journal(workspace)[0]["action"] == "rebuild"


def test_environments_all_simple_and_alias(workspace: Path) -> None:
    result = runner.invoke(app, ["environments", "--all", "--simple"])
    alias = runner.invoke(app, ["envs", "-a", "-s"])
    assert result.exit_code == 0, result.output
    assert result.output.split() == ["shop_production", "shop_staging", "blog_production"]
    assert alias.output == result.output


def test_logs_prints_instance_sections(workspace: Path) -> None:
    result = runner.invoke(app, ["logs", "-e", "blog_production"])
    assert result.exit_code == 0, result.output
    assert "Main logs for blog_production:" in result.output
    assert "custom output" in result.output


def test_ssh_runs_command_on_selected_hosts(
    workspace: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sessions = FakeSessions(statuses={"u2": 3})
    monkeypatch.setattr(common, "SshSessionRunner", lambda: sessions)
    result = runner.invoke(app, ["ssh", "uptime", "-e", "shop_production", "--utilities=bar"])
    assert result.exit_code == 3
    assert sessions.sessions == [("deploy", "u2", "uptime")]


def test_ssh_utilities_followed_by_name_selects_named_server(
    workspace: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sessions = FakeSessions()
    monkeypatch.setattr(common, "SshSessionRunner", lambda: sessions)
    result = runner.invoke(app, ["ssh", "-e", "shop_production", "--utilities", "foo"])
    assert result.exit_code == 0, result.output
    assert sessions.sessions == [("deploy", "u1", None)]


def test_ssh_bare_utilities_selects_every_utility_server(
    workspace: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sessions = FakeSessions()
    monkeypatch.setattr(common, "SshSessionRunner", lambda: sessions)
    result = runner.invoke(app, ["ssh", "uptime", "-e", "shop_production", "--utilities"])
    before_other_flag = runner.invoke(
        app,
        ["ssh", "uptime", "--utilities", "-e", "shop_production"],
    )
    assert result.exit_code == 0, result.output
    assert before_other_flag.exit_code == 0, before_other_flag.output
    assert sessions.sessions == [
        ("deploy", "u1", "uptime"),
        ("deploy", "u2", "uptime"),
        ("deploy", "u1", "uptime"),
        ("deploy", "u2", "uptime"),
    ]


def test_ssh_utilities_comma_separated_names(
    workspace: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sessions = FakeSessions()
    monkeypatch.setattr(common, "SshSessionRunner", lambda: sessions)
    result = runner.invoke(
        app,
        ["ssh", "ls", "-e", "shop_production", "--utilities", "bar,foo"],
    )
    assert result.exit_code == 0, result.output
    assert [host for _, host, _ in sessions.sessions] == ["u1", "u2"]


@pytest.mark.parametrize(
    ("flags", "expected"),
    [
        (["-m"], True),
        (["--migrate"], True),
        (["-m", "ruby migrate.rb"], "ruby migrate.rb"),
        (["--migrate=rake db:migrate"], "rake db:migrate"),
        (["--no-migrate"], False),
    ],
)
def test_deploy_migrate_forms(
    workspace: Path,
    flags: list[str],
    expected: object,
) -> None:
    result = runner.invoke(app, ["deploy", "-a", "blog", *flags, "-r", "main"])
    assert result.exit_code == 0, result.output
    assert _journal(workspace)[0]["options"]["migrate"] == expected


def test_deploy_bare_migrate_as_last_option(workspace: Path) -> None:
    result = runner.invoke(app, ["deploy", "-a", "blog", "-r", "main", "-m"])
    assert result.exit_code == 0, result.output
    assert _journal(workspace)[0]["options"]["migrate"] is True


def test_deploy_without_migrate_flags_leaves_option_unset(workspace: Path) -> None:
    result = runner.invoke(app, ["deploy", "-a", "blog", "-r", "main"])
    assert result.exit_code == 0, result.output
    assert "migrate" not in _journal(workspace)[0]["options"]


def test_deploy_migrate_and_no_migrate_conflict(workspace: Path) -> None:
    result = runner.invoke(app, ["deploy", "-a", "blog", "-r", "main", "-m", "--no-migrate"])
    assert result.exit_code == 2
    assert _journal(workspace) == []


def test_ssh_without_command_on_all_servers_fails(
    workspace: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sessions = FakeSessions()
    monkeypatch.setattr(common, "SshSessionRunner", lambda: sessions)
    result = runner.invoke(app, ["ssh", "-e", "shop_production", "--all"])
    assert result.exit_code == 1
    assert "Must specify a command" in result.output
    assert sessions.sessions == []


def test_missing_catalog_is_reported(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEPLOYCTL_CATALOG", str(workspace / "absent.yml"))
    result = runner.invoke(app, ["environments", "--all"])
    assert result.exit_code == 1
    assert "Catalog snapshot not found" in result.output


def test_log_file_records_command_events(workspace: Path) -> None:
    log_path = workspace / "run.log"
    result = runner.invoke(
        app,
        ["--log-file", str(log_path), "--debug", "deploy", "-a", "blog", "-r", "main"],
    )
    assert result.exit_code == 0, result.output
    content = log_path.read_text(encoding="utf-8")
    assert "Deploy requested" in content
    assert "Deploy succeeded" in content


def test_fill_optional_values_rewrites_only_bare_options() -> None:
    options = {"-m": "--migrate", "--migrate": "--migrate"}
    assert common.fill_optional_values(["-m"], options) == ["--migrate="]
    assert common.fill_optional_values(["-m", "-r", "main"], options) == [
        "--migrate=",
        "-r",
        "main",
    ]
    assert common.fill_optional_values(["-m", "rake"], options) == ["--migrate", "rake"]
    assert common.fill_optional_values(["--migrate=rake"], options) == ["--migrate=rake"]
    assert common.fill_optional_values(["--", "-m"], options) == ["--", "-m"]
