"""Tests for the typer command line application."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from duplicity_front import cli, command


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def recording_runner(monkeypatch: pytest.MonkeyPatch, runner):
    monkeypatch.setattr(command, "ProcessRunner", lambda logger: runner)
    return runner


def test_backup_dry_run(cli_runner: CliRunner, config_file: Path, runner) -> None:
    result = cli_runner.invoke(
        cli, ["--config", str(config_file), "--dry-run", "backup", "mail"]
    )

    assert result.exit_code == 0, result.output
    assert runner.argvs == [
        ["duplicity", "--dry-run", "~/mail", "ssh://backup@host//mail"],
        [
            "duplicity",
            "--dry-run",
            "remove_older_than",
            "30D",
            "--force",
            "ssh://backup@host//mail",
        ],
    ]


def test_config_from_environment(
    cli_runner: CliRunner, config_file: Path, runner
) -> None:
    result = cli_runner.invoke(
        cli,
        ["collection-status", "notes", "--file-changed", "todo.md"],
        env={"DUPLICITY_FRONT_CONFIG": str(config_file)},
    )

    assert result.exit_code == 0, result.output
    assert runner.argvs == [
        [
            "duplicity",
            "collection-status",
            "--file-changed",
            "todo.md",
            "ssh://backup@host//notes",
        ]
    ]


def test_verify_options(cli_runner: CliRunner, config_file: Path, runner) -> None:
    result = cli_runner.invoke(
        cli,
        [
            "-c",
            str(config_file),
            "verify",
            "notes",
            "--compare-data",
            "--time",
            "2D",
            "--file-to-restore",
            "ideas",
        ],
    )

    assert result.exit_code == 0, result.output
    assert runner.argvs == [
        [
            "duplicity",
            "verify",
            "--compare-data",
            "--time",
            "2D",
            "--file-to-restore",
            "ideas",
            "ssh://backup@host//notes",
        ]
    ]


def test_cleanup_on_group(cli_runner: CliRunner, config_file: Path, runner) -> None:
    result = cli_runner.invoke(
        cli,
        ["-c", str(config_file), "-n", "cleanup", "documents", "--force"],
    )

    assert result.exit_code == 0, result.output
    assert runner.argvs == [
        ["duplicity", "--dry-run", "cleanup", "--force", "ssh://backup@host//notes"],
        ["duplicity", "--dry-run", "cleanup", "--force", "ssh://backup@host//mail"],
    ]


def test_list_current_files(
    cli_runner: CliRunner, config_file: Path, runner
) -> None:
    result = cli_runner.invoke(
        cli, ["-c", str(config_file), "list-current-files", "media", "--time", "1W"]
    )

    assert result.exit_code == 0, result.output
    assert runner.argvs[0][-4:] == [
        "list-current-files",
        "--time",
        "1W",
        "ssh://backup@host//media",
    ]


def test_failed_command_exits_non_zero(
    cli_runner: CliRunner, config_file: Path, runner
) -> None:
    runner.fail_on = ("ssh://backup@host//notes",)

    result = cli_runner.invoke(cli, ["-c", str(config_file), "backup", "everything"])

    assert result.exit_code == 1
    assert "status 1" in result.output
    assert len(runner.calls) == 1


def test_unknown_repository(cli_runner: CliRunner, config_file: Path, runner) -> None:
    result = cli_runner.invoke(cli, ["-c", str(config_file), "backup", "nope"])

    assert result.exit_code == 1
    assert "Repository nope could not be loaded" in result.output
    assert runner.calls == []


def test_invalid_config_runs_nothing(
    cli_runner: CliRunner, tmp_path: Path, runner
) -> None:
    config_path = tmp_path / "broken.yml"
    config_path.write_text(
        "home:\n  source: ~/\n  remote: ssh://h/b\nall:\n  sub_repositories: [home, gone]\n",
        encoding="utf-8",
    )

    result = cli_runner.invoke(cli, ["-c", str(config_path), "backup", "home"])

    assert result.exit_code == 1
    assert "Error when loading configuration" in result.output
    assert "gone" in result.output
    assert runner.calls == []


def test_missing_config(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(
        cli, ["-c", str(tmp_path / "missing.yml"), "backup", "home"]
    )

    assert result.exit_code == 1
    assert "not found" in result.output


def test_command_help_without_config(
    cli_runner: CliRunner, tmp_path: Path, runner
) -> None:
    result = cli_runner.invoke(
        cli, ["-c", str(tmp_path / "missing.yml"), "backup", "--help"]
    )

    assert result.exit_code == 0, result.output
    assert "Backup the specified repository" in result.output
    assert "not found" not in result.output
    assert runner.calls == []


def test_list(cli_runner: CliRunner, config_file: Path) -> None:
    result = cli_runner.invoke(cli, ["-c", str(config_file), "list"])

    assert result.exit_code == 0, result.output
    assert "everything: documents, media" in result.output
    assert "notes: ~/notes -> ssh://backup@host//notes" in result.output


def test_show_masks_passphrase(cli_runner: CliRunner, config_file: Path) -> None:
    result = cli_runner.invoke(cli, ["-c", str(config_file), "show", "mail"])

    assert result.exit_code == 0, result.output
    assert "remove_older_than: 30D" in result.output
    assert "hunter2" not in result.output
    assert "passphrase: '********'" in result.output
