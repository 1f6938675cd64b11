from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from hugo_sync.cli import app

from helpers import write_file

runner = CliRunner()


def write_config(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    write_file(vault / "note.md", "tags:\n- cli\n\nBody")
    return write_file(
        tmp_path / "config.toml",
        f"""
[hugo]
path = "{(tmp_path / 'site').as_posix()}"

[convert]
description_lines = 0

[vault]
path = "{vault.as_posix()}"

[runtime]
log_dir = "{(tmp_path / 'logs').as_posix()}"
""",
    )


def test_convert_prints_without_writing(tmp_path: Path) -> None:
    config = write_config(tmp_path)
    result = runner.invoke(app, ["convert", "note.md", "--config", str(config)])
    assert result.exit_code == 0
    assert 'tags: ["cli"]' in result.output
    assert not (tmp_path / "site").exists()


def test_sync_writes_and_reports(tmp_path: Path) -> None:
    config = write_config(tmp_path)
    result = runner.invoke(app, ["sync", "note.md", "--config", str(config)])
    assert result.exit_code == 0
    assert "Sync complete. Total: 1, Success: 1, Failed: 0" in result.output
    assert (tmp_path / "site" / "content" / "posts" / "note.md").exists()


def test_sync_exit_code_on_failure(tmp_path: Path) -> None:
    config = write_config(tmp_path)
    result = runner.invoke(app, ["sync", "missing.md", "--config", str(config)])
    assert result.exit_code == 1
    assert "Failed: 1" in result.output


def test_config_command_dumps_json(tmp_path: Path) -> None:
    config = write_config(tmp_path)
    result = runner.invoke(app, ["config", "--config", str(config)])
    assert result.exit_code == 0
    assert '"description_lines": 0' in result.output


def test_sync_expands_directories(tmp_path: Path) -> None:
    config = write_config(tmp_path)
    write_file(tmp_path / "vault" / "blog" / "one.md", "One")
    write_file(tmp_path / "vault" / "blog" / "two.markdown", "Two")
    write_file(tmp_path / "vault" / "blog" / "skip.txt", "Skip")
    result = runner.invoke(app, ["sync", "blog", "--config", str(config)])
    assert result.exit_code == 0
    assert "Total: 2, Success: 2" in result.output
    posts = tmp_path / "site" / "content" / "posts"
    assert (posts / "one.md").exists()
    assert (posts / "two.markdown").exists()


def test_non_numeric_setting_is_a_configuration_error(tmp_path: Path) -> None:
    config = write_file(tmp_path / "config.toml", '[convert]\ndescription_lines = "many"\n')
    result = runner.invoke(app, ["config", "--config", str(config)])
    assert result.exit_code == 2
    assert not isinstance(result.exception, ValueError)
