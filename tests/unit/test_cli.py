"""Tests for the click CLI."""

import json
import sys

import pytest
from click.testing import CliRunner

from romrunner.cli.main import cli


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("ROMRUNNER_DISABLE_FILE_LOGGING", "1")
    monkeypatch.delenv("ROMRUNNER_LAUNCH_CMD", raising=False)
    monkeypatch.delenv("ROMRUNNER_START_TIMEOUT", raising=False)
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def test_build_shows_command_and_arguments(runner):
    result = runner.invoke(cli, ["build", "/games/my game.rom", "--cmd", 'emu -f "%ROM%"'])

    assert result.exit_code == 0
    assert 'emu -f "/games/my game.rom"' in result.output
    assert "/games/my game.rom" in result.output
    assert "-f" in result.output


def test_build_uses_configured_template(runner, monkeypatch):
    monkeypatch.setenv("ROMRUNNER_LAUNCH_CMD", "mame %BASENAME%")

    result = runner.invoke(cli, ["build", "/roms/pacman.zip"])

    assert result.exit_code == 0
    assert "mame pacman" in result.output


def test_build_without_template_fails(runner):
    result = runner.invoke(cli, ["build", "/roms/pacman.zip"])

    assert result.exit_code == 1
    assert "No launch command given" in result.output


def test_launch_runs_program(runner, tmp_path):
    out = tmp_path / "argv.txt"
    script = "import sys; open(sys.argv[1], 'w').write(sys.argv[2])"
    template = f'"{sys.executable}" -c "{script}" "{out}" %ROM%'

    result = runner.invoke(cli, ["launch", "/games/my game.rom", "--cmd", template, "-v"])

    assert result.exit_code == 0
    assert out.read_text() == "/games/my game.rom"
    assert "finished" in result.output
    assert "Launch finished" in result.output


def test_launch_missing_program_is_not_a_cli_failure(runner):
    result = runner.invoke(
        cli, ["launch", "/roms/a.rom", "--cmd", "/nonexistent/emu %ROM%", "--verbose"]
    )

    assert result.exit_code == 0
    assert "failed_to_start" in result.output
    assert "Launch finished" in result.output


def test_launch_with_invalid_config(runner, monkeypatch):
    monkeypatch.setenv("ROMRUNNER_START_TIMEOUT", "later")

    result = runner.invoke(cli, ["launch", "/roms/a.rom", "--cmd", "emu"])

    assert result.exit_code == 1
    assert "ROMRUNNER_START_TIMEOUT" in result.output


def test_config_show(runner, tmp_path):
    profiles = tmp_path / ".romrunner" / "profiles"
    profiles.mkdir(parents=True)
    (profiles / "snes.json").write_text(json.dumps({"launch_cmd": "snes9x [%ROM%]"}))

    result = runner.invoke(cli, ["config", "show", "snes"])

    assert result.exit_code == 0
    assert "Launch Command: snes9x [%ROM%]" in result.output
    assert "Start Timeout: 30.0s" in result.output


def test_config_list(runner, tmp_path):
    profiles = tmp_path / ".romrunner" / "profiles"
    profiles.mkdir(parents=True)
    (profiles / "snes.json").write_text("{}")
    (profiles / "arcade.json").write_text("{}")

    result = runner.invoke(cli, ["config", "list"])

    assert result.exit_code == 0
    assert result.output.index("arcade") < result.output.index("snes")


def test_config_list_without_profiles(runner):
    result = runner.invoke(cli, ["config", "list"])

    assert result.exit_code == 0
    assert "No profiles directory found" in result.output
