"""Tests for configuration system."""

import json

import pytest

from romrunner.core.config import (
    LauncherConfig,
    load_config,
    load_env_overrides,
    load_project_config,
    load_user_config,
    merge_configs,
)
from romrunner.core.exceptions import ConfigurationError


@pytest.fixture
def home(tmp_path, monkeypatch):
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.delenv("ROMRUNNER_LAUNCH_CMD", raising=False)
    monkeypatch.delenv("ROMRUNNER_START_TIMEOUT", raising=False)
    return fake_home


def write_profile(home, name, data):
    profiles = home / ".romrunner" / "profiles"
    profiles.mkdir(parents=True, exist_ok=True)
    (profiles / f"{name}.json").write_text(json.dumps(data))


def write_project_config(root, data):
    config_dir = root / ".romrunner"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.json").write_text(
        data if isinstance(data, str) else json.dumps(data)
    )


class TestLauncherConfig:
    def test_default_config(self):
        config = LauncherConfig()

        assert config.launch_cmd == ""
        assert config.start_timeout_s == 30.0

    def test_validation_timeout_not_positive(self):
        with pytest.raises(ConfigurationError, match="start_timeout_s must be > 0"):
            LauncherConfig(start_timeout_s=0)

    def test_validation_timeout_not_a_number(self):
        with pytest.raises(ConfigurationError, match="must be a number") as exc_info:
            LauncherConfig(start_timeout_s="10")

        assert exc_info.value.key == "start_timeout_s"

    def test_validation_launch_cmd_not_a_string(self):
        with pytest.raises(ConfigurationError, match="launch_cmd must be a string"):
            LauncherConfig(launch_cmd=["emu", "%ROM%"])

    def test_from_dict_ignores_unknown_keys(self):
        config = LauncherConfig.from_dict({"launch_cmd": "emu %ROM%", "theme": "dark"})

        assert config.launch_cmd == "emu %ROM%"

    def test_to_dict(self):
        assert LauncherConfig(launch_cmd="emu").to_dict() == {
            "launch_cmd": "emu",
            "start_timeout_s": 30.0,
        }


class TestLoaders:
    def test_missing_profile_gives_defaults(self, home):
        assert load_user_config("nope") == LauncherConfig()

    def test_load_profile(self, home):
        write_profile(home, "snes", {"launch_cmd": "snes9x %ROM%", "start_timeout_s": 5})

        config = load_user_config("snes")

        assert config.launch_cmd == "snes9x %ROM%"
        assert config.start_timeout_s == 5

    def test_invalid_profile_json(self, home):
        profiles = home / ".romrunner" / "profiles"
        profiles.mkdir(parents=True)
        (profiles / "broken.json").write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON in profile broken"):
            load_user_config("broken")

    def test_profile_must_be_an_object(self, home):
        write_profile(home, "list", ["emu"])

        with pytest.raises(ConfigurationError, match="must contain a JSON object"):
            load_user_config("list")

    def test_missing_project_config(self, tmp_path):
        assert load_project_config(tmp_path) is None

    def test_load_project_config(self, tmp_path):
        write_project_config(tmp_path, {"launch_cmd": "mame %BASENAME%"})

        assert load_project_config(tmp_path).launch_cmd == "mame %BASENAME%"

    def test_invalid_project_config(self, tmp_path):
        write_project_config(tmp_path, "{")

        with pytest.raises(ConfigurationError, match="Invalid JSON in project config"):
            load_project_config(tmp_path)


class TestEnvOverrides:
    def test_no_overrides(self, home):
        assert load_env_overrides() == {}

    def test_overrides(self, home, monkeypatch):
        monkeypatch.setenv("ROMRUNNER_LAUNCH_CMD", "emu %ROM%")
        monkeypatch.setenv("ROMRUNNER_START_TIMEOUT", "2.5")

        assert load_env_overrides() == {"launch_cmd": "emu %ROM%", "start_timeout_s": 2.5}

    def test_invalid_timeout(self, home, monkeypatch):
        monkeypatch.setenv("ROMRUNNER_START_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError, match="Invalid ROMRUNNER_START_TIMEOUT"):
            load_env_overrides()


class TestMerge:
    def test_project_overrides_base(self):
        merged = merge_configs(
            LauncherConfig(launch_cmd="base %ROM%", start_timeout_s=10),
            LauncherConfig(launch_cmd="project %ROM%"),
        )

        assert merged.launch_cmd == "project %ROM%"
        assert merged.start_timeout_s == 10

    def test_env_overrides_everything(self):
        merged = merge_configs(
            LauncherConfig(launch_cmd="base"),
            LauncherConfig(launch_cmd="project", start_timeout_s=3),
            {"start_timeout_s": 1.0},
        )

        assert merged.launch_cmd == "project"
        assert merged.start_timeout_s == 1.0

    def test_load_config_precedence(self, home, tmp_path, monkeypatch):
        write_profile(home, "default", {"launch_cmd": "profile %ROM%", "start_timeout_s": 8})
        project = tmp_path / "project"
        write_project_config(project, {"launch_cmd": "project %ROM%"})
        monkeypatch.setenv("ROMRUNNER_START_TIMEOUT", "4")

        config = load_config(project_root=project)

        assert config.launch_cmd == "project %ROM%"
        assert config.start_timeout_s == 4.0
