"""Tests for the launcher factory."""

import logging
from unittest.mock import Mock

import pytest

from romrunner.core.config import LauncherConfig
from romrunner.core.events import EventBus
from romrunner.core.exceptions import ConfigurationError
from romrunner.core.factory import create_launcher
from romrunner.core.launcher import LauncherState, ProcessLauncher
from romrunner.core.logger import RomRunnerLogger


def test_create_launcher_with_config():
    bus = EventBus()
    logger = Mock(spec=RomRunnerLogger)

    launcher = create_launcher(
        config=LauncherConfig(start_timeout_s=3), event_bus=bus, logger=logger
    )

    assert isinstance(launcher, ProcessLauncher)
    assert launcher.executor.get_name() == "subprocess"
    assert launcher.executor.start_timeout_s == 3
    assert launcher.event_bus is bus
    assert launcher.logger is logger
    assert launcher.state == LauncherState.IDLE


def test_create_launcher_loads_config(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("ROMRUNNER_START_TIMEOUT", "12")

    launcher = create_launcher(project_root=tmp_path, logger=Mock(spec=RomRunnerLogger))

    assert launcher.executor.start_timeout_s == 12.0


def test_create_launcher_propagates_configuration_errors(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("ROMRUNNER_START_TIMEOUT", "-1")

    with pytest.raises(ConfigurationError, match="start_timeout_s must be > 0"):
        create_launcher(project_root=tmp_path)


def test_create_launcher_keeps_host_logging_setup(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    root = logging.getLogger("romrunner")
    saved = root.handlers[:]
    host_handler = logging.NullHandler()
    root.handlers[:] = [host_handler]

    try:
        create_launcher(config=LauncherConfig())

        assert root.handlers == [host_handler]
        assert not (tmp_path / ".romrunner").exists()
    finally:
        root.handlers[:] = saved
