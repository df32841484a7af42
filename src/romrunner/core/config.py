"""Configuration system for the launcher.

Provides configuration loading, merging, and validation with precedence:
1. Environment variables (highest)
2. Project config (.romrunner/config.json)
3. User profile (~/.romrunner/profiles/<name>.json)
4. Defaults (lowest)
"""

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from romrunner.core.exceptions import ConfigurationError


@dataclass
class LauncherConfig:
    """Settings for launching external programs.

    launch_cmd is the command template used when the caller does not supply
    one; start_timeout_s bounds how long process creation may take.
    """

    launch_cmd: str = ""
    start_timeout_s: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.launch_cmd, str):
            raise ConfigurationError(
                f"launch_cmd must be a string, got {type(self.launch_cmd).__name__}",
                key="launch_cmd",
            )
        if isinstance(self.start_timeout_s, bool) or not isinstance(
            self.start_timeout_s, int | float
        ):
            raise ConfigurationError(
                f"start_timeout_s must be a number, got {self.start_timeout_s!r}",
                key="start_timeout_s",
            )
        if self.start_timeout_s <= 0:
            raise ConfigurationError(
                f"start_timeout_s must be > 0, got {self.start_timeout_s}",
                key="start_timeout_s",
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LauncherConfig":
        """Create config from dictionary, ignoring unknown keys."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def _load_json_config(path: Path, label: str) -> LauncherConfig:
    try:
        with path.open() as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {label}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to load {label}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{label} must contain a JSON object")
    return LauncherConfig.from_dict(data)


def load_user_config(profile_name: str = "default") -> LauncherConfig:
    """Load user configuration from ~/.romrunner/profiles/<name>.json.

    Args:
        profile_name: Name of profile to load (default: "default")

    Returns:
        LauncherConfig loaded from profile, or default config if not found

    Raises:
        ConfigurationError: If profile file is invalid
    """
    profile_path = Path.home() / ".romrunner" / "profiles" / f"{profile_name}.json"

    if not profile_path.exists():
        return LauncherConfig()

    return _load_json_config(profile_path, f"profile {profile_name}")


def load_project_config(project_root: Path | None = None) -> LauncherConfig | None:
    """Load project-specific configuration from .romrunner/config.json.

    Args:
        project_root: Directory containing .romrunner/config.json
                     (default: current directory)

    Returns:
        LauncherConfig if config file exists, None otherwise

    Raises:
        ConfigurationError: If config file is invalid
    """
    if project_root is None:
        project_root = Path.cwd()

    config_path = project_root / ".romrunner" / "config.json"

    if not config_path.exists():
        return None

    return _load_json_config(config_path, "project config")


def load_env_overrides() -> dict[str, Any]:
    """Load configuration overrides from environment variables.

    Supported environment variables:
    - ROMRUNNER_LAUNCH_CMD: Default launch command template
    - ROMRUNNER_START_TIMEOUT: Process start timeout in seconds

    Returns:
        Dictionary of configuration overrides
    """
    overrides: dict[str, Any] = {}

    if launch_cmd := os.getenv("ROMRUNNER_LAUNCH_CMD"):
        overrides["launch_cmd"] = launch_cmd

    if timeout_str := os.getenv("ROMRUNNER_START_TIMEOUT"):
        try:
            overrides["start_timeout_s"] = float(timeout_str)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid ROMRUNNER_START_TIMEOUT: {timeout_str}", key="start_timeout_s"
            ) from e

    return overrides


def merge_configs(
    base: LauncherConfig,
    project: LauncherConfig | None = None,
    env_overrides: dict[str, Any] | None = None,
) -> LauncherConfig:
    """Merge configurations with precedence: env > project > base.

    Project values equal to the defaults are treated as unset.
    """
    merged = base.to_dict()
    defaults = LauncherConfig().to_dict()

    if project:
        for key, value in project.to_dict().items():
            if value != defaults.get(key):
                merged[key] = value

    if env_overrides:
        merged.update(env_overrides)

    return LauncherConfig.from_dict(merged)


def load_config(profile_name: str = "default", project_root: Path | None = None) -> LauncherConfig:
    """Load and merge all configuration sources.

    Raises:
        ConfigurationError: If any config source is invalid
    """
    base_config = load_user_config(profile_name)
    project_config = load_project_config(project_root)
    env_overrides = load_env_overrides()

    return merge_configs(base_config, project_config, env_overrides)
