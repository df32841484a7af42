"""Structured JSON logging.

Modules log through ``RomRunnerLogger(__name__)``, a key-value front end over a
child of the ``romrunner`` stdlib logger. Creating one touches neither handlers
nor the filesystem; records propagate to whatever the host configured until
``configure_logging`` installs the JSON handlers.
"""

import json
import logging
import os
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

ROOT_LOGGER_NAME = "romrunner"
LOG_FILE_NAME = "romrunner.log"


def _file_logging_disabled() -> bool:
    return os.environ.get("ROMRUNNER_DISABLE_FILE_LOGGING", "").lower() in ("1", "true", "yes")


def _parse_level(level: str) -> int:
    level_upper = level.upper()
    if level_upper == "WARN":
        level_upper = "WARNING"
    return getattr(logging, level_upper, logging.WARNING)


def configure_logging(
    log_dir: str | Path | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    level: str | None = None,
    force: bool = False,
) -> logging.Logger:
    """Install JSON handlers on the ``romrunner`` logger.

    A logger that already has handlers (ours from an earlier call, or the
    host's) is left untouched unless ``force`` is set.

    Args:
        log_dir: Directory for the rotating log file (default ~/.romrunner/logs/)
        max_bytes: Maximum size before rotation (default 10MB)
        backup_count: Number of backup files to keep (default 5)
        level: DEBUG/INFO/WARN/ERROR, falls back to ROMRUNNER_LOG_LEVEL, then WARNING
        force: Replace existing handlers

    Returns:
        The ``romrunner`` logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers and not force:
        return root

    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)

    if not _file_logging_disabled():
        directory = Path(log_dir) if log_dir is not None else Path("~/.romrunner/logs").expanduser()
        directory.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            directory / LOG_FILE_NAME,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(JSONFormatter())
    root.addHandler(console_handler)

    root.propagate = False
    # Clean exits stay quiet unless asked otherwise
    root.setLevel(_parse_level(level or os.environ.get("ROMRUNNER_LOG_LEVEL", "WARNING")))

    return root


class RomRunnerLogger:
    """Logs a message plus key-value context on a ``romrunner.*`` logger."""

    def __init__(self, name: str = ROOT_LOGGER_NAME) -> None:
        self._logger = logging.getLogger(name)

    def debug(self, msg: str, **kv: Any) -> None:
        self._logger.debug(msg, extra={"kv": kv})

    def info(self, msg: str, **kv: Any) -> None:
        self._logger.info(msg, extra={"kv": kv})

    def warn(self, msg: str, **kv: Any) -> None:
        self._logger.warning(msg, extra={"kv": kv})

    def error(self, msg: str, **kv: Any) -> None:
        self._logger.error(msg, extra={"kv": kv})


class JSONFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, then kv."""

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=UTC)
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

        log_data = {
            "timestamp": timestamp,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        kv = getattr(record, "kv", None)
        if kv:
            log_data.update(kv)

        return json.dumps(log_data, default=str)
