"""Logging setup for the simulation core.

Loggers are configured from an optional YAML file. Every component gets its
logger through ``get_logger`` so per-component levels can be tuned without
touching code, and log files are rotated once per launch.

Platform-specific log locations:
    - macOS: ~/Library/Logs/FlightCore/flightcore.log
    - Linux: ~/.flightcore/logs/flightcore.log
    - Windows: %AppData%/FlightCore/Logs/flightcore.log

Setting ``FLIGHTCORE_LOG_DIR`` overrides the platform location (used by tests
and headless batch runs).

Typical usage example:
    from flightcore.core.logging_system import get_logger

    logger = get_logger(__name__)
    logger.info("Engine started at %.0f RPM", rpm)
"""

import logging
import os
import platform
import time
from pathlib import Path
from typing import Any

import yaml

LOG_DIR_ENV_VAR = "FLIGHTCORE_LOG_DIR"

_logging_config: dict[str, Any] = {}
_loggers_cache: dict[str, logging.Logger] = {}
_initialized = False


class LoggingError(Exception):
    """Raised when logging system operations fail."""


def get_platform_log_dir() -> Path:
    """Get the log directory for the current platform.

    Returns:
        ``$FLIGHTCORE_LOG_DIR`` when set, otherwise the platform default.
    """
    override = os.environ.get(LOG_DIR_ENV_VAR)
    if override:
        return Path(override)

    system = platform.system()

    if system == "Darwin":
        return Path.home() / "Library" / "Logs" / "FlightCore"
    elif system == "Windows":
        appdata = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return appdata / "FlightCore" / "Logs"
    else:
        return Path.home() / ".flightcore" / "logs"


def rotate_logs(log_dir: Path, log_filename: str = "flightcore.log", keep_count: int = 5) -> None:
    """Rotate logs on startup, keeping the last N launches.

    ``flightcore.log`` becomes ``flightcore.log.1``, older files shift up by
    one and anything beyond ``keep_count`` is deleted.

    Args:
        log_dir: Directory containing log files.
        log_filename: Base name of the log file.
        keep_count: Number of old logs to keep.
    """
    log_file = log_dir / log_filename

    if not log_file.exists():
        return

    oldest_log = log_dir / f"{log_filename}.{keep_count}"
    if oldest_log.exists():
        oldest_log.unlink()

    for i in range(keep_count - 1, 0, -1):
        old_log = log_dir / f"{log_filename}.{i}"
        if old_log.exists():
            old_log.rename(log_dir / f"{log_filename}.{i + 1}")

    log_file.rename(log_dir / f"{log_filename}.1")


def initialize_logging(
    config_path: str | Path | None = None, use_platform_dir: bool = True
) -> None:
    """Initialize the logging system.

    Args:
        config_path: Path to a logging YAML file. Defaults are used when None.
        use_platform_dir: Write logs to ``get_platform_log_dir()`` instead of
            the ``log_dir`` entry of the configuration.

    Raises:
        LoggingError: If the configuration file is missing or unreadable.
    """
    global _logging_config, _initialized

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise LoggingError(f"Logging config file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as f:
                _logging_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise LoggingError(f"Failed to load logging config: {e}") from e
    else:
        _logging_config = _get_default_config()

    if use_platform_dir:
        _logging_config["log_dir"] = str(get_platform_log_dir())

    log_dir = Path(_logging_config.get("log_dir", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    file_config = _logging_config.get("file", {})
    rotate_logs(
        log_dir,
        file_config.get("filename", "flightcore.log"),
        file_config.get("backup_count", 5),
    )

    _configure_root_logger()
    _loggers_cache.clear()

    _initialized = True


def _get_default_config() -> dict[str, Any]:
    """Get the built-in logging configuration."""
    return {
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "date_format": "%Y-%m-%d %H:%M:%S",
        "log_dir": "logs",
        "file": {
            "enabled": True,
            "filename": "flightcore.log",
            "backup_count": 5,
        },
        "console": {
            "enabled": True,
            "level": "WARNING",
        },
        "loggers": {},
    }


def _configure_root_logger() -> None:
    """Attach console and file handlers to the root logger."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()

    console_config = _logging_config.get("console", {})
    if console_config.get("enabled", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_config.get("level", "WARNING")))
        console_handler.setFormatter(_get_formatter())
        root_logger.addHandler(console_handler)

    file_config = _logging_config.get("file", {})
    if file_config.get("enabled", True):
        log_dir = Path(_logging_config.get("log_dir", "logs"))
        log_file = log_dir / file_config.get("filename", "flightcore.log")

        # Rotation already happened in initialize_logging
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_get_formatter())
        root_logger.addHandler(file_handler)


class MillisecondFormatter(logging.Formatter):
    """Formatter that appends milliseconds with a dot separator."""

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        s = time.strftime(datefmt or "%Y-%m-%d %H:%M:%S", ct)
        return f"{s}.{int(record.msecs):03d}"


def _get_formatter() -> logging.Formatter:
    fmt = _logging_config.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    datefmt = _logging_config.get("date_format", "%Y-%m-%d %H:%M:%S")
    return MillisecondFormatter(fmt, datefmt)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a component.

    Loggers are cached. A component can be given its own level (or be
    disabled) under the ``loggers`` section of the YAML configuration:

        loggers:
          flightcore.systems.engines.piston_simple:
            level: DEBUG

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        Configured logger instance.
    """
    if not _initialized:
        initialize_logging()

    if name in _loggers_cache:
        return _loggers_cache[name]

    logger = logging.getLogger(name)

    component_config = _logging_config.get("loggers", {}).get(name, {})
    if component_config.get("enabled", True):
        if "level" in component_config:
            logger.setLevel(getattr(logging, component_config["level"]))
    else:
        logger.disabled = True

    _loggers_cache[name] = logger
    return logger


def shutdown_logging() -> None:
    """Flush and close all handlers."""
    logging.shutdown()
    _loggers_cache.clear()
