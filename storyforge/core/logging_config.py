"""
StoryForge Logging Configuration

Every module logs under the "storyforge" namespace via get_logger. The CLI
configures console output and, when verbose logging is enabled in config, a
timestamped session log in the configured logs directory.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional
from enum import Enum


class LogLevel(Enum):
    """Log level enumeration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
VERBOSE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(funcName)s | %(message)s"

ROOT_LOGGER_NAME = "storyforge"

# SDK transports log every request at INFO; keep them at WARNING unless debugging
LIBRARY_LOGGERS = ("google_genai", "httpx", "httpcore")

_initialized: bool = False
_log_file: Optional[Path] = None


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    log_file: Optional[Path] = None,
    verbose: bool = False,
    console_output: bool = True
) -> None:
    """
    Set up logging for the storyforge namespace.

    Args:
        level: Minimum log level to capture
        log_file: Optional path to log file
        verbose: If True, use verbose format with line numbers
        console_output: If True, output to stdout
    """
    global _initialized, _log_file

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.value)
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        VERBOSE_FORMAT if verbose else DEFAULT_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level.value)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        _log_file = Path(log_file)
        _log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(_log_file, encoding='utf-8')
        file_handler.setLevel(level.value)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    library_level = logging.DEBUG if level is LogLevel.DEBUG else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    _initialized = True
    root_logger.debug(f"Logging initialized - Level: {level.name}, Verbose: {verbose}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below the storyforge namespace.

    Args:
        name: Dotted component name, e.g. "storyboard.history"

    Returns:
        Logger named "storyforge.<name>"
    """
    if not _initialized:
        setup_logging()

    full_name = name if name.startswith(ROOT_LOGGER_NAME) else f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(full_name)


def get_log_file() -> Optional[Path]:
    """Path of the active log file, if one was configured."""
    return _log_file


def create_session_log(
    base_dir: Path,
    level: LogLevel = LogLevel.INFO,
    prefix: str = "storyforge",
) -> Path:
    """
    Route logging to a new timestamped file in ``base_dir`` (plus the console).

    Returns:
        Path to the created log file
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = Path(base_dir) / f"{prefix}_{timestamp}.log"
    setup_logging(level=level, log_file=log_file, verbose=True)
    return log_file
