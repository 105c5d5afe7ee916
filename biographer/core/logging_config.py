"""
Biographer Logging Configuration

Namespaced logging setup shared by the API and the pipelines.
"""

import logging
import sys
from enum import Enum
from typing import Union


class LogLevel(Enum):
    """Log level enumeration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
VERBOSE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(funcName)s | %(message)s"

ROOT_LOGGER_NAME = "biographer"

_loggers: dict = {}
_initialized: bool = False


def _coerce_level(level: Union[LogLevel, str]) -> LogLevel:
    if isinstance(level, LogLevel):
        return level
    try:
        return LogLevel[str(level).upper()]
    except KeyError:
        return LogLevel.INFO


def setup_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    verbose: bool = False,
) -> None:
    """
    Set up logging for the whole application.

    Args:
        level: Minimum log level to capture (enum member or name)
        verbose: If True, include line numbers and function names
    """
    global _initialized

    level = _coerce_level(level)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.value)
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        VERBOSE_FORMAT if verbose else DEFAULT_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level.value)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    _initialized = True
    root_logger.debug(f"Logging initialized - Level: {level.name}, Verbose: {verbose}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name of the module/component (e.g. "pipelines.cartoon")

    Returns:
        Logger under the biographer namespace
    """
    if not _initialized:
        setup_logging()

    full_name = name if name.startswith(ROOT_LOGGER_NAME) else f"{ROOT_LOGGER_NAME}.{name}"

    if full_name not in _loggers:
        _loggers[full_name] = logging.getLogger(full_name)

    return _loggers[full_name]
