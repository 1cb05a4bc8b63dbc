"""Logging setup for the raymarcher package.

Every module logs through ``logging.getLogger(__name__)``, so all records end
up under the ``raymarcher`` logger configured here.

Example:
    >>> import logging
    >>> from raymarcher.logging_config import setup_logging
    >>> setup_logging(logging.DEBUG, log_file="render.log")
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "raymarcher"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> None:
    """Configure console (and optional file) output for the package logger.

    Calling it again replaces the previous handlers.

    Args:
        level: Logging level, e.g. logging.DEBUG or logging.INFO.
        log_file: Optional path of a log file, overwritten on each call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug(f"Logging configured at level {logging.getLevelName(level)}")
