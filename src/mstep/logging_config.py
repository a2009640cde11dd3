"""
Logging Configuration
Sets up the package logger for the CLI and the API server.
"""

from __future__ import annotations

import logging
import sys


def parse_level(level: int | str) -> int:
    """Accept a logging level as an int or a name such as ``"debug"``."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(level: int | str = logging.WARNING, log_file: str | None = None) -> None:
    """
    Configures the logger for the 'mstep' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG or "info")
        log_file: Optional path to save logs to a file.
    """
    level = parse_level(level)
    logger = logging.getLogger("mstep")
    logger.setLevel(level)

    # Avoid duplicate handlers when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    # Console output goes to stderr so JSON on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
