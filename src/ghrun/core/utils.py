"""Utility functions for ghrun."""

import logging
import os
import sys
import time
from typing import Callable, Optional

LOGGER_NAME = "ghrun"
BRANCH_PREFIX = "ghrun-workflow"


def make_branch_name(clock: Callable[[], float] = time.time) -> str:
    """Generate an ephemeral branch name from the current time in milliseconds."""
    return f"{BRANCH_PREFIX}-{int(clock() * 1000)}"


def get_log_level() -> int:
    """Get log level from GHRUN_LOG_LEVEL environment variable.

    Supports: DEBUG, INFO, WARNING (or WARN), ERROR (case-insensitive).
    Defaults to INFO if not set or invalid.

    Returns:
        Logging level constant
    """
    level_str = os.environ.get("GHRUN_LOG_LEVEL", "INFO").upper()
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARN": logging.WARNING,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
    }
    return level_map.get(level_str, logging.INFO)


def setup_logger(log_dir: Optional[str] = None) -> logging.Logger:
    """Set up the package logger writing to both stderr and a log file.

    The file always captures DEBUG. The console level follows GHRUN_LOG_LEVEL.
    Console output goes to stderr so stdout stays free for result payloads.

    Args:
        log_dir: Directory for ghrun.log (default: GHRUN_LOG_DIR or ./log)

    Returns:
        Configured logger instance
    """
    log_dir = log_dir or os.environ.get("GHRUN_LOG_DIR", os.path.join(os.getcwd(), "log"))
    os.makedirs(log_dir, exist_ok=True, mode=0o755)
    log_file = os.path.join(log_dir, "ghrun.log")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Clear any existing handlers to avoid duplicates
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    file_handler = logging.FileHandler(log_file, mode="a")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(get_log_level())
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    logger.info("ghrun logger initialized")
    logger.debug("Log file: %s", log_file)

    return logger
