"""Tests for utility functions."""

import logging
from pathlib import Path

from ghrun.core.utils import LOGGER_NAME, get_log_level, make_branch_name, setup_logger


def _close(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_make_branch_name_uses_millis():
    """Test the branch name is derived from the clock in milliseconds."""
    assert make_branch_name(lambda: 1700000000.123) == "ghrun-workflow-1700000000123"


def test_make_branch_name_default_clock():
    """Test the default clock produces a prefixed name."""
    assert make_branch_name().startswith("ghrun-workflow-")


def test_get_log_level(monkeypatch):
    """Test level parsing, including WARN and invalid values."""
    monkeypatch.setenv("GHRUN_LOG_LEVEL", "debug")
    assert get_log_level() == logging.DEBUG
    monkeypatch.setenv("GHRUN_LOG_LEVEL", "WARN")
    assert get_log_level() == logging.WARNING
    monkeypatch.setenv("GHRUN_LOG_LEVEL", "chatty")
    assert get_log_level() == logging.INFO
    monkeypatch.delenv("GHRUN_LOG_LEVEL")
    assert get_log_level() == logging.INFO


def test_setup_logger(tmp_path: Path) -> None:
    """Test logger setup writes a log file and adds two handlers."""
    logger = setup_logger(log_dir=str(tmp_path))
    try:
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        logging.getLogger("ghrun.core.workflow").debug("Debug message")
        content = (tmp_path / "ghrun.log").read_text()
        assert "Debug message" in content
        assert "[DEBUG]" in content
    finally:
        _close(logger)


def test_setup_logger_env_dir(tmp_path: Path, monkeypatch) -> None:
    """Test GHRUN_LOG_DIR selects the log directory."""
    monkeypatch.setenv("GHRUN_LOG_DIR", str(tmp_path / "logs"))
    logger = setup_logger()
    try:
        assert (tmp_path / "logs" / "ghrun.log").exists()
    finally:
        _close(logger)
