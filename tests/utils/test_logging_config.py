# tests/utils/test_logging_config.py
"""Unit tests for logging configuration utility.
=================================================

Tests for the logging setup utility in `kite.utils.logging_config`.

This module verifies that `setup_logging`:
- Creates rotating file handlers for the main log and a separate error log
  when `separate_error_log` is enabled.
- Honors the configured levels for each handler.
- Can disable console logging when `log_to_console` is set to False.
- Routes decoded key events to ``keytrace.log`` only when ``KITE_KEYTRACE``
  is set.

The tests run in a temporary working directory to avoid touching real files.
"""

import logging
import logging.handlers
import os

import pytest

from kite.utils import logging_config


@pytest.fixture(autouse=True)
def restore_logging(tmp_path, monkeypatch):
    """Runs each test in ``tmp_path`` and puts the root handlers back afterwards."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("KITE_KEYTRACE", raising=False)
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)
    for handler in logging_config.KEY_LOGGER.handlers:
        handler.close()
    logging_config.KEY_LOGGER.handlers = []


def test_setup_logging_creates_handlers() -> None:
    """`setup_logging` should add rotating file handlers with proper levels.

    Scenario:
    - Console logging is disabled.
    - Separate error log is requested.
    - File handler level is INFO.
    - Error file handler level is ERROR.
    """
    logging_config.setup_logging(
        {
            "logging": {
                "file_level": "INFO",
                "console_level": "ERROR",
                "log_to_console": False,
                "separate_error_log": True,
            }
        }
    )

    root = logging.getLogger()
    names = {type(h).__name__ for h in root.handlers}
    assert "RotatingFileHandler" in names

    # Exactly two handlers: main file + error file
    assert len(root.handlers) == 2
    assert root.handlers[0].level == logging.INFO
    assert root.handlers[1].level == logging.ERROR
    assert os.path.exists("kite.log")
    assert os.path.exists("error.log")


def test_custom_log_file_and_console(tmp_path) -> None:
    target = tmp_path / "logs" / "editor.log"
    logging_config.setup_logging(
        {"logging": {"log_file": str(target), "log_to_console": True, "console_level": "error"}}
    )

    root = logging.getLogger()
    assert target.exists()
    assert len(root.handlers) == 2
    console = [h for h in root.handlers if not isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(console) == 1
    assert console[0].level == logging.ERROR


def test_repeated_setup_does_not_duplicate_handlers() -> None:
    logging_config.setup_logging({})
    logging_config.setup_logging({})
    assert len(logging.getLogger().handlers) == 1


def test_key_trace_disabled_by_default() -> None:
    logging_config.setup_logging({})
    assert logging_config.KEY_LOGGER.disabled is True
    assert logging_config.KEY_LOGGER.propagate is False
    assert not os.path.exists("keytrace.log")


def test_key_trace_enabled_by_environment(monkeypatch) -> None:
    monkeypatch.setenv("KITE_KEYTRACE", "1")
    logging_config.setup_logging({})

    key_logger = logging_config.KEY_LOGGER
    assert key_logger.disabled is False
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in key_logger.handlers)

    key_logger.debug("ARROW_UP")
    for handler in key_logger.handlers:
        handler.flush()
    with open("keytrace.log", encoding="utf-8") as f:
        assert "ARROW_UP" in f.read()
