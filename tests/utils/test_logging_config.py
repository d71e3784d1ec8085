# tests/utils/test_logging_config.py
"""Unit tests for logging configuration utility.
=================================================

Tests for the logging setup utility in `termfolio.utils.logging_config`.

This module verifies that `setup_logging`:
- Creates rotating file handlers for the main log and a separate error log
  when `separate_error_log` is enabled.
- Honors the configured levels for each handler.
- Can disable console logging when `log_to_console` is set to False.
- Replaces handlers on reconfiguration instead of stacking them.
- Routes key events to `keytrace.log` only when TERMFOLIO_KEYTRACE is set.

The tests run in a temporary working directory to avoid touching real files.
"""

import logging
from typing import Generator

import pytest

from termfolio.utils import logging_config


@pytest.fixture(autouse=True)
def restore_logging(tmp_path, monkeypatch) -> Generator[None, None, None]:
    """Runs each test in `tmp_path` and restores the global logger state afterwards."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TERMFOLIO_KEYTRACE", raising=False)
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    key_logger = logging_config.KEY_LOGGER
    saved_key = (key_logger.handlers[:], key_logger.level, key_logger.propagate, key_logger.disabled)
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers, root.level = saved_handlers, saved_level
    for handler in key_logger.handlers:
        handler.close()
    key_logger.handlers, key_logger.level, key_logger.propagate, key_logger.disabled = saved_key


def test_setup_logging_creates_handlers(tmp_path) -> None:
    """`setup_logging` should add rotating file handlers with proper levels.

    Scenario:
    - Console logging is disabled.
    - Separate error log is requested.
    - File handler level is INFO.

    Assertions:
    - Exactly two handlers: main file (`termfolio.log`) + error file (`error.log`).
    - Handler levels match the configuration.
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
    assert names == {"RotatingFileHandler"}
    assert len(root.handlers) == 2
    assert root.handlers[0].level == logging.INFO
    assert root.handlers[1].level == logging.ERROR
    assert root.level == logging.INFO
    assert (tmp_path / "termfolio.log").exists()
    assert (tmp_path / "error.log").exists()


def test_console_handler_when_enabled() -> None:
    logging_config.setup_logging(
        {"logging": {"log_to_console": True, "console_level": "error", "file_level": "bogus"}}
    )
    root = logging.getLogger()
    stream_handlers = [
        h for h in root.handlers if type(h) is logging.StreamHandler
    ]
    assert len(stream_handlers) == 1
    assert stream_handlers[0].level == logging.ERROR
    # Unknown level names fall back to DEBUG.
    assert root.level == logging.DEBUG


def test_reconfiguration_does_not_duplicate_handlers() -> None:
    config = {"logging": {"log_to_console": False}}
    logging_config.setup_logging(config)
    logging_config.setup_logging(config)
    assert len(logging.getLogger().handlers) == 1


def test_custom_log_file_in_new_directory(tmp_path) -> None:
    target = tmp_path / "logs" / "console.log"
    logging_config.setup_logging({"logging": {"log_to_console": False, "log_file": str(target)}})
    logging.getLogger("termfolio").warning("hello")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "hello" in target.read_text(encoding="utf-8")


def test_key_trace_disabled_by_default() -> None:
    logging_config.setup_logging({"logging": {"log_to_console": False}})
    key_logger = logging_config.KEY_LOGGER
    assert key_logger.disabled
    assert not key_logger.propagate
    assert [type(h) for h in key_logger.handlers] == [logging.NullHandler]


def test_key_trace_enabled_by_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("TERMFOLIO_KEYTRACE", "yes")
    logging_config.setup_logging({"logging": {"log_to_console": False}})
    key_logger = logging_config.KEY_LOGGER
    assert not key_logger.disabled
    assert type(key_logger.handlers[0]).__name__ == "RotatingFileHandler"

    key_logger.debug("handle_key: ENTER")
    key_logger.handlers[0].flush()
    assert "handle_key: ENTER" in (tmp_path / "keytrace.log").read_text(encoding="utf-8")
