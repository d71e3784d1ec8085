# termfolio/utils/logging_config.py
"""termfolio.utils.logging_config
================================

Logging configuration for the termfolio console.

It defines the global logger objects and a single setup function,
`setup_logging`, which attaches handlers to the root logger according to the
``[logging]`` section of the configuration.

Features:
    - Rotating file logging for general console events (termfolio.log).
    - Optional console logging to stderr. Off by default, because curses owns
      the terminal while the console runs.
    - Optional separate error log file (error.log) for ERROR and CRITICAL events.
    - Optional key event tracing (keytrace.log) enabled via the
      TERMFOLIO_KEYTRACE environment variable.
    - Safe reconfiguration: existing handlers are replaced, so repeated calls
      (e.g. from tests) never duplicate records.
    - Never raises; I/O errors are reported to stderr and logging continues
      with a best-effort configuration.

Globals:
    logger: Main application logger ("termfolio").
    KEY_LOGGER: Logger for decoded key events ("termfolio.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
# Created at import time, unconfigured until ``setup_logging()`` runs.
logger = logging.getLogger("termfolio")
KEY_LOGGER = logging.getLogger("termfolio.keyevents")

FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)-20s - %(message)s (%(filename)s:%(lineno)d)"
CONSOLE_FORMAT = "%(levelname)-8s - %(name)-12s - %(message)s"


def _rotating_handler(
    filename: str, level: int, max_bytes: int, backup_count: int, fmt: str
) -> Optional[logging.Handler]:
    """Builds a rotating file handler, creating the parent directory on demand.

    Returns None (after reporting to stderr) when the file cannot be opened.
    """
    log_dir = os.path.dirname(filename)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
            filename = os.path.join(tempfile.gettempdir(), os.path.basename(filename))
            print(f"Logging to temporary file: '{filename}'", file=sys.stderr)

    try:
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except Exception as e_fh:
        print(
            f"Error setting up file logger for '{filename}': {e_fh}. File logging may be impaired.",
            file=sys.stderr,
        )
        return None
    handler.setFormatter(logging.Formatter(fmt))
    handler.setLevel(level)
    return handler


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Up to four independent handlers are created:

    1. File handler – rotating ``log_file`` (default ``termfolio.log``)
       capturing everything from ``file_level`` (default DEBUG) upward.
    2. Console handler – optional ``stderr`` output at ``console_level``
       (default WARNING), enabled by ``log_to_console``.
    3. Error-file handler – optional rotating ``error.log`` that stores only
       ERROR and CRITICAL events, enabled by ``separate_error_log``.
    4. Key-event handler – rotating ``keytrace.log`` attached to the
       ``termfolio.keyevents`` logger when ``TERMFOLIO_KEYTRACE`` is set to
       ``1/true/yes``.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` sub-section is consulted.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})

    log_filename = logging_config.get("log_file", "termfolio.log")
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    file_handler = _rotating_handler(
        log_filename, log_file_level, 2 * 1024 * 1024, 5, FILE_FORMAT
    )

    console_handler = None
    if logging_config.get("log_to_console", True):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_file_handler = _rotating_handler(
            logging_config.get("error_log_file", "error.log"),
            logging.ERROR,
            1 * 1024 * 1024,
            3,
            FILE_FORMAT,
        )

    root_logger = logging.getLogger()
    root_logger.handlers = []  # avoid duplicate records on reconfiguration
    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)
    root_logger.setLevel(log_file_level)

    # Key events stay out of the main log unless tracing is requested.
    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    KEY_LOGGER.handlers = []
    KEY_LOGGER.disabled = False

    if os.environ.get("TERMFOLIO_KEYTRACE", "").lower() in {"1", "true", "yes"}:
        key_trace_handler = _rotating_handler(
            "keytrace.log", logging.DEBUG, 1 * 1024 * 1024, 3, "%(asctime)s - %(message)s"
        )
        if key_trace_handler:
            KEY_LOGGER.addHandler(key_trace_handler)
            logging.info("Key event tracing enabled, logging to 'keytrace.log'.")
        else:
            logging.error("Failed to set up key trace logging.")
            KEY_LOGGER.disabled = True
    else:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}."
        )
    if console_handler:
        logging.info(
            f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}."
        )
    if error_file_handler:
        logging.info("Error logging to 'error.log' at level: ERROR.")
