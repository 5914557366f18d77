# kite/utils/logging_config.py
"""kite.utils.logging_config
===========================

Logging configuration for the Kite editor.

While curses owns the terminal nothing useful can be printed to the screen,
so the editor logs to files. This module defines the global logger objects
and `setup_logging`, which attaches handlers according to the ``[logging]``
section of the configuration.

Handlers:
    - Rotating file log for general application events (``kite.log`` by default).
    - Optional console log to stderr (off by default, only useful when the
      editor is launched with its stderr redirected).
    - Optional separate ``error.log`` for ERROR and CRITICAL events.
    - Optional key event trace (``keytrace.log``) enabled via the
      ``KITE_KEYTRACE`` environment variable.

Globals:
    logger: Main application logger ("kite").
    KEY_LOGGER: Logger for decoded key tokens ("kite.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# These logger objects exist at import time but stay silent
# until ``setup_logging()`` attaches handlers.
logger = logging.getLogger("kite")
KEY_LOGGER = logging.getLogger("kite.keyevents")

FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"


def _rotating_handler(
    filename: str, max_bytes: int, backups: int
) -> logging.handlers.RotatingFileHandler:
    log_dir = os.path.dirname(filename)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)
    return logging.handlers.RotatingFileHandler(
        filename, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
    )


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Only the ``["logging"]`` sub-section of ``config`` is consulted:

    - ``file_level`` (str): level for the main log file. Default ``"DEBUG"``.
    - ``console_level`` (str): level for stderr output. Default ``"WARNING"``.
    - ``log_to_console`` (bool): enable the console handler. Default ``False``.
    - ``separate_error_log`` (bool): also write ``error.log``. Default ``False``.
    - ``log_file`` (str): main log file path. Default ``"kite.log"``.

    Existing handlers on the root logger are replaced, so calling this more
    than once (e.g. from tests) does not duplicate records. The function
    never raises; handler setup failures are reported to stderr and logging
    continues with whatever could be configured.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})
    log_filename = logging_config.get("log_file", "kite.log")
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    file_formatter = logging.Formatter(FILE_FORMAT)
    file_handler = None
    try:
        file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5)
    except OSError as e_fh:
        print(
            f"Error setting up file logger for '{log_filename}': {e_fh}.", file=sys.stderr
        )
        log_filename = os.path.join(tempfile.gettempdir(), "kite.log")
        print(f"Logging to temporary file: '{log_filename}'", file=sys.stderr)
        try:
            file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5)
        except OSError as e_tmp:
            print(f"File logging disabled: {e_tmp}", file=sys.stderr)
    if file_handler:
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)

    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s")
        )
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        try:
            error_file_handler = _rotating_handler("error.log", 1024 * 1024, 3)
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)
        except OSError as e_efh:
            print(f"Error setting up separate error log 'error.log': {e_efh}.", file=sys.stderr)

    root_logger = logging.getLogger()
    root_logger.handlers = []
    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)
    root_logger.setLevel(log_file_level)

    # Key tracing goes to its own file and never reaches the main log
    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    KEY_LOGGER.handlers = []
    KEY_LOGGER.disabled = False

    if os.environ.get("KITE_KEYTRACE", "").lower() in {"1", "true", "yes"}:
        try:
            key_trace_handler = _rotating_handler("keytrace.log", 1024 * 1024, 3)
            key_trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            KEY_LOGGER.addHandler(key_trace_handler)
            logging.info("Key event tracing enabled, logging to 'keytrace.log'.")
        except OSError as e_keytrace:
            logging.error(f"Failed to set up key trace logging: {e_keytrace}", exc_info=True)
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
