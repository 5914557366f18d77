#!/usr/bin/env python3
# /kite/main.py
"""
Kite Main Entry Point
=====================

This script is the primary entry point for launching the Kite editor. It performs:
1) Path Setup: ensures the kite package is importable.
2) Configuration & Logging: loads config and initializes logging ASAP.
3) Core Import: imports the Kite class after logging is ready.
4) Curses Wrapper: safely initializes/tears down curses to avoid terminal corruption.
5) Application Run: instantiates Kite, opens the file named on the command line
   and starts its main loop.

Exit status is 0 on a normal quit and 1 when a fatal error (unreadable file,
unknown terminal size, failing terminal read) stops the editor. The error is
printed after curses has restored the terminal.
"""

from __future__ import annotations

import curses
import locale
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Any, Optional

# --- Step 1: Set up the Python Path ---
# Ensure the 'kite' package is importable for both source and bundled runs.
project_root = os.path.dirname(os.path.abspath(__file__))
src_dir = os.path.join(project_root, "src")
for candidate_dir in (src_dir, project_root):
    if os.path.isdir(os.path.join(candidate_dir, "kite")) and candidate_dir not in sys.path:
        sys.path.insert(0, candidate_dir)

# --- Step 2: Immediate Logging and Configuration Setup ---
try:
    from kite.utils.logging_config import setup_logging
    from kite.utils.utils import FatalError, load_config

    config: dict[str, Any] = load_config()
    setup_logging(config)
    logger = logging.getLogger("kite")
except Exception as e:
    # Logging is not ready; print to stderr and exit.
    print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
    import traceback
    traceback.print_exc()
    sys.exit(1)

# --- Step 3: Import the Core Application ---
try:
    from kite.core.Kite import Kite
except ImportError as e:
    logger.critical("Failed to import a critical application component: %s", e, exc_info=True)
    sys.exit(1)


def _resolve_cli_path(argv: list[str]) -> Optional[str]:
    """
    Resolve an optional CLI path from argv[1], expanded to a user path.
    The file does NOT need to exist on disk; the editor opens an empty buffer
    with that name and creates the file on the first save.
    """
    if len(argv) <= 1:
        return None
    raw = argv[1].strip()
    if not raw:
        return None
    return str(Path(raw).expanduser())


# --- Step 4: Curses Application Runner ---
def main_app_runner(stdscr: curses.window, config: dict[str, Any], file_to_open: Optional[str]) -> None:
    """
    Target for `curses.wrapper`. Instantiates the editor and runs it.

    Args:
        stdscr: Curses standard screen window provided by wrapper.
        config: Application configuration dict.
        file_to_open: Optional CLI path (may or may not exist on disk).

    Raises:
        FatalError: Propagated so that `curses.wrapper` restores the terminal
            before the error is reported.
    """
    editor = Kite(stdscr, config=config)

    # Ignore terminal suspension; ctrl-z is the undo key.
    if hasattr(signal, "SIGTSTP"):
        try:
            signal.signal(signal.SIGTSTP, signal.SIG_IGN)
        except (OSError, ValueError):
            logger.debug("Could not ignore SIGTSTP", exc_info=True)

    if file_to_open:
        editor.open_file(file_to_open)
    else:
        editor.set_status_message("HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find")

    # Start the editor main event loop (runs until editor.running is False).
    editor.run()


def start() -> None:
    """
    Initializes locale and runs the curses application via wrapper.
    """
    logger.info("Kite editor starting up...")

    # Locale is important for proper character width/encoding behavior in curses.
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    file_to_open = _resolve_cli_path(sys.argv)

    try:
        # wrapper() will set up/tear down curses safely.
        curses.wrapper(main_app_runner, config, file_to_open)
        logger.info("Kite editor shut down gracefully.")
    except FatalError as e:
        logger.critical("Fatal error: %s", e, exc_info=True)
        print(f"kite: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    start()
