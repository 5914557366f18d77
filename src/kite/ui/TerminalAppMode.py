# src/kite/ui/TerminalAppMode.py
from __future__ import annotations

import curses
import logging
from typing import Optional

from kite.utils.utils import FatalError


class TerminalAppMode:
    """
    Put the terminal into the state the editor expects:

    - Alternate screen buffer (smcup/rmcup) so the shell prompt is hidden.
    - raw + noecho + nonl, so every key including ^C, ^Q, ^S and ^Z reaches
      the editor and Enter arrives as CR.
    - keypad(False): escape sequences are delivered as bytes and decoded by
      `kite.ui.KeyDecoder`.
    - No scrolling at curses level (scrollok(False)).

    Always pair `enter(stdscr)` with `exit()` (try/finally).
    """

    def __init__(self) -> None:
        self._entered: bool = False
        self._stdscr: Optional[curses.window] = None

    def enter(self, stdscr: curses.window) -> None:
        self._stdscr = stdscr

        try:
            curses.setupterm()
        except curses.error as e:
            logging.debug("setupterm() failed or not required: %r", e)

        height, width = stdscr.getmaxyx()
        if height <= 0 or width <= 0:
            raise FatalError("Could not determine the terminal size")

        self._tputs("smcup")

        try:
            curses.raw()
        except curses.error:
            curses.cbreak()
        curses.noecho()
        curses.nonl()
        stdscr.keypad(False)

        try:
            curses.use_default_colors()
        except curses.error:
            pass

        stdscr.scrollok(False)
        stdscr.leaveok(False)
        stdscr.clearok(True)
        stdscr.erase()
        stdscr.refresh()

        self._entered = True
        logging.debug(f"TerminalAppMode: entered raw mode ({width}x{height}).")

    def exit(self) -> None:
        if not self._entered:
            return

        try:
            curses.noraw()
        except curses.error:
            try:
                curses.nocbreak()
            except curses.error:
                pass
        try:
            curses.echo()
            curses.nl()
        except curses.error:
            pass

        self._tputs("rmcup")

        self._entered = False
        logging.debug("TerminalAppMode: exited (restored terminal modes).")

    # ── helpers ───────────────────────────────────────────────────────────────

    def _tputs(self, capname: str) -> None:
        try:
            s = curses.tigetstr(capname)
            if s:
                curses.putp(s)
        except curses.error as e:
            # Missing capability (e.g. the Linux console has no alternate screen)
            logging.debug("tputs(%s) skipped: %r", capname, e)
