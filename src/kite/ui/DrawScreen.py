# kite/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen renders the Kite editor with curses.

It is responsible for:
- drawing the visible part of the buffer with syntax colors,
- showing the current selection in reverse video,
- showing control characters as inverted ``@``/letter symbols,
- filling rows past the end of the file with ``~`` and showing the welcome
  line on an empty buffer,
- the status bar (file name, line count, modified flag, file type, cursor line),
- the message bar (transient status messages),
- placing the terminal cursor.

The highlight engine only produces semantic tokens (`HighlightToken`). The
mapping from tokens to terminal colors lives here and is read from the
``[colors]`` configuration section; values may be curses color names or
``#rrggbb`` strings, which are mapped to the nearest xterm-256 color.
"""

import curses
import logging
import time
from typing import TYPE_CHECKING, Any, Optional

from kite.core.Row import Row
from kite.core.Selection import contains
from kite.core.Syntax import HighlightToken
from kite.utils.utils import KITE_VERSION, hex_to_xterm

if TYPE_CHECKING:
    from kite.core.Kite import Kite


COLOR_NAMES = {
    "black": "COLOR_BLACK",
    "red": "COLOR_RED",
    "green": "COLOR_GREEN",
    "yellow": "COLOR_YELLOW",
    "blue": "COLOR_BLUE",
    "magenta": "COLOR_MAGENTA",
    "cyan": "COLOR_CYAN",
    "white": "COLOR_WHITE",
}


## ================= class DrawScreen ==============================
class DrawScreen:
    """DrawScreen Class
    =========================
    Draws one frame of the editor: text rows, status bar and message bar.

    Attributes:
        MIN_WINDOW_WIDTH (int): Minimum usable width of the terminal.
        MIN_WINDOW_HEIGHT (int): Minimum usable height of the terminal.
        editor (Kite): The editor being drawn.
        config (dict): Editor configuration; only ``[colors]`` is read here.
        stdscr: The curses window.
        token_attrs (dict[HighlightToken, int]): curses attribute per token,
            filled on first draw.
    """

    MIN_WINDOW_WIDTH = 20
    MIN_WINDOW_HEIGHT = 3

    def __init__(self, editor: "Kite", config: dict[str, Any]) -> None:
        self.editor = editor
        self.config = config
        self.stdscr = editor.stdscr
        self.token_attrs: dict[HighlightToken, int] = {}
        self._colors_ready = False

    # ---------------------- Colors --------------------
    def _resolve_color(self, value: Any) -> int:
        """Turns a configured color into a curses color number (-1 = terminal default)."""
        if not isinstance(value, str) or value.lower() in ("", "default", "none"):
            return -1
        value = value.lower()
        if value.startswith("#"):
            if curses.COLORS >= 256:
                return hex_to_xterm(value)
            logging.debug(f"Terminal has {curses.COLORS} colors; '{value}' falls back to white")
            return curses.COLOR_WHITE
        if value in COLOR_NAMES:
            return getattr(curses, COLOR_NAMES[value])
        logging.warning(f"Unknown color '{value}' in [colors]; using the terminal default")
        return -1

    def _init_colors(self) -> None:
        """Creates one color pair per highlight token."""
        self._colors_ready = True
        self.token_attrs = {token: curses.A_NORMAL for token in HighlightToken}
        try:
            if not curses.has_colors():
                return
            curses.start_color()
            try:
                curses.use_default_colors()
            except curses.error:
                pass
        except curses.error as exc:
            logging.warning("Color initialisation failed (%s); drawing without colors", exc)
            return

        colors = self.config.get("colors", {})
        for token in HighlightToken:
            if token == HighlightToken.NORMAL:
                continue
            fg = self._resolve_color(colors.get(token.name.lower()))
            pair = int(token) + 1
            try:
                curses.init_pair(pair, fg, -1)
                self.token_attrs[token] = curses.color_pair(pair)
            except curses.error as exc:
                logging.warning("init_pair failed for %s (%s)", token.name, exc)
        match_attr = self.token_attrs.get(HighlightToken.MATCH, curses.A_NORMAL)
        self.token_attrs[HighlightToken.MATCH] = match_attr | curses.A_BOLD

    # ---------------------- Frame --------------------
    @property
    def screenrows(self) -> int:
        height, _ = self.stdscr.getmaxyx()
        return max(0, height - 2)

    def draw(self) -> None:
        """Draws a complete frame and pushes it to the terminal."""
        try:
            height, width = self.stdscr.getmaxyx()
            if height < self.MIN_WINDOW_HEIGHT or width < self.MIN_WINDOW_WIDTH:
                self._show_small_window_error(height, width)
                return
            if not self._colors_ready:
                self._init_colors()

            screenrows = height - 2
            self.editor.buffer.scroll(screenrows, width)

            self.stdscr.erase()
            self._draw_rows(screenrows, width)
            self._draw_status_bar(screenrows, width)
            self._draw_message_bar(screenrows + 1, width)
            self._position_cursor()
            self._update_display()
        except curses.error as e:
            logging.error(f"Curses error in DrawScreen.draw(): {e}", exc_info=True)

    def _show_small_window_error(self, height: int, width: int) -> None:
        msg = f"Window too small ({width}x{height})"
        try:
            self.stdscr.erase()
            self.stdscr.addstr(0, 0, msg[: max(0, width - 1)])
            self._update_display()
        except curses.error:
            pass

    def _draw_rows(self, screenrows: int, width: int) -> None:
        buffer = self.editor.buffer
        for y in range(screenrows):
            filerow = y + buffer.rowoff
            row = buffer.row_at(filerow)
            if row is None:
                if buffer.numrows == 0 and y == screenrows // 3:
                    self._draw_welcome(y, width)
                else:
                    self._put(y, 0, "~", curses.A_NORMAL)
                continue
            self._draw_row(y, row, width)

    def _draw_welcome(self, y: int, width: int) -> None:
        welcome = f"Kite editor -- version {KITE_VERSION}"[:width]
        padding = (width - len(welcome)) // 2
        line = ("~" + " " * (padding - 1) if padding else "") + welcome
        self._put(y, 0, line, curses.A_NORMAL)

    @staticmethod
    def _render_columns(row: Row, tab_stop: int) -> list[int]:
        """Logical column of each rendered cell of ``row``."""
        columns: list[int] = []
        for cx, ch in enumerate(row.chars):
            if ch == "\t":
                columns.extend([cx] * (tab_stop - len(columns) % tab_stop))
            else:
                columns.append(cx)
        return columns

    def _draw_row(self, y: int, row: Row, width: int) -> None:
        """Draws the visible slice of one row, grouping cells with equal attributes."""
        buffer = self.editor.buffer
        start = buffer.coloff
        end = min(row.rsize, start + width)
        if start >= end:
            return

        selection = buffer.selection
        columns = self._render_columns(row, buffer.tab_stop) if selection else []

        run_text: list[str] = []
        run_attr: Optional[int] = None
        run_x = 0
        for rx in range(start, end):
            ch = row.render[rx]
            token = row.hl[rx] if rx < len(row.hl) else HighlightToken.NORMAL
            attr = self.token_attrs.get(token, curses.A_NORMAL)
            if ord(ch) < 32 or ord(ch) == 127:
                ch = chr(64 + ord(ch)) if ord(ch) <= 26 else "?"
                attr = curses.A_REVERSE
            if selection is not None and contains(selection, row.idx, columns[rx]):
                attr = attr | curses.A_REVERSE

            if attr != run_attr and run_text:
                self._put(y, run_x, "".join(run_text), run_attr)
                run_text = []
            if not run_text:
                run_x = rx - start
                run_attr = attr
            run_text.append(ch)
        if run_text:
            self._put(y, run_x, "".join(run_text), run_attr)

    def _draw_status_bar(self, y: int, width: int) -> None:
        editor = self.editor
        buffer = editor.buffer
        name = editor.filename or "[No Name]"
        left = f"{name[:20]} - {buffer.numrows} lines{' (modified)' if buffer.dirty else ''}"
        filetype = buffer.profile.filetype if buffer.profile else "no ft"
        right = f"{filetype} | {buffer.cy + 1}/{buffer.numrows}"

        left = left[:width]
        gap = width - len(left) - len(right)
        line = left + (" " * gap + right if gap >= 0 else " " * (width - len(left)))
        self._put(y, 0, line, curses.A_REVERSE)

    def _draw_message_bar(self, y: int, width: int) -> None:
        message = self.editor.status_message
        if message and time.time() - self.editor.status_time < self.editor.status_timeout:
            self._put(y, 0, message[:width], curses.A_NORMAL)

    def _position_cursor(self) -> None:
        buffer = self.editor.buffer
        try:
            self.stdscr.move(buffer.cy - buffer.rowoff, buffer.rx - buffer.coloff)
        except curses.error as e:
            logging.debug(f"Cursor placement failed: {e}")

    def _put(self, y: int, x: int, text: str, attr: int) -> None:
        """addstr that tolerates writing into the bottom-right cell."""
        try:
            self.stdscr.addstr(y, x, text, attr)
        except curses.error:
            pass

    def _update_display(self) -> None:
        self.stdscr.noutrefresh()
        curses.doupdate()
