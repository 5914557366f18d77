# kite/core/Buffer.py
"""
kite.core.Buffer
================

The text buffer: an ordered list of `Row` objects plus the cursor, the
viewport and the active language profile.

Row-level operations (`insert_row`, `insert_char`, `split_row`, ...) never
raise on bad coordinates. Positions are clamped to the row, and operations
addressing a row that does not exist do nothing. Every mutation keeps the
stored row indices in order, re-renders the touched row, re-classifies it
and sets `dirty`.

Cursor-level operations (`insert_char_at_cursor`, `backspace`,
`move_cursor`, ...) implement the editing commands on top of them.

Cursor invariants: ``0 <= cy <= numrows`` and ``0 <= cx <= len(row)``.
``cy == numrows`` is the virtual line after the last row; typing there
appends a new row.
"""

import logging
from typing import Iterable, List, Optional, TYPE_CHECKING

from .Row import TAB_STOP, Row
from .Syntax import LanguageProfile, highlight_line, is_separator

if TYPE_CHECKING:
    from .Selection import Selection

logger = logging.getLogger("kite")


class Buffer:
    def __init__(self, tab_stop: int = TAB_STOP, profile: Optional[LanguageProfile] = None):
        self.rows: List[Row] = []
        self.tab_stop = max(1, int(tab_stop))
        self.profile = profile

        self.cx = 0
        self.cy = 0
        self.rx = 0
        self.rowoff = 0
        self.coloff = 0
        self.dirty = False
        self.selection: Optional["Selection"] = None
        # One-shot request for `scroll` to put the cursor row mid-screen
        self.center_on_scroll = False

    @property
    def numrows(self) -> int:
        return len(self.rows)

    def row_at(self, y: int) -> Optional[Row]:
        if 0 <= y < len(self.rows):
            return self.rows[y]
        return None

    def lines(self) -> List[str]:
        return [row.chars for row in self.rows]

    # --- Loading and serialization ---

    def load_lines(self, lines: Iterable[str]) -> None:
        """Replaces the whole content. The buffer is clean afterwards."""
        self.rows = []
        for idx, line in enumerate(lines):
            row = Row(idx, line)
            row.update_render(self.tab_stop)
            self.rows.append(row)
        self.cx = self.cy = self.rx = 0
        self.rowoff = self.coloff = 0
        self.selection = None
        self.rehighlight_all()
        self.dirty = False

    def rows_to_string(self) -> str:
        return "".join(row.chars + "\n" for row in self.rows)

    # --- Highlighting ---

    def set_profile(self, profile: Optional[LanguageProfile]) -> None:
        self.profile = profile
        self.rehighlight_all()

    def rehighlight_all(self) -> None:
        in_comment = False
        for row in self.rows:
            row.hl, row.hl_open_comment = highlight_line(row.render, self.profile, in_comment)
            in_comment = row.hl_open_comment
        logger.debug(
            f"Re-highlighted {len(self.rows)} rows with profile "
            f"{self.profile.filetype if self.profile else None}"
        )

    def update_syntax(self, at: int) -> int:
        """Re-classifies row ``at`` and every following row whose incoming
        block-comment state changed as a result.

        Returns the number of rows that were classified.
        """
        count = 0
        while 0 <= at < len(self.rows):
            row = self.rows[at]
            in_comment = at > 0 and self.rows[at - 1].hl_open_comment
            row.hl, open_comment = highlight_line(row.render, self.profile, in_comment)
            count += 1
            changed = open_comment != row.hl_open_comment
            row.hl_open_comment = open_comment
            if not changed:
                break
            at += 1
        return count

    def update_row(self, at: int) -> int:
        row = self.row_at(at)
        if row is None:
            return 0
        row.update_render(self.tab_stop)
        return self.update_syntax(at)

    def _renumber(self, start: int) -> None:
        for idx in range(max(0, start), len(self.rows)):
            self.rows[idx].idx = idx

    # --- Row operations ---

    def insert_row(self, at: int, content: str = "") -> None:
        if at < 0 or at > len(self.rows):
            return
        # A new row starts with the state the following row used to receive,
        # so the cascade only continues when that state actually changes.
        incoming = at > 0 and self.rows[at - 1].hl_open_comment
        self.rows.insert(at, Row(at, content, hl_open_comment=incoming))
        self._renumber(at + 1)
        self.update_row(at)
        self.dirty = True

    def delete_row(self, at: int) -> None:
        if at < 0 or at >= len(self.rows):
            return
        del self.rows[at]
        self._renumber(at)
        self.update_syntax(at)
        self.dirty = True

    def insert_char(self, row: int, at: int, ch: str) -> None:
        target = self.row_at(row)
        if target is None:
            return
        at = max(0, min(at, target.size))
        target.chars = target.chars[:at] + ch + target.chars[at:]
        self.update_row(row)
        self.dirty = True

    def delete_char(self, row: int, at: int) -> None:
        target = self.row_at(row)
        if target is None or at < 0 or at >= target.size:
            return
        target.chars = target.chars[:at] + target.chars[at + 1:]
        self.update_row(row)
        self.dirty = True

    def append_to_row(self, row: int, suffix: str) -> None:
        target = self.row_at(row)
        if target is None:
            return
        target.chars += suffix
        self.update_row(row)
        self.dirty = True

    def truncate_row(self, row: int, at: int) -> None:
        target = self.row_at(row)
        if target is None:
            return
        at = max(0, min(at, target.size))
        target.chars = target.chars[:at]
        self.update_row(row)
        self.dirty = True

    def split_row(self, row: int, at: int) -> None:
        target = self.row_at(row)
        if target is None:
            return
        at = max(0, min(at, target.size))
        self.insert_row(row + 1, target.chars[at:])
        self.truncate_row(row, at)

    def join_row(self, row: int) -> None:
        """Appends row ``row + 1`` to row ``row`` and removes it."""
        target = self.row_at(row)
        following = self.row_at(row + 1)
        if target is None or following is None:
            return
        self.append_to_row(row, following.chars)
        self.delete_row(row + 1)

    # --- Cursor-level editing ---

    def clamp_cursor(self) -> None:
        self.cy = max(0, min(self.cy, len(self.rows)))
        row = self.row_at(self.cy)
        self.cx = max(0, min(self.cx, row.size if row else 0))

    def insert_char_at_cursor(self, ch: str) -> None:
        if self.cy == len(self.rows):
            self.insert_row(len(self.rows), "")
        self.insert_char(self.cy, self.cx, ch)
        self.cx += 1

    def insert_newline(self) -> None:
        if self.cx == 0:
            self.insert_row(self.cy, "")
        else:
            self.split_row(self.cy, self.cx)
        self.cy += 1
        self.cx = 0

    def backspace(self) -> None:
        if self.cy >= len(self.rows):
            return
        if self.cx == 0 and self.cy == 0:
            return
        if self.cx > 0:
            self.cx -= 1
            self.delete_char(self.cy, self.cx)
        else:
            self.cx = self.rows[self.cy - 1].size
            self.join_row(self.cy - 1)
            self.cy -= 1

    def delete_forward(self) -> None:
        row = self.row_at(self.cy)
        if row is None:
            return
        if self.cx >= row.size and self.cy + 1 >= len(self.rows):
            return
        self.move_cursor("right")
        self.backspace()

    def move_cursor(self, direction: str) -> None:
        row = self.row_at(self.cy)
        if direction == "left":
            if self.cx > 0:
                self.cx -= 1
            elif self.cy > 0:
                self.cy -= 1
                self.cx = self.rows[self.cy].size
        elif direction == "right":
            if row is not None and self.cx < row.size:
                self.cx += 1
            elif row is not None and self.cx == row.size:
                self.cy += 1
                self.cx = 0
        elif direction == "up":
            if self.cy > 0:
                self.cy -= 1
        elif direction == "down":
            if self.cy < len(self.rows):
                self.cy += 1
        else:
            logger.warning(f"move_cursor: unknown direction {direction!r}")

        row = self.row_at(self.cy)
        rowlen = row.size if row else 0
        if self.cx > rowlen:
            self.cx = rowlen

    def move_word(self, direction: int) -> None:
        """Moves to the previous word start (direction < 0) or past the next word end."""
        row = self.row_at(self.cy)
        if row is None:
            self.move_cursor("left" if direction < 0 else "right")
            return
        text = row.chars
        if direction < 0:
            if self.cx == 0:
                self.move_cursor("left")
                return
            pos = self.cx
            while pos > 0 and is_separator(text[pos - 1]):
                pos -= 1
            while pos > 0 and not is_separator(text[pos - 1]):
                pos -= 1
        else:
            if self.cx >= row.size:
                self.move_cursor("right")
                return
            pos = self.cx
            while pos < row.size and is_separator(text[pos]):
                pos += 1
            while pos < row.size and not is_separator(text[pos]):
                pos += 1
        self.cx = pos

    # --- Viewport ---

    def scroll(self, screenrows: int, screencols: int) -> None:
        """Derives ``rx`` and moves the viewport so the cursor is visible."""
        screenrows = max(1, screenrows)
        screencols = max(1, screencols)
        self.clamp_cursor()

        self.rx = 0
        row = self.row_at(self.cy)
        if row is not None:
            self.rx = row.cx_to_rx(self.cx, self.tab_stop)

        if self.center_on_scroll:
            self.rowoff = max(0, self.cy - screenrows // 2)
            self.center_on_scroll = False

        if self.cy < self.rowoff:
            self.rowoff = self.cy
        elif self.cy >= self.rowoff + screenrows:
            self.rowoff = self.cy - screenrows + 1
        if self.rx < self.coloff:
            self.coloff = self.rx
        elif self.rx >= self.coloff + screencols:
            self.coloff = self.rx - screencols + 1
