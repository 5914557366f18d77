# kite/core/Kite.py
"""kite.core.Kite.py
============================
Kite: Main Module for the Kite Terminal Text Editor

This module defines the `Kite` class, the controller of the editor. It owns
the single `Buffer` and everything around it:

- File operations (open with encoding detection, save, save-as)
- Editing commands, cursor movement and selection
- Clipboard integration (system clipboard via pyperclip, internal fallback)
- Single-step undo (`History`)
- Incremental search and jump-to-line, both built on one generic prompt
- The transient status message and the quit confirmation
- The main loop, which alternates drawing and reading one key

Terminal drawing is delegated to `DrawScreen`, key reading and dispatch to
`KeyBinder`. Every action method returns a bool telling the main loop
whether the screen needs to be redrawn.
"""

import logging
import os
import time
from typing import Any, Callable, Optional

import chardet
import pyperclip
from wcwidth import wcswidth

from kite.core.Buffer import Buffer
from kite.core.History import History
from kite.core.Search import SearchEngine
from kite.core.Selection import Position, Selection, delete_range, to_text
from kite.core.Syntax import load_profiles, select_profile
from kite.ui.DrawScreen import DrawScreen
from kite.ui.KeyBinder import KeyBinder
from kite.ui.KeyDecoder import SPECIAL_BASE, Key, ctrl_key
from kite.ui.TerminalAppMode import TerminalAppMode
from kite.utils.logging_config import logger
from kite.utils.utils import FatalError

# Bytes handed to chardet when guessing the encoding of a file
CHARDET_SAMPLE_SIZE = 1024 * 20
CHARDET_MIN_CONFIDENCE = 0.75

PromptCallback = Callable[[str, Optional[int]], None]


def _line_number(text: str, numrows: int) -> Optional[int]:
    """1-based line number typed in ASCII digits, or None when it is not a line of the buffer."""
    if not text or not all("0" <= ch <= "9" for ch in text):
        return None
    line = int(text)
    return line if 1 <= line <= numrows else None


## ==================== Kite Class ====================
class Kite:
    """The main class of the Kite editor.

    Attributes:
        config (dict): Merged editor configuration.
        stdscr: The curses window.
        buffer (Buffer): The text being edited.
        profiles (list[LanguageProfile]): Language profiles, user ones first.
        filename (str | None): Path of the open file, None for an unnamed buffer.
        encoding (str): Encoding used to read and write the file.
        status_message (str): Transient message shown under the status bar.
        status_time (float): When `status_message` was set.
        status_timeout (float): Seconds a status message stays visible.
        quit_times (int): Extra ctrl-q presses needed to quit with unsaved changes.
        use_system_clipboard (bool): Whether copy/paste go through pyperclip.
        internal_clipboard (str): Clipboard used when the system one is unavailable.
        history (History): Single-step undo buffer.
        keybinder (KeyBinder): Key reading and dispatch.
        drawer (DrawScreen): Screen rendering.
        running (bool): Main loop flag; cleared by `exit_editor`.
    """

    def __init__(self, stdscr: Any, config: dict[str, Any]) -> None:
        self.config = config
        self.stdscr = stdscr

        editor_cfg = config.get("editor", {})
        self.buffer = Buffer(tab_stop=editor_cfg.get("tab_stop", 8))
        self.profiles = load_profiles(config)

        self.filename: Optional[str] = None
        self.encoding = "utf-8"

        self.status_message = ""
        self.status_time = 0.0
        self.status_timeout = float(editor_cfg.get("status_timeout", 5))

        self.quit_times = max(0, int(editor_cfg.get("quit_times", 3)))
        self._quit_counter = self.quit_times

        self.use_system_clipboard = bool(editor_cfg.get("use_system_clipboard", True))
        self.internal_clipboard = ""

        self.history = History(self)
        self.keybinder = KeyBinder(self)
        self.drawer = DrawScreen(self, config)
        self.running = False

        logger.debug("Kite initialized (tab_stop=%d, quit_times=%d)", self.buffer.tab_stop, self.quit_times)

    # ---------------------- Status line --------------------
    def set_status_message(self, fmt: str, *args: Any) -> None:
        """Sets the transient status message, printf style, and restarts its timer."""
        try:
            message = fmt % args if args else str(fmt)
        except (TypeError, ValueError) as e:
            logging.error(f"Bad status message format {fmt!r}: {e}")
            message = str(fmt)
        if message != self.status_message:
            logging.debug(f"Status message set to: '{message}'")
        self.status_message = message
        self.status_time = time.time()

    # ---------------------- Prompt --------------------
    def prompt(
        self,
        template: str,
        callback: Optional[PromptCallback] = None,
        digits_only: bool = False,
    ) -> Optional[str]:
        """Reads one line of input on the message bar.

        ``template`` must contain a single ``%s`` where the text typed so far
        is shown. ``callback(text, key)`` is called after every key, including
        the final Enter or ESC.

        Returns:
            The typed text on Enter (possibly empty), None when ESC cancelled.
        """
        logging.debug(f"Prompt opened: {template!r}")
        text = ""
        while True:
            self.set_status_message(template, text)
            self.drawer.draw()

            key = self.keybinder.read_key()
            if key is None:
                continue

            if key in (Key.DEL, Key.BACKSPACE, ctrl_key("h")):
                text = text[:-1]
            elif key == Key.ESCAPE:
                self.set_status_message("")
                if callback:
                    callback(text, key)
                logging.debug("Prompt cancelled")
                return None
            elif key in (Key.ENTER, 10):
                self.set_status_message("")
                if callback:
                    callback(text, Key.ENTER)
                logging.debug(f"Prompt confirmed: {text!r}")
                return text
            elif key == Key.RESIZE:
                # Not an edit of the typed text; callbacks are not told about it
                self.handle_resize()
                continue
            elif 32 <= key < SPECIAL_BASE and key != Key.BACKSPACE:
                ch = chr(key)
                if digits_only and not "0" <= ch <= "9":
                    continue
                if wcswidth(ch) > 0:
                    text += ch

            if callback:
                callback(text, key)

    # ---------------------- File operations --------------------
    def open_file(self, filename: str) -> bool:
        """Loads ``filename`` into the buffer.

        A path that does not exist gives an empty buffer with that name, so it
        is created on the first save.

        Raises:
            FatalError: If the file exists but cannot be read.
        """
        self.filename = filename
        self.buffer.profile = select_profile(filename, self.profiles)
        self.history.clear()

        if not os.path.exists(filename):
            logging.info(f"'{filename}' does not exist; starting an empty buffer.")
            self.encoding = "utf-8"
            self.buffer.load_lines([])
            self.set_status_message("New file: %s", os.path.basename(filename))
            return True

        try:
            with open(filename, "rb") as f:
                raw = f.read()
        except OSError as e:
            logging.critical(f"Cannot open '{filename}' for reading: {e}")
            raise FatalError(f"fopen: {filename}: {e.strerror or e}") from e

        text = self._decode(raw, filename)
        lines: list[str] = []
        if text:
            lines = text.split("\n")
            if text.endswith("\n"):
                lines.pop()
            lines = [line.rstrip("\r") for line in lines]

        self.buffer.load_lines(lines)
        logging.info(
            f"Opened '{filename}': {len(lines)} lines, encoding {self.encoding}, "
            f"filetype {self.buffer.profile.filetype if self.buffer.profile else None}"
        )
        return True

    def _decode(self, raw: bytes, filename: str) -> str:
        """Decodes file content, trusting chardet only when it is confident."""
        self.encoding = "utf-8"
        if raw:
            result = chardet.detect(raw[:CHARDET_SAMPLE_SIZE])
            guess = result.get("encoding")
            confidence = result.get("confidence") or 0.0
            logging.debug(
                f"Chardet detected encoding '{guess}' with confidence {confidence:.2f} for '{filename}'."
            )
            # ascii is a subset of utf-8; keep utf-8 so new characters can be saved
            if guess and confidence >= CHARDET_MIN_CONFIDENCE and guess.lower() != "ascii":
                self.encoding = guess.lower()
        try:
            return raw.decode(self.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            logging.warning(f"Decoding '{filename}' as {self.encoding} failed ({e}); using utf-8 with replacement.")
            self.encoding = "utf-8"
            return raw.decode("utf-8", errors="replace")

    def save_file(self) -> bool:
        """Writes the buffer to disk, asking for a name if it has none."""
        if self.filename is None:
            name = self.prompt("Save as: %s (ESC to cancel)")
            if not name:
                self.set_status_message("Save aborted")
                return True
            self.filename = name
            self.buffer.set_profile(select_profile(name, self.profiles))

        try:
            written = self._write_file(self.filename)
        except OSError as e:
            logging.error(f"Saving '{self.filename}' failed: {e}")
            self.set_status_message("Can't save! I/O error: %s", e.strerror or e)
            return True

        self.buffer.dirty = False
        self.set_status_message("%d bytes written to disk", written)
        return True

    def _write_file(self, target_filename: str) -> int:
        """Writes every row followed by a line feed. Returns the number of bytes written.

        Raises:
            OSError: Propagated to the caller, which reports it.
        """
        data = self.buffer.rows_to_string().encode(self.encoding, errors="replace")
        with open(target_filename, "wb") as f:
            f.write(data)
        logging.info(f"Wrote {len(data)} bytes to '{target_filename}'")
        return len(data)

    # ---------------------- Search and jump --------------------
    def _save_view(self) -> tuple[int, int, int, int]:
        b = self.buffer
        return b.cx, b.cy, b.rowoff, b.coloff

    def _restore_view(self, view: tuple[int, int, int, int]) -> None:
        b = self.buffer
        b.cx, b.cy, b.rowoff, b.coloff = view
        b.center_on_scroll = False

    def find(self) -> bool:
        """Incremental search; ESC returns to where the search started."""
        saved_view = self._save_view()
        self.buffer.selection = None
        engine = SearchEngine(self.buffer)

        query = self.prompt("Search: %s (Use ESC/Arrows/Enter)", engine.on_key)
        engine.reset()

        if query is None:
            self._restore_view(saved_view)
        elif not query:
            self._restore_view(saved_view)
            self.set_status_message("Search aborted: empty query")
        elif not any(query in row.render for row in self.buffer.rows):
            self._restore_view(saved_view)
            self.set_status_message("Not found: %s", query)
        return True

    def goto_line(self) -> bool:
        """Jumps to a line number, previewing the target while it is typed."""
        saved_view = self._save_view()
        buffer = self.buffer

        def preview(text: str, key: Optional[int]) -> None:
            line = _line_number(text, buffer.numrows)
            if line is not None:
                buffer.cy = line - 1
                buffer.cx = 0
                buffer.center_on_scroll = True

        answer = self.prompt("Go to line: %s (ESC to cancel)", preview, digits_only=True)
        if answer is None:
            self._restore_view(saved_view)
            return True
        line = _line_number(answer, buffer.numrows)
        if line is None:
            self._restore_view(saved_view)
            self.set_status_message("Invalid line number")
            return True

        buffer.selection = None
        buffer.cy = line - 1
        buffer.cx = 0
        buffer.center_on_scroll = True
        return True

    # ---------------------- Clipboard --------------------
    def _set_clipboard(self, text: str) -> str:
        """Stores ``text`` and returns a status describing where it went."""
        self.internal_clipboard = text
        if not self.use_system_clipboard:
            return "internal clipboard"
        try:
            pyperclip.copy(text)
            return "system clipboard"
        except Exception as e:
            logging.warning(f"System clipboard unavailable ({e}); falling back to the internal clipboard.")
            self.use_system_clipboard = False
            return "internal clipboard"

    def _get_clipboard(self) -> str:
        if self.use_system_clipboard:
            try:
                text = pyperclip.paste()
                if text:
                    return text
            except Exception as e:
                logging.warning(f"Reading the system clipboard failed ({e}); using the internal clipboard.")
                self.use_system_clipboard = False
        return self.internal_clipboard

    def copy(self) -> bool:
        text = to_text(self.buffer, self.buffer.selection)
        if not text:
            self.set_status_message("Nothing to copy")
            return True
        where = self._set_clipboard(text)
        logging.info(f"Copied {len(text)} chars to the {where}.")
        self.set_status_message("Copied %d characters to %s", len(text), where)
        return True

    def cut(self) -> bool:
        selection = self.buffer.selection
        text = to_text(self.buffer, selection)
        if not text:
            self.set_status_message("Nothing to cut")
            return True
        where = self._set_clipboard(text)
        self.history.record("cut")
        delete_range(self.buffer, selection)
        self.set_status_message("Cut %d characters to %s", len(text), where)
        return True

    def paste(self) -> bool:
        """Inserts the clipboard text as if it had been typed."""
        text = self._get_clipboard()
        if not text:
            self.set_status_message("Clipboard is empty")
            return True

        self.history.begin_compound_action()
        try:
            self.history.record("paste")
            if self.buffer.selection is not None:
                delete_range(self.buffer, self.buffer.selection)
            for ch in text:
                if ch == "\n":
                    self.buffer.insert_newline()
                elif ch != "\r":
                    self.buffer.insert_char_at_cursor(ch)
        finally:
            self.history.end_compound_action()
        self.set_status_message("Pasted %d characters", len(text))
        return True

    # ---------------------- Selection --------------------
    def select_all(self) -> bool:
        buffer = self.buffer
        if buffer.numrows == 0:
            self.set_status_message("Nothing to select")
            return True
        last = buffer.numrows - 1
        tail_col = buffer.rows[last].size - 1
        buffer.selection = Selection(Position(0, 0), Position(last, tail_col))
        buffer.cy = last
        buffer.cx = max(0, tail_col)
        return True

    def _extend_selection(self, direction: str) -> bool:
        buffer = self.buffer
        selection = buffer.selection or Selection.at(buffer.cy, buffer.cx)
        buffer.move_cursor(direction)
        buffer.selection = selection.extend_to(buffer.cy, buffer.cx)
        return True

    def extend_selection_up(self) -> bool:
        return self._extend_selection("up")

    def extend_selection_down(self) -> bool:
        return self._extend_selection("down")

    def extend_selection_left(self) -> bool:
        return self._extend_selection("left")

    def extend_selection_right(self) -> bool:
        return self._extend_selection("right")

    # ---------------------- Cursor movement --------------------
    def _move(self, direction: str) -> bool:
        self.buffer.selection = None
        self.buffer.move_cursor(direction)
        return True

    def handle_up(self) -> bool:
        return self._move("up")

    def handle_down(self) -> bool:
        return self._move("down")

    def handle_left(self) -> bool:
        return self._move("left")

    def handle_right(self) -> bool:
        return self._move("right")

    def handle_home(self) -> bool:
        self.buffer.selection = None
        self.buffer.cx = 0
        return True

    def handle_end(self) -> bool:
        buffer = self.buffer
        buffer.selection = None
        row = buffer.row_at(buffer.cy)
        buffer.cx = row.size if row else 0
        return True

    def handle_page_up(self) -> bool:
        """Moves to the top of the screen, then one screen further up."""
        buffer = self.buffer
        buffer.selection = None
        screenrows = max(1, self.drawer.screenrows)
        buffer.cy = buffer.rowoff
        for _ in range(screenrows):
            buffer.move_cursor("up")
        return True

    def handle_page_down(self) -> bool:
        """Moves to the bottom of the screen, then one screen further down."""
        buffer = self.buffer
        buffer.selection = None
        screenrows = max(1, self.drawer.screenrows)
        buffer.cy = min(buffer.rowoff + screenrows - 1, buffer.numrows)
        for _ in range(screenrows):
            buffer.move_cursor("down")
        return True

    def word_left(self) -> bool:
        self.buffer.selection = None
        self.buffer.move_word(-1)
        return True

    def word_right(self) -> bool:
        self.buffer.selection = None
        self.buffer.move_word(1)
        return True

    def scroll_up(self) -> bool:
        """Scrolls the view one line up, dragging the cursor along if it would leave the screen."""
        buffer = self.buffer
        screenrows = max(1, self.drawer.screenrows)
        if buffer.rowoff == 0:
            return False
        buffer.rowoff -= 1
        if buffer.cy >= buffer.rowoff + screenrows:
            buffer.cy = buffer.rowoff + screenrows - 1
            buffer.clamp_cursor()
        return True

    def scroll_down(self) -> bool:
        buffer = self.buffer
        if buffer.rowoff >= buffer.numrows:
            return False
        buffer.rowoff += 1
        if buffer.cy < buffer.rowoff:
            buffer.cy = buffer.rowoff
            buffer.clamp_cursor()
        return True

    # ---------------------- Editing --------------------
    def _delete_selection(self) -> bool:
        if self.buffer.selection is None:
            return False
        return delete_range(self.buffer, self.buffer.selection)

    def insert_text(self, text: str) -> bool:
        """Types ``text`` at the cursor, replacing the selection if there is one."""
        self.history.begin_compound_action()
        try:
            self.history.record("typing")
            self._delete_selection()
            for ch in text:
                self.buffer.insert_char_at_cursor(ch)
        finally:
            self.history.end_compound_action()
        return True

    def handle_tab(self) -> bool:
        return self.insert_text("\t")

    def handle_enter(self) -> bool:
        self.history.begin_compound_action()
        try:
            self.history.record("newline")
            self._delete_selection()
            self.buffer.insert_newline()
        finally:
            self.history.end_compound_action()
        return True

    def handle_backspace(self) -> bool:
        buffer = self.buffer
        if buffer.selection is not None:
            self.history.record("delete selection")
            return self._delete_selection()
        if buffer.cy >= buffer.numrows or (buffer.cx == 0 and buffer.cy == 0):
            return False
        self.history.record("backspace")
        buffer.backspace()
        return True

    def handle_delete(self) -> bool:
        buffer = self.buffer
        if buffer.selection is not None:
            self.history.record("delete selection")
            return self._delete_selection()
        row = buffer.row_at(buffer.cy)
        if row is None or (buffer.cx >= row.size and buffer.cy + 1 >= buffer.numrows):
            return False
        self.history.record("delete")
        buffer.delete_forward()
        return True

    def handle_escape(self) -> bool:
        """Drops the selection and forces a redraw (also bound to ctrl-l)."""
        self.buffer.selection = None
        return True

    def undo(self) -> bool:
        self.buffer.selection = None
        return self.history.undo()

    # ---------------------- Quit and resize --------------------
    def reset_quit_confirmation(self) -> None:
        self._quit_counter = self.quit_times

    def exit_editor(self) -> bool:
        """Stops the main loop, asking for repeated presses when there are unsaved changes."""
        if self.buffer.dirty and self._quit_counter > 0:
            self.set_status_message(
                "WARNING!!! File has unsaved changes. Press Ctrl-Q %d more times to quit.",
                self._quit_counter,
            )
            self._quit_counter -= 1
            return True
        logger.info("--- EXIT SEQUENCE INITIATED ---")
        self.running = False
        return True

    def handle_resize(self) -> bool:
        """Re-reads the window size; the next draw re-derives the viewport from it."""
        height, width = self.stdscr.getmaxyx()
        logging.debug(f"Window resized to {width}x{height}")
        self.buffer.clamp_cursor()
        return True

    # ---------------------- Main loop --------------------
    def run(self) -> None:
        """The main event loop: draw, wait for one key, dispatch it.

        The terminal is switched into raw mode for the duration of the loop
        and restored on the way out, also when a `FatalError` escapes.
        """
        logger.info("Editor main loop started.")
        mode = TerminalAppMode()
        mode.enter(self.stdscr)
        self.running = True
        try:
            while self.running:
                self.drawer.draw()
                key = self.keybinder.read_key()
                self.keybinder.handle_input(key)
        finally:
            mode.exit()
        logger.info("Editor main loop finished.")
