# kite/core/History.py
"""History Module for Kite
========================
This module provides the `History` class, the editor's single-step undo buffer.

Before every editing command the controller asks `History.record` to take a
snapshot of the buffer: the raw content of every row, the cursor and the
dirty flag. `History.undo` swaps that snapshot with the current state, so a
second undo puts the edit back.

Commands that are made of many small edits (pasting, deleting a selection
and typing over it) bracket them with `begin_compound_action` and
`end_compound_action`; only the first snapshot inside the bracket is kept,
so the whole command is undone in one step.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from kite.core.Kite import Kite


@dataclass(frozen=True)
class Snapshot:
    label: str
    lines: tuple[str, ...]
    cx: int
    cy: int
    dirty: bool


class History:
    """Holds at most one snapshot of the editor's buffer.

    Attributes:
        editor (Kite): The editor whose buffer is recorded and restored.
        _snapshot (Snapshot | None): State before the most recent edit.
        _is_in_compound_action (bool): While set, `record` keeps the first snapshot.
    """

    def __init__(self, editor: "Kite"):
        self.editor = editor
        self._snapshot: Optional[Snapshot] = None
        self._is_in_compound_action = False
        self._recorded_in_compound = False

    @property
    def can_undo(self) -> bool:
        return self._snapshot is not None

    def _capture(self, label: str) -> Snapshot:
        buffer = self.editor.buffer
        return Snapshot(label, tuple(buffer.lines()), buffer.cx, buffer.cy, buffer.dirty)

    def begin_compound_action(self) -> None:
        """Starts a sequence of edits that should be undone together."""
        self._is_in_compound_action = True
        self._recorded_in_compound = False
        logging.debug("History: Beginning compound action.")

    def end_compound_action(self) -> None:
        self._is_in_compound_action = False
        self._recorded_in_compound = False
        logging.debug("History: Ended compound action.")

    def record(self, label: str) -> None:
        """Remembers the current state as the one to return to on undo."""
        if self._is_in_compound_action:
            if self._recorded_in_compound:
                return
            self._recorded_in_compound = True
        self._snapshot = self._capture(label)
        logging.debug(f"History: Snapshot taken before '{label}'.")

    def clear(self) -> None:
        self._snapshot = None
        logging.debug("History: Snapshot cleared.")

    def undo(self) -> bool:
        """Restores the snapshot, keeping the replaced state for the next undo.

        Returns:
            bool: True if the buffer changed.
        """
        if self._snapshot is None:
            self.editor.set_status_message("Nothing to undo")
            return True

        snapshot = self._snapshot
        self._snapshot = self._capture(snapshot.label)

        buffer = self.editor.buffer
        buffer.load_lines(snapshot.lines)
        buffer.cy = snapshot.cy
        buffer.cx = snapshot.cx
        buffer.clamp_cursor()
        buffer.dirty = snapshot.dirty
        buffer.center_on_scroll = True
        logging.debug(f"History: Restored state from before '{snapshot.label}'.")
        self.editor.set_status_message(f"Undo: {snapshot.label}")
        return True
