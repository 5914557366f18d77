# kite/core/Selection.py
"""Selection ranges over buffer coordinates.

A `Selection` is a pair of positions, ``head`` (where the selection was
started) and ``tail`` (where the cursor is now). They are not kept in order;
`canonicalize` returns an ordered copy. Both endpoint cells are part of the
selection, so ``Selection(p, p)`` still covers the single character at ``p``.
"No selection" is ``None``.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .Buffer import Buffer

logger = logging.getLogger("kite")


class Position(NamedTuple):
    row: int
    col: int


@dataclass(frozen=True)
class Selection:
    head: Position
    tail: Position

    @classmethod
    def at(cls, row: int, col: int) -> "Selection":
        pos = Position(row, col)
        return cls(pos, pos)

    def extend_to(self, row: int, col: int) -> "Selection":
        return Selection(self.head, Position(row, col))

    def __iter__(self):
        return iter((self.head, self.tail))


def canonicalize(selection: Selection) -> Selection:
    head, tail = selection.head, selection.tail
    if (tail.row, tail.col) < (head.row, head.col):
        head, tail = tail, head
    return Selection(Position(*head), Position(*tail))


def contains(selection: Optional[Selection], row: int, col: int) -> bool:
    if selection is None:
        return False
    head, tail = canonicalize(selection)
    if row < head.row or row > tail.row:
        return False
    if head.row == tail.row:
        return head.col <= col <= tail.col
    if row == head.row:
        return col >= head.col
    if row == tail.row:
        return col <= tail.col
    return True


def _clamped(buffer: "Buffer", selection: Selection) -> Optional[Selection]:
    """Ordered copy with both ends moved inside the buffer, or None if it is empty."""
    if buffer.numrows == 0:
        return None
    head, tail = canonicalize(selection)
    last = buffer.numrows - 1
    if head.row > last:
        return None
    head_row = max(0, head.row)
    tail_row = max(0, min(tail.row, last))
    head_col = max(0, min(head.col, buffer.rows[head_row].size))
    if tail.row > last:
        # Tail on the virtual row past the end: the whole last row is selected
        tail_col = buffer.rows[last].size
    else:
        tail_col = max(-1, min(tail.col, buffer.rows[tail_row].size))
    return Selection(Position(head_row, head_col), Position(tail_row, tail_col))


def to_text(buffer: "Buffer", selection: Optional[Selection]) -> str:
    """Text covered by ``selection``, rows joined with ``\\n``."""
    if selection is None:
        return ""
    clamped = _clamped(buffer, selection)
    if clamped is None:
        return ""
    head, tail = clamped
    if head.row == tail.row:
        return buffer.rows[head.row].chars[head.col:tail.col + 1]

    parts = [buffer.rows[head.row].chars[head.col:], "\n"]
    for idx in range(head.row + 1, tail.row):
        parts.append(buffer.rows[idx].chars)
        parts.append("\n")
    parts.append(buffer.rows[tail.row].chars[:tail.col + 1])
    return "".join(parts)


def delete_range(buffer: "Buffer", selection: Optional[Selection]) -> bool:
    """Removes the selected text and puts the cursor where it started.

    The head row keeps its text before the selection and receives the tail
    row's text after it; the rows in between and the tail row are removed.
    The buffer's selection is cleared. Returns True when anything changed.
    """
    buffer.selection = None
    if selection is None:
        return False
    clamped = _clamped(buffer, selection)
    if clamped is None:
        return False
    head, tail = clamped

    suffix = buffer.rows[tail.row].chars[tail.col + 1:]
    prefix = buffer.rows[head.row].chars[:head.col]
    for idx in range(tail.row, head.row, -1):
        buffer.delete_row(idx)
    buffer.truncate_row(head.row, 0)
    buffer.append_to_row(head.row, prefix + suffix)

    buffer.cy = head.row
    buffer.cx = head.col
    buffer.clamp_cursor()
    logger.debug(f"Deleted selection {head}..{tail}")
    return True
