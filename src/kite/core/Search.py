# kite/core/Search.py
"""Incremental search.

`SearchEngine.on_key` is handed to the prompt as its per-keystroke callback.
Each call re-runs the search for the text typed so far: arrow right/down go
to the next match, arrow left/up to the previous one, and any other key
starts again from the top. The matched span is painted with
`HighlightToken.MATCH`; the row's own highlight is saved first and put
back before the next search step and when the prompt closes, so the
overlay never becomes part of the row's permanent highlight.
"""

import logging
from typing import List, Optional, Tuple

from kite.ui.KeyDecoder import Key

from .Buffer import Buffer
from .Syntax import HighlightToken

logger = logging.getLogger("kite")

FORWARD_KEYS = (Key.ARROW_RIGHT, Key.ARROW_DOWN)
BACKWARD_KEYS = (Key.ARROW_LEFT, Key.ARROW_UP)


class SearchEngine:
    def __init__(self, buffer: Buffer):
        self.buffer = buffer
        self.last_match = -1
        self.direction = 1
        self._saved_hl: Optional[Tuple[int, List[HighlightToken]]] = None

    def restore(self) -> None:
        """Puts back the highlight of the row currently showing a match."""
        if self._saved_hl is None:
            return
        row_idx, hl = self._saved_hl
        self._saved_hl = None
        row = self.buffer.row_at(row_idx)
        if row is not None and len(row.hl) == len(hl):
            row.hl = hl

    def reset(self) -> None:
        self.restore()
        self.last_match = -1
        self.direction = 1

    def on_key(self, query: str, key: Optional[int]) -> None:
        self.restore()

        if key in (Key.ENTER, Key.ESCAPE):
            self.last_match = -1
            self.direction = 1
            return
        elif key in FORWARD_KEYS:
            self.direction = 1
        elif key in BACKWARD_KEYS:
            self.direction = -1
        else:
            self.last_match = -1
            self.direction = 1

        if not query:
            return
        if self.last_match == -1:
            self.direction = 1
        self.find(query)

    def find(self, query: str) -> Optional[int]:
        """Moves to the next row containing ``query`` in ``direction``.

        Returns the matched row index, or None when no row matches.
        """
        buffer = self.buffer
        numrows = buffer.numrows
        current = self.last_match
        for _ in range(numrows):
            current += self.direction
            if current == -1:
                current = numrows - 1
            elif current == numrows:
                current = 0

            row = buffer.rows[current]
            match = row.render.find(query)
            if match == -1:
                continue

            self.last_match = current
            buffer.cy = current
            buffer.cx = row.rx_to_cx(match, buffer.tab_stop)
            buffer.center_on_scroll = True

            self._saved_hl = (current, list(row.hl))
            end = match + len(query)
            row.hl[match:end] = [HighlightToken.MATCH] * (end - match)
            logger.debug(f"Search: '{query}' found at row {current}, rx {match}")
            return current
        logger.debug(f"Search: '{query}' not found")
        return None
