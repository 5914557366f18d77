# kite/core/Row.py
"""
kite.core.Row
=============

One line of text and everything derived from it.

A `Row` keeps the raw characters exactly as they are stored on disk, the
*rendered* form that is actually drawn (tabs expanded to spaces) and one
`HighlightToken` per rendered character. Columns in the raw text are called
``cx``; columns in the rendered text are called ``rx``. The two differ only
where the row contains tabs.

Every code point counts as one character and one screen cell.
"""

from dataclasses import dataclass, field
from typing import List

from .Syntax import HighlightToken

TAB_STOP = 8


def render_tabs(chars: str, tab_stop: int = TAB_STOP) -> str:
    """Expands each tab to spaces up to the next multiple of ``tab_stop``."""
    if "\t" not in chars:
        return chars
    out: List[str] = []
    width = 0
    for ch in chars:
        if ch == "\t":
            pad = tab_stop - (width % tab_stop)
            out.append(" " * pad)
            width += pad
        else:
            out.append(ch)
            width += 1
    return "".join(out)


@dataclass
class Row:
    idx: int
    chars: str
    render: str = ""
    hl: List[HighlightToken] = field(default_factory=list)
    hl_open_comment: bool = False

    @property
    def size(self) -> int:
        return len(self.chars)

    @property
    def rsize(self) -> int:
        return len(self.render)

    def update_render(self, tab_stop: int = TAB_STOP) -> None:
        self.render = render_tabs(self.chars, tab_stop)

    def cx_to_rx(self, cx: int, tab_stop: int = TAB_STOP) -> int:
        """Visual column of logical column ``cx``."""
        cx = max(0, min(cx, len(self.chars)))
        rx = 0
        for ch in self.chars[:cx]:
            if ch == "\t":
                rx += (tab_stop - 1) - (rx % tab_stop)
            rx += 1
        return rx

    def rx_to_cx(self, rx: int, tab_stop: int = TAB_STOP) -> int:
        """Logical column whose rendered span covers visual column ``rx``.

        A visual column inside a tab's expansion resolves to the tab itself;
        columns past the end of the row resolve to the row length.
        """
        cur_rx = 0
        for cx, ch in enumerate(self.chars):
            if ch == "\t":
                cur_rx += (tab_stop - 1) - (cur_rx % tab_stop)
            cur_rx += 1
            if cur_rx > rx:
                return cx
        return len(self.chars)
