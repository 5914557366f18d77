# kite/ui/KeyDecoder.py
"""Terminal input decoding.

`decode` turns one chunk of raw bytes, as read from the terminal in a single
poll, into exactly one logical key token. Plain characters decode to their
code point, so the tokens for printable text are just ``ord(ch)``; control
bytes keep their low values (``ctrl_key("s") == 19``); everything else is
a member of `Key`, numbered past the Unicode range so it never collides with a
character.

An escape sequence must arrive within one chunk. A sequence split across two
polls decodes as a lone ESC followed by ordinary characters.
"""

from enum import IntEnum
from typing import Optional

ESC = 0x1B
# Special keys are numbered past the last Unicode code point
SPECIAL_BASE = 0x110000


def ctrl_key(ch: str) -> int:
    return ord(ch) & 0x1F


class Key(IntEnum):
    TAB = 9
    ENTER = 13
    ESCAPE = 27
    BACKSPACE = 127

    ARROW_LEFT = SPECIAL_BASE
    ARROW_RIGHT = SPECIAL_BASE + 1
    ARROW_UP = SPECIAL_BASE + 2
    ARROW_DOWN = SPECIAL_BASE + 3
    DEL = SPECIAL_BASE + 4
    HOME = SPECIAL_BASE + 5
    END = SPECIAL_BASE + 6
    PAGE_UP = SPECIAL_BASE + 7
    PAGE_DOWN = SPECIAL_BASE + 8

    SHIFT_ARROW_LEFT = SPECIAL_BASE + 10
    SHIFT_ARROW_RIGHT = SPECIAL_BASE + 11
    SHIFT_ARROW_UP = SPECIAL_BASE + 12
    SHIFT_ARROW_DOWN = SPECIAL_BASE + 13

    CTRL_ARROW_LEFT = SPECIAL_BASE + 20
    CTRL_ARROW_RIGHT = SPECIAL_BASE + 21
    CTRL_ARROW_UP = SPECIAL_BASE + 22
    CTRL_ARROW_DOWN = SPECIAL_BASE + 23

    RESIZE = SPECIAL_BASE + 100


ARROWS = {
    ord("A"): Key.ARROW_UP,
    ord("B"): Key.ARROW_DOWN,
    ord("C"): Key.ARROW_RIGHT,
    ord("D"): Key.ARROW_LEFT,
}

SHIFT_ARROWS = {
    ord("A"): Key.SHIFT_ARROW_UP,
    ord("B"): Key.SHIFT_ARROW_DOWN,
    ord("C"): Key.SHIFT_ARROW_RIGHT,
    ord("D"): Key.SHIFT_ARROW_LEFT,
}

CTRL_ARROWS = {
    ord("A"): Key.CTRL_ARROW_UP,
    ord("B"): Key.CTRL_ARROW_DOWN,
    ord("C"): Key.CTRL_ARROW_RIGHT,
    ord("D"): Key.CTRL_ARROW_LEFT,
}

HOME_END = {ord("H"): Key.HOME, ord("F"): Key.END}

# ESC [ <digit> ~ ; 1/7 and 4/8 are the same keys on different terminals
TILDE_KEYS = {
    ord("1"): Key.HOME,
    ord("3"): Key.DEL,
    ord("4"): Key.END,
    ord("5"): Key.PAGE_UP,
    ord("6"): Key.PAGE_DOWN,
    ord("7"): Key.HOME,
    ord("8"): Key.END,
}

MODIFIED_ARROWS = {b"2": SHIFT_ARROWS, b"5": CTRL_ARROWS}


def decode(chunk: bytes) -> Optional[int]:
    """Returns the key token for ``chunk``, or None for an empty chunk (timeout)."""
    if not chunk:
        return None

    if chunk[0] != ESC:
        if len(chunk) > 1:
            try:
                text = chunk.decode("utf-8")
            except UnicodeDecodeError:
                return chunk[0]
            if len(text) == 1:
                return ord(text)
        return chunk[0]

    if len(chunk) == 1:
        return Key.ESCAPE

    if chunk[1] == ord("[") and len(chunk) >= 3:
        if len(chunk) == 4 and chunk[3] == ord("~"):
            return TILDE_KEYS.get(chunk[2], Key.ESCAPE)
        if len(chunk) == 6 and chunk[2:4] == b"1;":
            table = MODIFIED_ARROWS.get(chunk[4:5])
            if table is not None:
                return table.get(chunk[5], Key.ESCAPE)
            return Key.ESCAPE
        if len(chunk) == 3:
            if chunk[2] in ARROWS:
                return ARROWS[chunk[2]]
            if chunk[2] in HOME_END:
                return HOME_END[chunk[2]]
        return Key.ESCAPE

    if chunk[1] == ord("O") and len(chunk) == 3:
        if chunk[2] in HOME_END:
            return HOME_END[chunk[2]]
        if chunk[2] in ARROWS:
            return ARROWS[chunk[2]]
    return Key.ESCAPE


def key_name(key: Optional[int]) -> str:
    """Human readable name of a token, used in logs and the key debugger."""
    if key is None:
        return "<none>"
    try:
        return Key(key).name
    except ValueError:
        pass
    if key >= SPECIAL_BASE or key < 0:
        return f"<{key}>"
    if 0 <= key < 32:
        return f"CTRL+{chr(key + 64)}"
    return repr(chr(key))
