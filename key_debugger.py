# key_debugger.py
"""Shows the raw bytes a key sends and the token Kite decodes them to.

Runs with curses keypad translation off, like the editor, so the bytes on
screen are exactly what `kite.ui.KeyDecoder.decode` receives.
"""
import curses
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))

from kite.ui.KeyBinder import MAX_SEQUENCE_BYTES, chunk_complete  # noqa: E402
from kite.ui.KeyDecoder import decode, key_name  # noqa: E402


def read_chunk(stdscr: "curses.window") -> bytes:
    """Blocks for one byte, then takes whatever belongs to the same key."""
    first = stdscr.getch()
    chunk = bytearray([first]) if 0 <= first <= 255 else bytearray()
    if chunk and not chunk_complete(chunk):
        stdscr.nodelay(True)  # Do not wait for the next key
        try:
            while len(chunk) < MAX_SEQUENCE_BYTES and not chunk_complete(chunk):
                next_key = stdscr.getch()
                if next_key == curses.ERR or not 0 <= next_key <= 255:
                    break
                chunk.append(next_key)
        finally:
            stdscr.nodelay(False)  # Back to blocking mode
    return bytes(chunk)


def main(stdscr: "curses.window"):
    curses.curs_set(0)
    curses.raw()
    stdscr.keypad(False)
    stdscr.timeout(-1)

    last_key_info = []
    while True:
        stdscr.clear()
        height, width = stdscr.getmaxyx()

        title = "Kite Key Debugger"
        instructions = "Press any key to see how it decodes. Press 'q' to quit."
        stdscr.addstr(1, max(0, (width - len(title)) // 2), title, curses.A_BOLD)
        stdscr.addstr(2, max(0, (width - len(instructions)) // 2), instructions[: width - 1], curses.A_DIM)
        for i, line in enumerate(last_key_info):
            if 5 + i < height:
                stdscr.addstr(5 + i, 4, line[: max(0, width - 5)])
        stdscr.refresh()

        chunk = read_chunk(stdscr)
        if chunk == b"q":
            break

        token = decode(chunk)
        last_key_info = [
            f"{'Bytes (raw):':<20} {chunk!r}",
            f"{'Bytes (hex):':<20} {chunk.hex(' ')}",
            f"{'Token:':<20} {token}",
            f"{'Decoded as:':<20} {key_name(token)}",
        ]


if __name__ == "__main__":
    print("Starting key debugger... Press 'q' to quit.")
    try:
        curses.wrapper(main)
        print("Debugger finished.")
    except curses.error as e:
        print(f"An error occurred: {e}")
