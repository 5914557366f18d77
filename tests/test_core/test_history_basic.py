# tests/test_core/test_history_basic.py
"""History Basic Tests
========================

Unit tests for the single-step undo buffer in `kite.core.History`.

This test module verifies that the History class:

1. Restores the buffer, cursor and dirty flag recorded before an edit.
2. Swaps the current state in, so a second undo puts the edit back.
3. Keeps only the first snapshot of a compound action.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

from kite.core.Buffer import Buffer
from kite.core.History import History


def make_stub_editor(lines=("hello",)):
    """Return a minimal stub editor object.

    The stub provides only the attributes required by History:
    a buffer and `set_status_message`.
    """
    buffer = Buffer()
    buffer.load_lines(list(lines))
    return SimpleNamespace(buffer=buffer, set_status_message=MagicMock())


def test_undo_without_snapshot_reports() -> None:
    editor = make_stub_editor()
    h = History(editor)  # type: ignore[arg-type]
    assert h.can_undo is False
    assert h.undo() is True
    editor.set_status_message.assert_called_once_with("Nothing to undo")


def test_undo_restores_content_cursor_and_dirty_flag() -> None:
    editor = make_stub_editor()
    h = History(editor)  # type: ignore[arg-type]
    buffer = editor.buffer
    buffer.cx = 5

    h.record("typing")
    buffer.insert_char_at_cursor("!")
    assert buffer.lines() == ["hello!"]
    assert buffer.dirty is True

    h.undo()
    assert buffer.lines() == ["hello"]
    assert (buffer.cy, buffer.cx) == (0, 5)
    assert buffer.dirty is False
    editor.set_status_message.assert_called_with("Undo: typing")


def test_second_undo_redoes() -> None:
    editor = make_stub_editor()
    h = History(editor)  # type: ignore[arg-type]
    buffer = editor.buffer

    h.record("newline")
    buffer.cx = 2
    buffer.insert_newline()
    h.undo()
    assert buffer.lines() == ["hello"]
    h.undo()
    assert buffer.lines() == ["he", "llo"]
    assert (buffer.cy, buffer.cx) == (1, 0)
    assert buffer.dirty is True


def test_compound_action_keeps_first_snapshot() -> None:
    editor = make_stub_editor(["abc"])
    h = History(editor)  # type: ignore[arg-type]
    buffer = editor.buffer

    h.begin_compound_action()
    for ch in "xyz":
        h.record("paste")
        buffer.insert_char_at_cursor(ch)
    h.end_compound_action()

    assert buffer.lines() == ["xyzabc"]
    h.undo()
    assert buffer.lines() == ["abc"]


def test_record_outside_compound_replaces_snapshot() -> None:
    editor = make_stub_editor(["abc"])
    h = History(editor)  # type: ignore[arg-type]
    buffer = editor.buffer

    h.record("first")
    buffer.insert_char_at_cursor("1")
    h.record("second")
    buffer.insert_char_at_cursor("2")

    h.undo()
    assert buffer.lines() == ["1abc"]


def test_clear() -> None:
    h = History(make_stub_editor())  # type: ignore[arg-type]
    h.record("x")
    assert h.can_undo is True
    h.clear()
    assert h.can_undo is False
