# tests/test_core/test_selection.py
"""Unit tests for selection ranges in `kite.core.Selection`."""

import pytest

from kite.core.Selection import (
    Position,
    Selection,
    canonicalize,
    contains,
    delete_range,
    to_text,
)


def sel(head_row: int, head_col: int, tail_row: int, tail_col: int) -> Selection:
    return Selection(Position(head_row, head_col), Position(tail_row, tail_col))


def test_canonicalize_orders_endpoints() -> None:
    backwards = sel(3, 1, 1, 5)
    ordered = canonicalize(backwards)
    assert ordered == sel(1, 5, 3, 1)
    # The argument is left untouched
    assert backwards == sel(3, 1, 1, 5)


def test_canonicalize_same_row_orders_by_column() -> None:
    assert canonicalize(sel(2, 7, 2, 3)) == sel(2, 3, 2, 7)


@pytest.mark.parametrize(
    "selection",
    [sel(0, 0, 0, 0), sel(5, 2, 1, 9), sel(1, 9, 5, 2), sel(4, 4, 4, 1)],
)
def test_canonicalize_is_idempotent(selection: Selection) -> None:
    once = canonicalize(selection)
    assert canonicalize(once) == once


def test_selection_helpers() -> None:
    start = Selection.at(2, 3)
    assert start.head == start.tail == Position(2, 3)
    grown = start.extend_to(4, 0)
    assert grown.head == Position(2, 3)
    assert grown.tail == Position(4, 0)
    head, tail = grown
    assert (head, tail) == (Position(2, 3), Position(4, 0))


def test_contains_none_is_false() -> None:
    assert contains(None, 0, 0) is False


@pytest.mark.parametrize(
    "row, col, expected",
    [
        (0, 5, False),  # before the head row
        (1, 1, False),  # head row, before head col
        (1, 2, True),  # head cell
        (1, 99, True),  # head row, rest of line
        (2, 0, True),  # interior row, any column
        (2, 1000, True),
        (3, 4, True),  # tail cell is inclusive
        (3, 5, False),
        (4, 0, False),  # after the tail row
    ],
)
def test_contains_multi_row(row: int, col: int, expected: bool) -> None:
    selection = sel(3, 4, 1, 2)  # given backwards on purpose
    assert contains(selection, row, col) is expected


def test_contains_single_row() -> None:
    selection = sel(0, 2, 0, 4)
    assert [contains(selection, 0, c) for c in range(6)] == [False, False, True, True, True, False]
    assert contains(Selection.at(0, 3), 0, 3) is True


def test_to_text_single_row_is_inclusive(make_buffer) -> None:
    buffer = make_buffer(["abcdef"])
    assert to_text(buffer, sel(0, 1, 0, 3)) == "bcd"
    assert to_text(buffer, Selection.at(0, 0)) == "a"


def test_to_text_multi_row(make_buffer) -> None:
    buffer = make_buffer(["abcdef", "ghijkl", "mnopqr"])
    assert to_text(buffer, sel(0, 4, 2, 1)) == "ef\nghijkl\nmn"
    assert to_text(buffer, sel(2, 1, 0, 4)) == "ef\nghijkl\nmn"


def test_to_text_handles_empty_input(make_buffer) -> None:
    assert to_text(make_buffer(["abc"]), None) == ""
    assert to_text(make_buffer([]), sel(0, 0, 0, 1)) == ""


def test_delete_range_across_rows(make_buffer) -> None:
    buffer = make_buffer(["abcdef", "ghijkl", "z"])
    buffer.selection = sel(0, 2, 1, 3)

    assert delete_range(buffer, buffer.selection) is True

    assert buffer.lines() == ["ab" + "kl", "z"]
    assert (buffer.cy, buffer.cx) == (0, 2)
    assert buffer.selection is None
    assert [row.idx for row in buffer.rows] == [0, 1]


def test_delete_range_backwards_selection(make_buffer) -> None:
    buffer = make_buffer(["abcdef", "ghijkl", "z"])
    delete_range(buffer, sel(1, 3, 0, 2))
    assert buffer.lines() == ["abkl", "z"]


def test_delete_range_spanning_several_rows(make_buffer) -> None:
    buffer = make_buffer(["one", "two", "three", "four"])
    delete_range(buffer, sel(0, 1, 3, 1))
    assert buffer.lines() == ["our"]
    assert (buffer.cy, buffer.cx) == (0, 1)


def test_delete_range_single_row(make_buffer) -> None:
    buffer = make_buffer(["abcdef"])
    delete_range(buffer, sel(0, 1, 0, 3))
    assert buffer.lines() == ["aef"]
    assert buffer.cx == 1


def test_delete_range_clamps_coordinates(make_buffer) -> None:
    buffer = make_buffer(["abc", "def"])
    delete_range(buffer, sel(0, 1, 9, 99))
    assert buffer.lines() == ["a"]
    assert (buffer.cy, buffer.cx) == (0, 1)


def test_delete_range_without_selection(make_buffer) -> None:
    buffer = make_buffer(["abc"])
    assert delete_range(buffer, None) is False
    assert buffer.lines() == ["abc"]
    assert buffer.dirty is False


def test_tail_on_virtual_row_covers_last_row(make_buffer) -> None:
    buffer = make_buffer(["ab", "cd"])
    selection = sel(1, 0, 2, 0)
    assert [contains(selection, 1, c) for c in range(2)] == [True, True]
    assert to_text(buffer, selection) == "cd"

    delete_range(buffer, selection)
    assert buffer.lines() == ["ab", ""]
    assert (buffer.cy, buffer.cx) == (1, 0)
