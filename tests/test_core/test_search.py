# tests/test_core/test_search.py
"""Unit tests for incremental search in `kite.core.Search`."""

from kite.core.Search import SearchEngine
from kite.core.Syntax import C_PROFILE, HighlightToken as T
from kite.ui.KeyDecoder import Key


def type_query(engine: SearchEngine, query: str) -> None:
    """Feeds ``query`` one character at a time, as the prompt does."""
    for i in range(1, len(query) + 1):
        engine.on_key(query[:i], ord(query[i - 1]))


def test_first_match_then_next_then_wrap(make_buffer) -> None:
    buffer = make_buffer(["xfoo", "bar", "foo2"])
    engine = SearchEngine(buffer)

    type_query(engine, "foo")
    assert engine.last_match == 0
    assert (buffer.cy, buffer.cx) == (0, 1)

    engine.on_key("foo", Key.ARROW_DOWN)
    assert engine.last_match == 2
    assert (buffer.cy, buffer.cx) == (2, 0)

    engine.on_key("foo", Key.ARROW_RIGHT)
    assert engine.last_match == 0


def test_previous_match_wraps_backwards(make_buffer) -> None:
    buffer = make_buffer(["xfoo", "bar", "foo2"])
    engine = SearchEngine(buffer)

    # Without a previous match the direction is forced forward
    engine.on_key("foo", Key.ARROW_UP)
    assert engine.last_match == 0

    engine.on_key("foo", Key.ARROW_LEFT)
    assert engine.direction == -1
    assert engine.last_match == 2


def test_other_key_restarts_from_top(make_buffer) -> None:
    buffer = make_buffer(["xfoo", "bar", "foo2"])
    engine = SearchEngine(buffer)
    type_query(engine, "foo")
    engine.on_key("foo", Key.ARROW_DOWN)
    assert engine.last_match == 2

    engine.on_key("fo", Key.BACKSPACE)
    assert engine.last_match == 0
    assert engine.direction == 1


def test_match_overlay_is_restored(make_buffer) -> None:
    buffer = make_buffer(["int foo;", "bar"], profile=C_PROFILE)
    original = list(buffer.rows[0].hl)
    engine = SearchEngine(buffer)

    type_query(engine, "foo")
    assert buffer.rows[0].hl[4:7] == [T.MATCH] * 3
    assert buffer.rows[0].hl[0:3] == [T.KEYWORD2] * 3

    engine.on_key("foo", Key.ENTER)
    assert buffer.rows[0].hl == original
    assert engine.last_match == -1


def test_overlay_never_accumulates(make_buffer) -> None:
    buffer = make_buffer(["foo foo", "foo"])
    engine = SearchEngine(buffer)
    type_query(engine, "foo")
    engine.on_key("foo", Key.ARROW_DOWN)
    engine.on_key("foo", Key.ARROW_DOWN)
    engine.on_key("foo", Key.ESCAPE)
    for row in buffer.rows:
        assert T.MATCH not in row.hl


def test_empty_query_does_nothing(make_buffer) -> None:
    buffer = make_buffer(["abc"])
    engine = SearchEngine(buffer)
    engine.on_key("", Key.BACKSPACE)
    assert engine.last_match == -1
    assert T.MATCH not in buffer.rows[0].hl


def test_no_match_leaves_cursor(make_buffer) -> None:
    buffer = make_buffer(["abc", "def"])
    buffer.cy, buffer.cx = 1, 2
    engine = SearchEngine(buffer)
    assert engine.find("zzz") is None
    assert (buffer.cy, buffer.cx) == (1, 2)
    assert engine.last_match == -1


def test_match_after_tab_maps_to_logical_column(make_buffer) -> None:
    buffer = make_buffer(["\tfoo"])
    engine = SearchEngine(buffer)
    assert engine.find("foo") == 0
    assert buffer.cx == 1
    assert buffer.rows[0].hl[8:11] == [T.MATCH] * 3
    assert buffer.center_on_scroll is True


def test_reset_clears_state(make_buffer) -> None:
    buffer = make_buffer(["foo"])
    engine = SearchEngine(buffer)
    type_query(engine, "foo")
    engine.reset()
    assert engine.last_match == -1
    assert engine.direction == 1
    assert buffer.rows[0].hl == [T.NORMAL] * 3
