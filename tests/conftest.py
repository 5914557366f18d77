# tests/conftest.py
"""Pytest configuration with shared fixtures for the Kite editor tests.

The core (Buffer, Row, Syntax, Selection, Search, History) needs no terminal.
Tests for the controller use a real `Kite` with a mocked curses window; the
drawing and key reading entry points are replaced per test.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Iterable, Optional
from unittest.mock import MagicMock

import pytest

from kite.core.Buffer import Buffer
from kite.core.Kite import Kite
from kite.core.Syntax import LanguageProfile
from kite.utils.utils import DEFAULT_CONFIG


# --- Base fixtures for curses and configuration ---
@pytest.fixture
def mock_stdscr() -> MagicMock:
    """Create a mock of the `curses` stdscr for testing UI components.

    Returns:
        MagicMock: A mocked `stdscr` with terminal size set to (24, 80).
    """
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)  # Typical terminal size
    return stdscr


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Provide the built-in configuration, deep-copied so tests may modify it."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    # Tests never talk to the real system clipboard
    config["editor"]["use_system_clipboard"] = False
    return config


# --- Buffer helpers ---
@pytest.fixture
def make_buffer() -> Callable[..., Buffer]:
    """Factory building a clean buffer from a list of lines."""

    def _make(lines: Iterable[str] = (), profile: Optional[LanguageProfile] = None, tab_stop: int = 8) -> Buffer:
        buffer = Buffer(tab_stop=tab_stop, profile=profile)
        buffer.load_lines(list(lines))
        return buffer

    return _make


# --- Kite fixtures ---
@pytest.fixture
def editor(mock_stdscr: MagicMock, mock_config: dict[str, Any]) -> Kite:
    """Create a real `Kite` instance with drawing and key reading stubbed out.

    Tests that go through a prompt feed keys with
    ``editor.keybinder.read_key.side_effect = [...]``.
    """
    kite = Kite(mock_stdscr, mock_config)
    kite.drawer.draw = MagicMock()
    kite.keybinder.read_key = MagicMock(return_value=None)
    return kite
