# src/kite/core/__init__.py
"""Public facade for kite.core: re-export main classes from CamelCase modules.

Keeps Java-like file names (Buffer.py, Row.py, ...),
but provides flat imports for convenience and stability.
"""

# Re-export classes/symbols from CamelCase modules
from .Buffer import Buffer  # noqa: F401
from .History import History  # noqa: F401
from .Kite import Kite  # noqa: F401
from .Row import Row  # noqa: F401
from .Search import SearchEngine  # noqa: F401
from .Selection import Position, Selection  # noqa: F401
from .Syntax import HighlightFlags, HighlightToken, LanguageProfile  # noqa: F401


__all__ = [
    "Buffer",
    "History",
    "Kite",
    "Row",
    "SearchEngine",
    "Position",
    "Selection",
    "HighlightFlags",
    "HighlightToken",
    "LanguageProfile",
]
