# packaging/pyinstaller/rthooks/force_imports.py
"""Runtime hook to force-import critical dependencies without crashing.

- Mandatory imports: must exist in the bundled app (build guarantees that).
- Optional imports: attempted, but ignored if missing.
"""

from importlib import import_module

# Hard requirements for startup (imported at top-level by kite)
MANDATORY = [
    "toml",
    "chardet",
    "pyperclip",
    "wcwidth",
    # pygments resolves lexers lazily by name; pull in the lookup tables
    "pygments.lexers",
    "pygments.util",
]

# Best-effort extras (do not crash if absent)
OPTIONAL = [
    "pygments.lexers._mapping",
]

for name in MANDATORY:
    import_module(name)

for name in OPTIONAL:
    try:
        import_module(name)
    except ImportError:
        pass


# Curses setup for FreeBSD
try:
    import curses
    # Ensure terminfo is found
    if hasattr(curses, "setupterm"):
        try:
            curses.setupterm()
        except curses.error:
            pass
except ImportError:
    pass

# Locale setup
try:
    import locale
    locale.setlocale(locale.LC_ALL, "")
except locale.Error:
    pass
