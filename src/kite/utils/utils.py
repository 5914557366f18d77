# kite/utils/utils.py
"""
kite.utils.utils.py
===================

This module provides a collection of core utility functions for the Kite editor.

Key functionalities include:
- Automatic User Configuration: Makes sure `~/.config/kite` exists so the user
  has an obvious place to drop a `config.toml`.
- Robust Configuration Loading: Implements a layered strategy that loads a
  hardcoded, built-in default configuration, then recursively merges it with
  user-defined settings from `~/.config/kite/config.toml`.
- Error Types: `FatalError`, the single exception type that aborts the editor.
- Helper Utilities: Includes functions for deep-merging dictionaries and color conversion.

The application is always runnable, even if the user configuration file is
missing or corrupted, by falling back to the embedded defaults.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger("kite")

# --- Constants ---
KITE_VERSION = "0.1.0"
WHITE_FG_IDX = 255
CONFIG_DIR = Path.home() / ".config" / "kite"


class FatalError(Exception):
    """Unrecoverable condition: the terminal is restored and the process exits with status 1."""


# This dictionary is the built-in configuration.
# It serves as the ultimate fallback, ensuring the application can ALWAYS start.
DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "tab_stop": 8,
        "quit_times": 3,
        "status_timeout": 5,
        "read_timeout_ms": 100,
        "use_system_clipboard": True,
    },
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
        "log_file": "kite.log",
    },
    "keybindings": {
        "save_file": "ctrl+s", "quit": "ctrl+q", "find": "ctrl+f",
        "goto_line": "ctrl+g", "undo": "ctrl+z", "select_all": "ctrl+a",
        "copy": "ctrl+c", "cut": "ctrl+x", "paste": "ctrl+v",
        "backspace": ["backspace", "ctrl+h"], "delete": "del",
        "newline": "enter", "tab": "tab", "cancel_operation": ["esc", "ctrl+l"],
        "handle_up": "up", "handle_down": "down",
        "handle_left": "left", "handle_right": "right",
        "handle_home": "home", "handle_end": "end",
        "handle_page_up": "pageup", "handle_page_down": "pagedown",
        "extend_selection_up": "shift+up", "extend_selection_down": "shift+down",
        "extend_selection_left": "shift+left", "extend_selection_right": "shift+right",
        "word_left": "ctrl+left", "word_right": "ctrl+right",
        "scroll_up": "ctrl+up", "scroll_down": "ctrl+down",
    },
    "colors": {
        "normal": "default",
        "comment": "cyan",
        "mlcomment": "cyan",
        "keyword1": "yellow",
        "keyword2": "green",
        "string": "magenta",
        "number": "red",
        "match": "blue",
    },
    "syntax": {},
}


# --- Helper Functions ---

def ensure_user_config_exists() -> None:
    """Creates `~/.config/kite` if it is missing."""
    try:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Could not create user configuration directory {CONFIG_DIR}: {e}")


def load_config() -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    ensure_user_config_exists()

    user_config_path = CONFIG_DIR / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {user_config_path}")
        except Exception as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def hex_to_xterm(hex_color: str) -> int:
    """
    Converts a hexadecimal color string to the nearest xterm-256 color index.
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        return WHITE_FG_IDX
    try:
        r, g, b = (int(hex_color[i:i+2], 16) for i in (0, 2, 4))
    except ValueError:
        return WHITE_FG_IDX

    if r == g == b:
        if r < 8:
            return 16
        if r > 248:
            return 231
        return round(((r - 8) / 247) * 24) + 232

    return int(
        16
        + (36 * round(r / 255 * 5))
        + (6 * round(g / 255 * 5))
        + round(b / 255 * 5)
    )
