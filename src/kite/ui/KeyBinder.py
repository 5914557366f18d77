# kite/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
The KeyBinder class turns terminal input into editor actions for Kite.

The terminal runs in raw mode with curses keypad translation switched off,
so `read_key` sees the bytes the terminal actually sends. It collects one
key's worth of bytes (a single byte, a whole escape sequence or a whole
UTF-8 character) and hands the chunk to `kite.ui.KeyDecoder.decode`, which
yields one logical key token.

Key Features:
- Loads keybindings from the ``[keybindings]`` configuration section, with
  built-in defaults, and resolves key strings such as ``"ctrl+s"`` or
  ``"shift+up"`` into key tokens.
- Maps key tokens to editor action methods.
- Inserts printable characters that are not bound to an action.
- Reads input with a bounded wait so the main loop can redraw the status
  line even when no key is pressed.

Intended Usage:
---------------
Instantiate KeyBinder with a reference to the main Kite instance. Use
`read_key` to obtain the next token (or None on timeout) and `handle_input`
to dispatch it.
"""

import curses
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from wcwidth import wcswidth

from kite.ui.KeyDecoder import ESC, SPECIAL_BASE, Key, ctrl_key, decode, key_name
from kite.utils.logging_config import KEY_LOGGER
from kite.utils.utils import FatalError

if TYPE_CHECKING:
    from kite.core.Kite import Kite

# Longest escape sequence we decode: ESC [ 1 ; 5 C
MAX_SEQUENCE_BYTES = 8


def utf8_sequence_length(lead: int) -> int:
    """Number of bytes in the UTF-8 sequence starting with ``lead``."""
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def escape_sequence_complete(chunk: bytes) -> bool:
    """True once ``chunk`` (starting with ESC) holds a whole escape sequence.

    ``ESC [`` sequences end with a byte in the range ``@``..``~``; ``ESC O``
    sequences are three bytes long; ESC followed by anything else is two.
    """
    if len(chunk) < 2:
        return False
    if chunk[1] == ord("["):
        return len(chunk) >= 3 and 0x40 <= chunk[-1] <= 0x7E
    if chunk[1] == ord("O"):
        return len(chunk) >= 3
    return True


def chunk_complete(chunk: bytes) -> bool:
    """True once ``chunk`` holds one whole key: an escape sequence or a UTF-8 character."""
    if chunk[0] == ESC:
        return escape_sequence_complete(chunk)
    return len(chunk) >= utf8_sequence_length(chunk[0])


def _action_name(action: Callable[..., Any]) -> str:
    return getattr(action, "__name__", repr(action))


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Manages keybindings, input reading and action dispatch for the Kite editor.

    Attributes:
        editor (Kite): Reference to the main editor instance.
        config: Editor configuration, including user-defined keybindings.
        stdscr: The curses window input is read from.
        read_timeout_ms (int): How long `read_key` waits for the first byte.
        keybindings (dict): Mapping of action names to lists of key tokens.
        action_map (dict): Mapping of key tokens to editor action methods.
    """

    NAMED_KEYS: dict[str, int] = {
        "left": Key.ARROW_LEFT,
        "right": Key.ARROW_RIGHT,
        "up": Key.ARROW_UP,
        "down": Key.ARROW_DOWN,
        "home": Key.HOME,
        "end": Key.END,
        "pageup": Key.PAGE_UP,
        "pgup": Key.PAGE_UP,
        "pagedown": Key.PAGE_DOWN,
        "pgdn": Key.PAGE_DOWN,
        "delete": Key.DEL,
        "del": Key.DEL,
        "backspace": Key.BACKSPACE,
        "tab": Key.TAB,
        "enter": Key.ENTER,
        "return": Key.ENTER,
        "space": ord(" "),
        "esc": Key.ESCAPE,
        "escape": Key.ESCAPE,
        "shift+left": Key.SHIFT_ARROW_LEFT,
        "shift+right": Key.SHIFT_ARROW_RIGHT,
        "shift+up": Key.SHIFT_ARROW_UP,
        "shift+down": Key.SHIFT_ARROW_DOWN,
        "ctrl+left": Key.CTRL_ARROW_LEFT,
        "ctrl+right": Key.CTRL_ARROW_RIGHT,
        "ctrl+up": Key.CTRL_ARROW_UP,
        "ctrl+down": Key.CTRL_ARROW_DOWN,
    }

    DEFAULT_KEYBINDINGS: dict[str, list[str]] = {
        "save_file": ["ctrl+s"],
        "quit": ["ctrl+q"],
        "find": ["ctrl+f"],
        "goto_line": ["ctrl+g"],
        "undo": ["ctrl+z"],
        "select_all": ["ctrl+a"],
        "copy": ["ctrl+c"],
        "cut": ["ctrl+x"],
        "paste": ["ctrl+v"],
        "backspace": ["backspace", "ctrl+h"],
        "delete": ["del"],
        "newline": ["enter"],
        "tab": ["tab"],
        "cancel_operation": ["esc", "ctrl+l"],
        "handle_up": ["up"],
        "handle_down": ["down"],
        "handle_left": ["left"],
        "handle_right": ["right"],
        "handle_home": ["home"],
        "handle_end": ["end"],
        "handle_page_up": ["pageup"],
        "handle_page_down": ["pagedown"],
        "extend_selection_up": ["shift+up"],
        "extend_selection_down": ["shift+down"],
        "extend_selection_left": ["shift+left"],
        "extend_selection_right": ["shift+right"],
        "word_left": ["ctrl+left"],
        "word_right": ["ctrl+right"],
        "scroll_up": ["ctrl+up"],
        "scroll_down": ["ctrl+down"],
    }

    def __init__(self, editor: "Kite"):
        logging.debug("KeyBinder initialized with editor: %s", editor)
        self.editor = editor
        self.config = editor.config
        self.stdscr = editor.stdscr
        self.read_timeout_ms = int(self.config.get("editor", {}).get("read_timeout_ms", 100))

        self.keybindings = self._load_keybindings()
        self.action_map = self._setup_action_map()

    # ---------------------- Reading --------------------
    def read_key(self, window: Optional[Any] = None) -> Optional[int]:
        """Reads one key from the terminal.

        Waits at most ``read_timeout_ms`` for the first byte. After an ESC,
        bytes that are already available are taken up to the end of the
        escape sequence; after a UTF-8 lead byte, its continuation bytes are
        taken. Nothing that belongs to the next key is consumed.

        Returns:
            The decoded key token, or None when nothing arrived in time.

        Raises:
            FatalError: If the terminal read itself fails.
        """
        target = window or self.stdscr
        try:
            target.timeout(self.read_timeout_ms)
            ch = target.getch()
            if ch == curses.ERR:
                return None
            if ch == curses.KEY_RESIZE:
                KEY_LOGGER.debug("read_key: RESIZE")
                return Key.RESIZE
            if not 0 <= ch <= 255:
                logging.debug(f"read_key: ignoring curses key code {ch}")
                return None

            chunk = bytearray([ch])
            if not chunk_complete(chunk):
                target.timeout(0)
                while len(chunk) < MAX_SEQUENCE_BYTES and not chunk_complete(chunk):
                    nx = target.getch()
                    if nx == curses.ERR or not 0 <= nx <= 255:
                        break
                    chunk.append(nx)
                target.timeout(self.read_timeout_ms)
        except curses.error as e:
            logging.critical(f"read_key: terminal read failed: {e}")
            raise FatalError(f"read: {e}") from e

        key = decode(bytes(chunk))
        KEY_LOGGER.debug(f"read_key: {bytes(chunk)!r} -> {key_name(key)}")
        return key

    # ---------------------- Handle Input --------------------
    def _handle_printable_character(self, key: int) -> bool:
        """Inserts ``key`` into the buffer if it is a visible character."""
        if not isinstance(key, int) or key < 32 or key == Key.BACKSPACE or key >= SPECIAL_BASE:
            return False
        char_to_insert = chr(key)
        if wcswidth(char_to_insert) <= 0:
            return False
        logging.debug(f"handle_input: Treating {char_to_insert!r} as printable character for insertion.")
        return self.editor.insert_text(char_to_insert)

    def handle_input(self, key: Optional[int]) -> bool:
        """Processes a single key token and triggers the corresponding editor action.

        Returns:
            bool: True if the screen needs to be redrawn.

        Raises:
            FatalError: Propagated from actions; any other exception is
                logged and reported on the status line.
        """
        if key is None:
            return False
        logging.debug("handle_input: Received key token → %s", key_name(key))

        original_status = self.editor.status_message
        changed = False
        try:
            if key in self.action_map:
                action = self.action_map[key]
                logging.debug(f"handle_input: Key {key_name(key)} found in action_map. Calling: {_action_name(action)}")
                changed = bool(action())
            elif self._handle_printable_character(key):
                changed = True
            else:
                logging.debug("Unhandled input: %s", key_name(key))

            if key not in self.keybindings.get("quit", []):
                self.editor.reset_quit_confirmation()

            if self.editor.status_message != original_status:
                changed = True
            return changed
        except FatalError:
            raise
        except Exception as e_handler:
            logging.exception("Input handler error. This should be investigated.")
            self.editor.set_status_message(f"Input handler error: {str(e_handler)[:50]}")
            return True

    # ---------------------- Bindings --------------------
    def _load_keybindings(self) -> dict[str, list[int]]:
        """Resolves the configured keybindings into key tokens.

        Each action takes its key specs from ``[keybindings]`` when present,
        otherwise from `DEFAULT_KEYBINDINGS`. A spec may be a string, a list
        of strings, or a string with alternatives separated by ``|``. An
        empty value disables the action.
        """
        user_keybindings_config: dict[str, object] = self.config.get("keybindings", {})
        parsed_keybindings: dict[str, list[int]] = {}

        for action, default_value_spec in self.DEFAULT_KEYBINDINGS.items():
            spec: object = user_keybindings_config.get(action, default_value_spec)
            if not spec:
                logging.debug("Keybinding for action %r is disabled or empty.", action)
                continue

            if isinstance(spec, list):
                specs_to_process = spec
            elif isinstance(spec, str) and "|" in spec:
                specs_to_process = [s.strip() for s in spec.split("|")]
            else:
                specs_to_process = [spec]

            key_codes_for_action: list[int] = []
            for key_spec_item in specs_to_process:
                try:
                    key_code = self._decode_keystring(key_spec_item)
                except ValueError as e:
                    logging.error(
                        "Error parsing keybinding item %r for action %r: %s. "
                        "This specific binding for the action will be ignored.",
                        key_spec_item, action, e,
                    )
                    continue
                if key_code not in key_codes_for_action:
                    key_codes_for_action.append(key_code)

            if key_codes_for_action:
                parsed_keybindings[action] = key_codes_for_action
            else:
                logging.warning(
                    "No valid key codes found for action %r after parsing. It will not be bound.", action
                )

        for action in user_keybindings_config:
            if action not in self.DEFAULT_KEYBINDINGS:
                logging.warning(f"Unknown action '{action}' in [keybindings]. Ignored.")

        logging.debug("Loaded and parsed keybindings (action -> key tokens): %s", parsed_keybindings)
        return parsed_keybindings

    def _decode_keystring(self, key_input: str | int) -> int:
        """Decodes a key specification into a key token.

        Accepts integers (taken as-is), named keys (``"pagedown"``,
        ``"shift+up"``, ``"ctrl+left"``), ``"ctrl+<letter>"`` and single
        characters.

        Raises:
            ValueError: If the specification cannot be resolved.
        """
        if isinstance(key_input, bool) or not isinstance(key_input, (str, int)):
            raise ValueError(f"Invalid key_input type: {type(key_input)}. Expected str or int.")
        if isinstance(key_input, int):
            return key_input

        s = key_input.strip().lower()
        if not s:
            raise ValueError("Key string cannot be empty.")

        if s in self.NAMED_KEYS:
            return int(self.NAMED_KEYS[s])

        parts = s.split("+")
        if len(parts) == 2 and parts[0] == "ctrl" and len(parts[1]) == 1:
            base = parts[1]
            if "a" <= base <= "z" or base in "[\\]^_@":
                return ctrl_key(base)
            raise ValueError(f"Ctrl+{base!r} has no control code in '{key_input}'")

        if len(key_input) == 1:
            return ord(key_input)

        raise ValueError(f"Unknown key '{key_input}'")

    def _setup_action_map(self) -> dict[int, Callable[..., Any]]:
        """Builds the mapping from key tokens to editor action methods."""
        logging.debug("Setting up action map for KeyBinder.")
        action_to_method_map: dict[str, Callable] = {
            "save_file": self.editor.save_file,
            "quit": self.editor.exit_editor,
            "find": self.editor.find,
            "goto_line": self.editor.goto_line,
            "undo": self.editor.undo,
            "select_all": self.editor.select_all,
            "copy": self.editor.copy,
            "cut": self.editor.cut,
            "paste": self.editor.paste,
            "backspace": self.editor.handle_backspace,
            "delete": self.editor.handle_delete,
            "newline": self.editor.handle_enter,
            "tab": self.editor.handle_tab,
            "cancel_operation": self.editor.handle_escape,
            "handle_up": self.editor.handle_up,
            "handle_down": self.editor.handle_down,
            "handle_left": self.editor.handle_left,
            "handle_right": self.editor.handle_right,
            "handle_home": self.editor.handle_home,
            "handle_end": self.editor.handle_end,
            "handle_page_up": self.editor.handle_page_up,
            "handle_page_down": self.editor.handle_page_down,
            "extend_selection_up": self.editor.extend_selection_up,
            "extend_selection_down": self.editor.extend_selection_down,
            "extend_selection_left": self.editor.extend_selection_left,
            "extend_selection_right": self.editor.extend_selection_right,
            "word_left": self.editor.word_left,
            "word_right": self.editor.word_right,
            "scroll_up": self.editor.scroll_up,
            "scroll_down": self.editor.scroll_down,
        }

        final_key_action_map: dict[int, Callable] = {
            Key.RESIZE: self.editor.handle_resize,
            10: self.editor.handle_enter,  # LF, when the terminal still translates CR
        }

        for action_name, key_code_list in self.keybindings.items():
            method_callable = action_to_method_map.get(action_name)
            if not method_callable:
                logging.warning(f"Action '{action_name}' in keybindings but no corresponding method. Ignored.")
                continue
            for key_code in key_code_list:
                if key_code in final_key_action_map and final_key_action_map[key_code] != method_callable:
                    logging.warning(
                        f"Keybinding for action '{action_name}' (key: {key_name(key_code)}) is overwriting "
                        f"an existing mapping for method '{_action_name(final_key_action_map[key_code])}'."
                    )
                final_key_action_map[key_code] = method_callable

        final_map_log_str = {key_name(k): _action_name(v) for k, v in final_key_action_map.items()}
        logging.debug(f"Final constructed action map: {final_map_log_str}")
        return final_key_action_map
