# kite/core/Syntax.py
"""
kite.core.Syntax
================

Per-character syntax classification for Kite.

The classifier works on one rendered row at a time and only knows about a
small, fixed vocabulary of semantic tokens (`HighlightToken`). What each
token looks like on screen is decided by the renderer; this module never
touches curses.

A row can end inside an unterminated block comment. That single bit of
state is returned alongside the token list so the buffer can propagate it
to the following rows (see `Buffer.update_syntax`).

Language rules are described by immutable `LanguageProfile` objects. A small
database of built-in profiles ships with the editor and can be extended or
overridden from the ``[syntax.<name>]`` tables of the user configuration.
Profiles are chosen by filename; when no profile claims the file directly,
Pygments is asked which language the filename belongs to.
"""

import logging
import os
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pygments.lexers import find_lexer_class_for_filename
from pygments.util import ClassNotFound

logger = logging.getLogger("kite")

SEPARATORS = ",.()+-/*=~%<>[];"


class HighlightToken(IntEnum):
    NORMAL = 0
    COMMENT = 1
    MLCOMMENT = 2
    KEYWORD1 = 3
    KEYWORD2 = 4
    STRING = 5
    NUMBER = 6
    MATCH = 7


class HighlightFlags(IntFlag):
    NONE = 0
    NUMBERS = 1
    STRINGS = 2


@dataclass(frozen=True)
class LanguageProfile:
    """Immutable rule set for one file type.

    Keywords ending with ``|`` belong to the secondary (type-like) class and
    are highlighted as `HighlightToken.KEYWORD2`; the marker itself is not
    part of the matched text.
    """

    filetype: str
    filematch: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    singleline_comment_start: str = ""
    multiline_comment_start: str = ""
    multiline_comment_end: str = ""
    flags: HighlightFlags = HighlightFlags.NONE
    lexer_names: Tuple[str, ...] = ()


def is_separator(ch: str) -> bool:
    """Whitespace, end of row (empty string or NUL) and punctuation end a token."""
    return ch == "" or ch == "\0" or ch.isspace() or ch in SEPARATORS


def highlight_line(
    render: str, profile: Optional[LanguageProfile], in_comment: bool = False
) -> Tuple[List[HighlightToken], bool]:
    """Classifies every character of ``render``.

    Args:
        render: The rendered (tab-expanded) row content.
        profile: Active language profile, or None for plain text.
        in_comment: Whether the previous row ended inside a block comment.

    Returns:
        A ``(tokens, open_comment)`` pair where ``tokens`` has exactly one
        entry per character of ``render`` and ``open_comment`` tells whether
        this row ends inside an unterminated block comment.
    """
    size = len(render)
    hl = [HighlightToken.NORMAL] * size
    if profile is None:
        return hl, False

    scs = profile.singleline_comment_start
    mcs = profile.multiline_comment_start
    mce = profile.multiline_comment_end
    flags = profile.flags

    prev_sep = True
    in_string = ""
    i = 0
    while i < size:
        c = render[i]
        prev_hl = hl[i - 1] if i > 0 else HighlightToken.NORMAL

        if scs and not in_string and not in_comment:
            if render.startswith(scs, i):
                hl[i:] = [HighlightToken.COMMENT] * (size - i)
                break

        if mcs and mce and not in_string:
            if in_comment:
                hl[i] = HighlightToken.MLCOMMENT
                if render.startswith(mce, i):
                    end = min(i + len(mce), size)
                    hl[i:end] = [HighlightToken.MLCOMMENT] * (end - i)
                    i = end
                    in_comment = False
                    prev_sep = True
                else:
                    i += 1
                continue
            elif render.startswith(mcs, i):
                end = min(i + len(mcs), size)
                hl[i:end] = [HighlightToken.MLCOMMENT] * (end - i)
                i = end
                in_comment = True
                continue

        if flags & HighlightFlags.STRINGS:
            if in_string:
                hl[i] = HighlightToken.STRING
                if c == "\\" and i + 1 < size:
                    hl[i + 1] = HighlightToken.STRING
                    i += 2
                    continue
                if c == in_string:
                    in_string = ""
                i += 1
                prev_sep = True
                continue
            elif c in ('"', "'"):
                in_string = c
                hl[i] = HighlightToken.STRING
                i += 1
                continue

        if flags & HighlightFlags.NUMBERS:
            if ("0" <= c <= "9" and (prev_sep or prev_hl == HighlightToken.NUMBER)) or (
                c == "." and prev_hl == HighlightToken.NUMBER
            ):
                hl[i] = HighlightToken.NUMBER
                i += 1
                prev_sep = False
                continue

        if prev_sep:
            matched = _match_keyword(render, i, profile.keywords)
            if matched is not None:
                length, token = matched
                hl[i:i + length] = [token] * length
                i += length
                prev_sep = False
                continue

        prev_sep = is_separator(c)
        i += 1

    return hl, in_comment


def _match_keyword(
    render: str, pos: int, keywords: Iterable[str]
) -> Optional[Tuple[int, HighlightToken]]:
    for keyword in keywords:
        token = HighlightToken.KEYWORD1
        if keyword.endswith("|"):
            keyword = keyword[:-1]
            token = HighlightToken.KEYWORD2
        if not keyword:
            continue
        end = pos + len(keyword)
        if render.startswith(keyword, pos) and is_separator(render[end:end + 1]):
            return len(keyword), token
    return None


# --- Built-in profile database ---

C_PROFILE = LanguageProfile(
    filetype="c",
    filematch=(".c", ".h", ".cpp", ".hpp", ".cc"),
    keywords=(
        "auto", "break", "case", "continue", "default", "do", "else", "enum",
        "extern", "for", "goto", "if", "register", "return", "sizeof", "static",
        "struct", "switch", "typedef", "union", "volatile", "while", "NULL",
        "alignas", "alignof", "and", "and_eq", "asm", "bitand", "bitor", "class",
        "compl", "constexpr", "const_cast", "deltype", "delete", "dynamic_cast",
        "explicit", "export", "false", "friend", "inline", "mutable", "namespace",
        "new", "noexcept", "not", "not_eq", "nullptr", "operator", "or", "or_eq",
        "private", "protected", "public", "reinterpret_cast", "static_assert",
        "static_cast", "template", "this", "thread_local", "throw", "true", "try",
        "typeid", "typename", "virtual", "xor", "xor_eq",
        "int|", "long|", "double|", "float|", "char|", "unsigned|", "signed|",
        "void|", "short|", "auto|", "const|", "bool|",
    ),
    singleline_comment_start="//",
    multiline_comment_start="/*",
    multiline_comment_end="*/",
    flags=HighlightFlags.NUMBERS | HighlightFlags.STRINGS,
    lexer_names=("C", "C++"),
)

PYTHON_PROFILE = LanguageProfile(
    filetype="python",
    filematch=(".py", ".pyw"),
    keywords=(
        "and", "as", "assert", "async", "await", "break", "class", "continue",
        "def", "del", "elif", "else", "except", "finally", "for", "from",
        "global", "if", "import", "in", "is", "lambda", "nonlocal", "not", "or",
        "pass", "raise", "return", "try", "while", "with", "yield",
        "None|", "True|", "False|", "self|", "int|", "str|", "float|", "bool|",
        "list|", "dict|", "set|", "tuple|", "bytes|",
    ),
    singleline_comment_start="#",
    flags=HighlightFlags.NUMBERS | HighlightFlags.STRINGS,
    lexer_names=("Python", "Python 2.x", "Cython"),
)

JAVASCRIPT_PROFILE = LanguageProfile(
    filetype="javascript",
    filematch=(".js", ".mjs", ".cjs", ".jsx", ".ts", ".tsx"),
    keywords=(
        "break", "case", "catch", "class", "const", "continue", "debugger",
        "default", "delete", "do", "else", "export", "extends", "finally", "for",
        "function", "if", "import", "in", "instanceof", "let", "new", "return",
        "super", "switch", "this", "throw", "try", "typeof", "var", "void",
        "while", "with", "yield", "async", "await",
        "true|", "false|", "null|", "undefined|", "NaN|", "Infinity|",
    ),
    singleline_comment_start="//",
    multiline_comment_start="/*",
    multiline_comment_end="*/",
    flags=HighlightFlags.NUMBERS | HighlightFlags.STRINGS,
    lexer_names=("JavaScript", "TypeScript", "JSX"),
)

SHELL_PROFILE = LanguageProfile(
    filetype="shell",
    filematch=(".sh", ".bash", ".zsh", "bashrc", "profile"),
    keywords=(
        "if", "then", "else", "elif", "fi", "for", "while", "until", "do",
        "done", "case", "esac", "in", "function", "return", "local", "export",
        "echo|", "cd|", "exit|", "set|", "unset|", "source|", "read|",
    ),
    singleline_comment_start="#",
    flags=HighlightFlags.NUMBERS | HighlightFlags.STRINGS,
    lexer_names=("Bash", "Shell Session"),
)

BUILTIN_PROFILES: Tuple[LanguageProfile, ...] = (
    C_PROFILE,
    PYTHON_PROFILE,
    JAVASCRIPT_PROFILE,
    SHELL_PROFILE,
)


def profile_from_config(name: str, section: Dict[str, Any]) -> LanguageProfile:
    """Builds a profile from one ``[syntax.<name>]`` configuration table.

    Recognised keys: ``extensions``, ``keywords``, ``types``, ``line_comment``,
    ``block_comment`` (a two-element list), ``numbers``, ``strings`` and
    ``lexers``. Entries of ``types`` become secondary keywords.
    """
    flags = HighlightFlags.NONE
    if section.get("numbers", True):
        flags |= HighlightFlags.NUMBERS
    if section.get("strings", True):
        flags |= HighlightFlags.STRINGS

    block = section.get("block_comment") or ["", ""]
    if len(block) != 2:
        logger.warning(f"Ignoring malformed block_comment for syntax '{name}': {block!r}")
        block = ["", ""]

    keywords = [str(k) for k in section.get("keywords", [])]
    keywords += [f"{t}|" for t in section.get("types", [])]

    return LanguageProfile(
        filetype=name,
        filematch=tuple(str(e) for e in section.get("extensions", [])),
        keywords=tuple(keywords),
        singleline_comment_start=str(section.get("line_comment", "")),
        multiline_comment_start=str(block[0]),
        multiline_comment_end=str(block[1]),
        flags=flags,
        lexer_names=tuple(str(n) for n in section.get("lexers", [])),
    )


def load_profiles(config: Optional[Dict[str, Any]] = None) -> List[LanguageProfile]:
    """Returns the built-in profiles merged with the user's ``[syntax]`` tables.

    A user table whose name equals a built-in filetype replaces that profile;
    any other name is appended and takes precedence over the built-ins.
    """
    profiles = {p.filetype: p for p in BUILTIN_PROFILES}
    user_sections = (config or {}).get("syntax", {}) or {}
    user_profiles = []
    for name, section in user_sections.items():
        if not isinstance(section, dict):
            logger.warning(f"Ignoring [syntax.{name}]: expected a table, got {type(section).__name__}")
            continue
        profile = profile_from_config(name, section)
        if name in profiles:
            profiles[name] = profile
        else:
            user_profiles.append(profile)
        logger.debug(f"Loaded syntax profile '{name}' from configuration")
    return user_profiles + list(profiles.values())


def _filematch(filename: str, pattern: str) -> bool:
    if pattern.startswith("."):
        _, ext = os.path.splitext(filename)
        return ext == pattern
    return pattern in filename


def select_profile(
    filename: Optional[str], profiles: Iterable[LanguageProfile] = BUILTIN_PROFILES
) -> Optional[LanguageProfile]:
    """Picks the profile for ``filename``, or None when no profile applies."""
    if not filename:
        return None
    profiles = list(profiles)
    base_name = os.path.basename(filename)

    for profile in profiles:
        if any(_filematch(base_name, pattern) for pattern in profile.filematch):
            logger.debug(f"Profile '{profile.filetype}' selected for {base_name} by file match")
            return profile

    try:
        lexer_cls = find_lexer_class_for_filename(base_name)
    except ClassNotFound:
        lexer_cls = None
    if lexer_cls is not None:
        for profile in profiles:
            if lexer_cls.name in profile.lexer_names:
                logger.debug(f"Profile '{profile.filetype}' selected for {base_name} via lexer {lexer_cls.name}")
                return profile
        logger.debug(f"Lexer {lexer_cls.name} matched {base_name} but no profile handles it")
    return None
