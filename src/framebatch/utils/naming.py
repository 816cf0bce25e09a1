"""Filesystem-safe directory names for arbitrary video names."""

from __future__ import annotations

import re
from urllib.parse import unquote

MAX_NAME_LENGTH = 100

_HOSTILE_CHARS = re.compile(r'[<>:"/\\|?*]')
_PUNCTUATION = re.compile(r"[&'`~!@#$%^+={}]")
_WHITESPACE = re.compile(r"\s+")
_DOTS = re.compile(r"\.+")
_DASHES = re.compile(r"-{2,}")
_UNDERSCORES = re.compile(r"_{2,}")
_MIXED_SEPARATORS = re.compile(r"[-_]*-[-_]*")


def _percent_decode(name: str) -> str:
    try:
        return unquote(name, errors="strict")
    except UnicodeDecodeError:
        return name


def sanitize_name(raw_name: str) -> str:
    """Map ``raw_name`` to a bounded, filesystem-safe directory name.

    Pure and total: never raises, and ``sanitize_name(sanitize_name(x))``
    equals ``sanitize_name(x)``. The result may be empty when ``raw_name``
    consists only of removed characters.
    """
    name = raw_name
    if "%" in name:
        name = _percent_decode(name)

    name = name.replace("[", "").replace("]", "")
    name = _HOSTILE_CHARS.sub("_", name)
    name = name.replace("(", "").replace(")", "")
    name = _PUNCTUATION.sub("", name)
    name = _WHITESPACE.sub("_", name)
    name = _DOTS.sub("_", name)
    name = _DASHES.sub("-", name)
    name = _UNDERSCORES.sub("_", name)
    name = _MIXED_SEPARATORS.sub("-", name)
    name = name.strip("_-")

    # Truncation can expose a separator at the end again
    return name[:MAX_NAME_LENGTH].strip("_-")


def unique_names(names: list[str]) -> list[str]:
    """Suffix repeated names with ``_2``, ``_3``, ... so every entry differs.

    Comparison ignores case, since two directories that differ only in case
    collide on case-insensitive filesystems. First occurrences keep their
    name unchanged.
    """
    taken = {name.casefold() for name in names}
    seen: set[str] = set()
    result = []
    for name in names:
        key = name.casefold()
        if key in seen:
            n = 2
            while f"{name}_{n}".casefold() in taken:
                n += 1
            name = f"{name}_{n}"
            key = name.casefold()
            taken.add(key)
        seen.add(key)
        result.append(name)
    return result
