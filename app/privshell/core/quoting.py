"""Quoting of values for interpolation into shell command lines.

Targets POSIX-like shells (mksh, dash, bash) where, inside double quotes,
only backslash, dollar, double quote and backtick keep a special meaning.
Only those four characters are escaped; everything else passes through.
"""

import os
import re
from collections.abc import Iterable

_CHARACTERS_TO_ESCAPE = re.compile(r'[\\$"`]')


def quote(value: str) -> str:
    """Quote a value for safe use as a single shell word.

    Args:
        value: Arbitrary string (may be empty, must not contain NUL).

    Returns:
        The value wrapped in double quotes with ``\\``, ``$``, ``"`` and
        backtick escaped by a backslash.
    """
    return '"' + _CHARACTERS_TO_ESCAPE.sub(lambda m: "\\" + m.group(0), value) + '"'


def quote_path(path: str | os.PathLike[str]) -> str:
    """Quote the absolute form of a filesystem path."""
    return quote(os.path.abspath(os.fspath(path)))


def quote_multiple(values: Iterable[str]) -> str:
    """Quote each value and join the results with single spaces."""
    return " ".join(quote(value) for value in values)
