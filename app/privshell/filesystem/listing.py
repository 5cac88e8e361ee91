"""Parser for detailed directory listing output.

Turns lines of ``ls -bAll`` output (as produced by toybox/busybox) into
:class:`FileMetadata` records. Expected fields per line::

    drwxrwx--x 5 u0_a441 u0_a441 4096 2021-10-19 01:54:32.029625295 +0200 files
    lrwxrwxrwx 1 root root 61 2021-08-25 16:44:49.757000571 +0200 lib -> /data/app/lib/arm

[0] type and permissions, [1] link count, [2] owner, [3] group, [4] size,
[5] date, [6] time, [7] timezone, [8] name (``name -> target`` for links).
Block and character devices print ``major, minor`` in place of the size.
"""

import logging
import posixpath
import re
from collections.abc import Iterable, Iterator
from datetime import datetime

from privshell.core.errors import InvalidPermissionFormatError, ListingParseError
from privshell.core.permissions import permission_to_mode
from privshell.filesystem.models import FileMetadata, FileType, ModeFallback, ParsedEntry

logger = logging.getLogger(__name__)

LINK_SEPARATOR = " -> "

FALLBACK_MODE_FOR_DIR = permission_to_mode("rwxrwx--x")
FALLBACK_MODE_FOR_FILE = permission_to_mode("rw-rw----")
FALLBACK_MODE_FOR_CACHE = permission_to_mode("rwxrws--x")

# Directory names whose permission strings are known to be unparseable
CACHE_DIRECTORY_NAMES = frozenset({"cache", "code_cache"})

_TOKEN_COUNT = 9
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"

# ASCII blanks only; other Unicode whitespace belongs to the name
_FIELD_SEPARATOR = re.compile(r"[ \t]+")
_DEVICE_TYPES = frozenset({FileType.BLOCK_DEVICE, FileType.CHAR_DEVICE})

# ls -b escapes: \\ \a \b \e \f \n \r \t \v, escaped space, or \OOO (octal byte)
_ESCAPE_PATTERN = re.compile(r"\\([\\abefnrtv ]|[0-7]{3})")
_SIMPLE_ESCAPES: dict[str, str] = {
    "\\": "\\",
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    " ": " ",
}


def unescape_ls_output(value: str) -> str:
    """Decode the backslash escapes written by ``ls -b``.

    Octal escapes are byte values. Consecutive octal escapes are decoded
    together as UTF-8, with undecodable bytes kept as surrogate escapes
    so that ``os.fsencode`` restores the original bytes. Backslash
    sequences outside the escape alphabet are left unchanged.

    Args:
        value: Name field as printed by ``ls -b``.

    Returns:
        The decoded name.
    """
    pieces: list[str] = []
    pending = bytearray()
    position = 0

    for match in _ESCAPE_PATTERN.finditer(value):
        literal = value[position : match.start()]
        escape = match.group(1)
        if literal or len(escape) != 3:
            if pending:
                pieces.append(pending.decode("utf-8", errors="surrogateescape"))
                pending.clear()
            pieces.append(literal)
        if len(escape) == 3:
            pending.append(int(escape, 8))
        else:
            pieces.append(_SIMPLE_ESCAPES[escape])
        position = match.end()

    if pending:
        pieces.append(pending.decode("utf-8", errors="surrogateescape"))
    pieces.append(value[position:])
    return "".join(pieces)


def is_listing_entry(line: str) -> bool:
    """Check whether an output line describes a listing entry.

    Blank lines, ``total`` summary lines and lines with fewer than nine
    blank-separated fields are not entries.
    """
    if not line or not line.strip():
        return False
    if line.startswith("total"):
        return False
    fields = _split_fields(line, _TOKEN_COUNT)
    return len(fields) >= _TOKEN_COUNT and bool(fields[-1])


def parse_ls_line(
    line: str,
    relative_parent: str = "",
    absolute_parent: str = "",
) -> ParsedEntry:
    """Parse one line of ``ls -bAll`` output.

    Args:
        line: Listing line accepted by :func:`is_listing_entry`.
        relative_parent: Logical parent path used to build the relative
            path; empty for the root of the listing.
        absolute_parent: Path the listing command was run against.

    Returns:
        ParsedEntry with the record and the mode fallback, if one applied.

    Raises:
        ListingParseError: If the line has fewer than nine fields or its
            size, timestamp or link fields cannot be read.
    """
    tokens = _split_fields(line, _TOKEN_COUNT)
    if len(tokens) < _TOKEN_COUNT or not tokens[-1]:
        raise ListingParseError("Expected 9 fields in listing line", line)

    type_and_permission = tokens[0]
    file_type = FileType.from_type_char(type_and_permission[0])
    if file_type in _DEVICE_TYPES and tokens[4].endswith(","):
        # "major, minor" stands in for the size field
        tokens = _split_fields(line, _TOKEN_COUNT + 1)
        if len(tokens) <= _TOKEN_COUNT or not tokens[-1]:
            raise ListingParseError("Expected 10 fields in device listing line", line)
        del tokens[5]

    owner = tokens[2]
    group = tokens[3]
    modification_time = _parse_modification_time(tokens[5], tokens[6], tokens[7], line)

    name = unescape_ls_output(tokens[8])
    parent = absolute_parent
    # ls invoked on a single file echoes its full path instead of a bare name
    if absolute_parent.startswith("/") and name.startswith(absolute_parent):
        parent = posixpath.dirname(absolute_parent.rstrip("/")) or "/"
        name = name[len(parent) :].lstrip("/")

    path = f"{relative_parent}/{name}" if relative_parent else name

    size = 0
    link_target: str | None = None
    if file_type == FileType.SYMBOLIC_LINK:
        path, separator, link_target = path.partition(LINK_SEPARATOR)
        if not separator:
            raise ListingParseError("Symbolic link without target", line)
    elif file_type == FileType.REGULAR_FILE:
        try:
            size = int(tokens[4])
        except ValueError as e:
            raise ListingParseError(f"Invalid size {tokens[4]!r}", line) from e

    mode, fallback = _parse_mode(type_and_permission, path, parent)

    metadata = FileMetadata(
        relative_path=path,
        file_type=file_type,
        absolute_parent=parent,
        owner=owner,
        group=group,
        mode=mode,
        modification_time=modification_time,
        size=size,
        link_target=link_target,
    )
    return ParsedEntry(metadata=metadata, mode_fallback=fallback)


def parse_listing(
    lines: Iterable[str],
    relative_parent: str = "",
    absolute_parent: str = "",
) -> Iterator[ParsedEntry]:
    """Parse every entry line of a listing, skipping non-entry lines."""
    for line in lines:
        if is_listing_entry(line):
            yield parse_ls_line(line, relative_parent, absolute_parent)


def _parse_mode(
    type_and_permission: str,
    path: str,
    parent: str,
) -> tuple[int, ModeFallback | None]:
    """Parse the permission part of the mode field, falling back if needed.

    An entry whose relative path is exactly ``cache`` or ``code_cache``
    falls back to the setgid cache directory mode without a warning,
    whatever its absolute parent.
    Other entries fall back by type and log a warning.

    Returns:
        Tuple of (mode, fallback or None).
    """
    try:
        return permission_to_mode(type_and_permission[1:10]), None
    except InvalidPermissionFormatError:
        pass

    if path in CACHE_DIRECTORY_NAMES:
        return FALLBACK_MODE_FOR_CACHE, ModeFallback.CACHE_DIRECTORY

    if type_and_permission[0] == "d":
        mode, fallback = FALLBACK_MODE_FOR_DIR, ModeFallback.DIRECTORY
    else:
        mode, fallback = FALLBACK_MODE_FOR_FILE, ModeFallback.REGULAR_FILE
    logger.warning(
        "Found a file with special mode (%s), which is not processable. "
        "Falling back to %o. path=%s ; absolute_parent=%s",
        type_and_permission,
        mode,
        path,
        parent,
    )
    return mode, fallback


def _split_fields(line: str, count: int) -> list[str]:
    """Split a listing line into at most ``count`` blank-separated fields."""
    return _FIELD_SEPARATOR.split(line.lstrip(" \t"), maxsplit=count - 1)


def _parse_modification_time(date: str, time: str, timezone: str, line: str) -> datetime:
    """Build a timestamp from the date, time and timezone fields.

    Sub-second precision in the time field is discarded.
    """
    whole_seconds = time.split(".", 1)[0]
    try:
        return datetime.strptime(f"{date} {whole_seconds} {timezone}", _TIME_FORMAT)
    except ValueError as e:
        raise ListingParseError("Invalid modification time", line) from e
