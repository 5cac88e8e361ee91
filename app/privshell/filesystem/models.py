"""Filesystem domain models for privileged directory listings.

This module defines the immutable records produced when parsing
detailed ``ls`` output, together with the outcome values that describe
how a record's fields were obtained.
"""

import posixpath
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class FileType(str, Enum):
    """Type of a listed filesystem entry.

    Attributes:
        REGULAR_FILE: Regular file (also any unrecognized type character).
        DIRECTORY: Directory (``d``).
        SYMBOLIC_LINK: Symbolic link (``l``).
        NAMED_PIPE: FIFO (``p``).
        SOCKET: Unix domain socket (``s``).
        BLOCK_DEVICE: Block device (``b``).
        CHAR_DEVICE: Character device (``c``).
    """

    REGULAR_FILE = "regular_file"
    DIRECTORY = "directory"
    SYMBOLIC_LINK = "symbolic_link"
    NAMED_PIPE = "named_pipe"
    SOCKET = "socket"
    BLOCK_DEVICE = "block_device"
    CHAR_DEVICE = "char_device"

    @classmethod
    def from_type_char(cls, char: str) -> "FileType":
        """Map the first character of an ``ls -l`` mode string to a FileType."""
        return _TYPE_CHARS.get(char, cls.REGULAR_FILE)


_TYPE_CHARS: dict[str, FileType] = {
    "d": FileType.DIRECTORY,
    "l": FileType.SYMBOLIC_LINK,
    "p": FileType.NAMED_PIPE,
    "s": FileType.SOCKET,
    "b": FileType.BLOCK_DEVICE,
    "c": FileType.CHAR_DEVICE,
}


class ModeFallback(str, Enum):
    """Fallback applied when a permission string could not be parsed.

    Attributes:
        CACHE_DIRECTORY: Entry named ``cache`` or ``code_cache``.
        DIRECTORY: Any other directory.
        REGULAR_FILE: Any other non-directory entry.
    """

    CACHE_DIRECTORY = "cache_directory"
    DIRECTORY = "directory"
    REGULAR_FILE = "regular_file"


@dataclass(frozen=True, slots=True)
class FileMetadata:
    """A single entry of a detailed directory listing.

    Records are built in one step from fully resolved fields. The fields
    specific to one file type are tied to it: only regular files carry a
    size, only symbolic links carry a link target.

    Attributes:
        relative_path: Path relative to the logical root of the listing.
        file_type: Type of the entry.
        absolute_parent: Absolute path of the directory holding the entry.
        owner: Owner name as reported by the listing tool.
        group: Group name as reported by the listing tool.
        mode: Numeric permission bits (parsed or a fallback).
        modification_time: Last modification time, whole seconds.
        size: Size in bytes; always 0 for non-regular files.
        link_target: Link target as reported; set only for symbolic links.
    """

    relative_path: str
    file_type: FileType
    absolute_parent: str
    owner: str
    group: str
    mode: int
    modification_time: datetime
    size: int = 0
    link_target: str | None = None

    def __post_init__(self) -> None:
        """Validate the type-specific fields."""
        if not self.relative_path:
            msg = "Relative path cannot be empty"
            raise ValueError(msg)
        if self.size < 0:
            msg = f"Size cannot be negative, got {self.size}"
            raise ValueError(msg)
        if self.file_type != FileType.REGULAR_FILE and self.size != 0:
            msg = f"Only regular files carry a size, got {self.size} for {self.file_type.value}"
            raise ValueError(msg)
        is_link = self.file_type == FileType.SYMBOLIC_LINK
        if is_link != (self.link_target is not None):
            msg = "A link target must be set exactly for symbolic links"
            raise ValueError(msg)

    @property
    def filename(self) -> str:
        """Base name of the entry."""
        return posixpath.basename(self.relative_path)

    @property
    def absolute_path(self) -> str:
        """Absolute path of the entry, derived from parent and file name."""
        return f"{self.absolute_parent.rstrip('/')}/{self.filename}"

    @property
    def is_directory(self) -> bool:
        """Check if the entry is a directory."""
        return self.file_type == FileType.DIRECTORY


@dataclass(frozen=True, slots=True)
class ParsedEntry:
    """Outcome of parsing one listing line.

    Attributes:
        metadata: The parsed record.
        mode_fallback: Fallback used for ``mode``, or None if it was parsed.
    """

    metadata: FileMetadata
    mode_fallback: ModeFallback | None = None


@dataclass(frozen=True, slots=True)
class OwnerGroupContext:
    """Ownership and SELinux context of a path.

    Attributes:
        owner: Owner name.
        group: Group name.
        context: SELinux security context.
    """

    owner: str
    group: str
    context: str
