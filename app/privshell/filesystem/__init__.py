"""Filesystem listing and reading through a privileged shell.

This module provides the listing parser, the directory walker and the
retrying file reader together with their record types.
"""

from privshell.filesystem.listing import is_listing_entry, parse_ls_line, unescape_ls_output
from privshell.filesystem.models import (
    FileMetadata,
    FileType,
    ModeFallback,
    OwnerGroupContext,
    ParsedEntry,
)
from privshell.filesystem.reader import (
    LocalFileOpener,
    PrivilegedFileOpener,
    RetryingFileReader,
)
from privshell.filesystem.walker import DirectoryWalker

__all__ = [
    "DirectoryWalker",
    "FileMetadata",
    "FileType",
    "LocalFileOpener",
    "ModeFallback",
    "OwnerGroupContext",
    "ParsedEntry",
    "PrivilegedFileOpener",
    "RetryingFileReader",
    "is_listing_entry",
    "parse_ls_line",
    "unescape_ls_output",
]
