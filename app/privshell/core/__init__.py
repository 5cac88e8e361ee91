"""Core building blocks: quoting, permissions, utility binary and configuration."""

from privshell.core.errors import (
    ConfigError,
    FileReadError,
    InvalidPermissionFormatError,
    ListingParseError,
    PrivShellError,
    ShellCommandFailedError,
    UnexpectedCommandResultError,
    UtilboxNotAvailableError,
    is_file_not_found,
)
from privshell.core.permissions import mode_to_permission, permission_to_mode
from privshell.core.quoting import quote, quote_multiple, quote_path

__all__ = [
    "ConfigError",
    "FileReadError",
    "InvalidPermissionFormatError",
    "ListingParseError",
    "PrivShellError",
    "ShellCommandFailedError",
    "UnexpectedCommandResultError",
    "UtilboxNotAvailableError",
    "is_file_not_found",
    "mode_to_permission",
    "permission_to_mode",
    "quote",
    "quote_multiple",
    "quote_path",
]
