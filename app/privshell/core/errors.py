"""Exception hierarchy for privshell.

Command-level and structural failures are raised as typed exceptions and
always propagate to the caller. Data-quality issues in single listing
records are recovered inside the parser and never surface here.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from privshell.utils.shell import CommandResult


class PrivShellError(Exception):
    """Base exception for privshell errors."""


class ShellCommandFailedError(PrivShellError):
    """Raised when a shell command exits with a non-zero status.

    Attributes:
        result: The captured result of the failed command.
        commands: The exact command(s) that were attempted.
    """

    def __init__(self, result: CommandResult, commands: Sequence[str]) -> None:
        self.result = result
        self.commands = tuple(commands)
        super().__init__(
            f"Command failed with exit code {result.returncode}: {' ; '.join(self.commands)}"
        )


class UnexpectedCommandResultError(PrivShellError):
    """Raised when a command succeeded but its output has an unexpected shape.

    Attributes:
        result: The original command result, if one was produced.
    """

    def __init__(self, message: str, result: CommandResult | None = None) -> None:
        self.result = result
        super().__init__(message)


class UtilboxNotAvailableError(PrivShellError):
    """Raised when none of the candidate utility binaries could be resolved.

    Attributes:
        tried: Candidate binary names, in the order they were probed.
    """

    def __init__(self, tried: Sequence[str]) -> None:
        self.tried = tuple(tried)
        super().__init__(f"No utility binary available (tried: {', '.join(self.tried)})")


class FileReadError(PrivShellError, OSError):
    """Raised when a file could not be read up to its expected size.

    Attributes:
        path: Path of the file being read.
        expected_size: Number of bytes that should have been delivered.
        max_retries: Retry budget that was exhausted.
        reached: Byte offset actually reached.
    """

    def __init__(self, path: str, expected_size: int, max_retries: int, reached: int) -> None:
        self.path = path
        self.expected_size = expected_size
        self.max_retries = max_retries
        self.reached = reached
        super().__init__(
            f"Could not read expected amount of input bytes {expected_size} from {path}; "
            f"stopped after {max_retries} tries at {reached}"
        )


class InvalidPermissionFormatError(ValueError):
    """Raised when a permission string cannot be translated to a mode."""


class ListingParseError(ValueError):
    """Raised when a listing line cannot be turned into a record.

    Attributes:
        line: The offending listing line.
    """

    def __init__(self, message: str, line: str) -> None:
        self.line = line
        super().__init__(f"{message}: {line!r}")


class ConfigError(PrivShellError):
    """Base exception for configuration file errors."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file is not valid TOML."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration content does not match the schema."""


def is_file_not_found(error: ShellCommandFailedError) -> bool:
    """Check whether a failed command reported a missing file.

    Only the first line of stderr is inspected.

    Args:
        error: The command failure to classify.

    Returns:
        True if stderr starts with a "no such file or directory" report.
    """
    err = error.result.err
    return bool(err) and "no such file or directory" in err[0].lower()
