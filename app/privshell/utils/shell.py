"""Shell execution utilities.

Provides subprocess execution with proper error handling and the
command runners used to talk to a normal or privileged shell.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from privshell.core.errors import ShellCommandFailedError

if TYPE_CHECKING:
    from privshell.core.config import ShellConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0

    @property
    def out(self) -> list[str]:
        """Standard output split into lines."""
        return self.stdout.splitlines()

    @property
    def err(self) -> list[str]:
        """Standard error split into lines."""
        return self.stderr.splitlines()


def run_command(
    args: list[str],
    *,
    timeout: float | None = 60.0,
) -> CommandResult:
    """Execute a command and return the result.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for command.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def run_command_bytes(
    args: list[str],
    *,
    timeout: float | None = 60.0,
) -> tuple[bytes, CommandResult]:
    """Execute a command and return its raw standard output.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for command.

    Returns:
        Tuple of (raw stdout bytes, CommandResult). The CommandResult
        carries decoded stderr and the exit code; its stdout is empty.

    Raises:
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        check=False,
        timeout=timeout,
    )
    return result.stdout, CommandResult(
        stdout="",
        stderr=result.stderr.decode(errors="replace"),
        returncode=result.returncode,
    )


class ShellRunner:
    """Runs command lines through a shell.

    The shell is invoked as ``[*shell_args, command_line]``, e.g.
    ``["su", "-c", "ls -l"]`` for elevated privileges or
    ``["sh", "-c", "ls -l"]`` for the current user. Several commands
    passed to one call are joined with ``" ; "`` into one command line.

    Every non-zero exit raises :class:`ShellCommandFailedError`; no
    command is ever retried.

    Args:
        shell_args: Shell invocation prefix.
        timeout: Maximum time in seconds to wait for each command line.
    """

    def __init__(
        self,
        shell_args: Sequence[str] = ("sh", "-c"),
        *,
        timeout: float | None = 20.0,
    ) -> None:
        if not shell_args:
            msg = "Shell arguments cannot be empty"
            raise ValueError(msg)
        self._shell_args = tuple(shell_args)
        self._timeout = timeout

    @classmethod
    def privileged(cls, config: ShellConfig) -> ShellRunner:
        """Create a runner executing commands with elevated privileges."""
        return cls(config.su_command, timeout=config.timeout)

    @classmethod
    def unprivileged(cls, config: ShellConfig) -> ShellRunner:
        """Create a runner executing commands as the current user."""
        return cls(config.sh_command, timeout=config.timeout)

    @property
    def shell_args(self) -> tuple[str, ...]:
        """Shell invocation prefix used for every command line."""
        return self._shell_args

    def run(self, *commands: str) -> CommandResult:
        """Run one or more commands and capture their output.

        Args:
            commands: Command lines to run, joined with ``" ; "``.

        Returns:
            CommandResult of the successful run.

        Raises:
            ShellCommandFailedError: If the command line exits non-zero.
            subprocess.TimeoutExpired: If the command exceeds the timeout.
            FileNotFoundError: If the shell executable is not found.
        """
        command_line = " ; ".join(commands)
        logger.debug("Running command: %s", command_line)
        result = run_command([*self._shell_args, command_line], timeout=self._timeout)
        logger.debug("Command %s ended with %d", command_line, result.returncode)
        if not result.success:
            raise ShellCommandFailedError(result, commands)
        return result

    def run_bytes(self, command: str) -> bytes:
        """Run a command and return its raw standard output.

        Args:
            command: Command line to run.

        Returns:
            Raw bytes written to stdout.

        Raises:
            ShellCommandFailedError: If the command line exits non-zero.
        """
        logger.debug("Running binary command: %s", command)
        data, result = run_command_bytes([*self._shell_args, command], timeout=self._timeout)
        logger.debug("Command %s ended with %d (%d bytes)", command, result.returncode, len(data))
        if not result.success:
            raise ShellCommandFailedError(result, (command,))
        return data
