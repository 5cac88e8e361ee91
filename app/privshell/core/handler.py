"""Session-level access to the privileged shell.

:class:`ShellHandler` resolves the utility binary once on construction
and hands the resulting :class:`UtilBox` to the directory walker and the
file reader for the rest of its lifetime.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from privshell.core.config import ShellConfig
from privshell.core.utilbox import UtilBox, resolve_utilbox
from privshell.filesystem.models import FileMetadata, OwnerGroupContext
from privshell.filesystem.reader import PrivilegedFileOpener, RetryingFileReader
from privshell.filesystem.walker import DirectoryWalker
from privshell.utils.shell import CommandResult, ShellRunner

logger = logging.getLogger(__name__)


class ShellHandler:
    """Entry point for listing and reading files through a privileged shell.

    Args:
        config: Shell configuration. Defaults to :class:`ShellConfig` defaults.
        root_runner: Runner for elevated commands. Built from ``config``
            when omitted.
        user_runner: Runner for unprivileged commands. Built from
            ``config`` when omitted.

    Raises:
        UtilboxNotAvailableError: If no configured utility binary resolves.
    """

    def __init__(
        self,
        config: ShellConfig | None = None,
        *,
        root_runner: ShellRunner | None = None,
        user_runner: ShellRunner | None = None,
    ) -> None:
        self._config = config or ShellConfig()
        self._root_runner = root_runner or ShellRunner.privileged(self._config)
        self._user_runner = user_runner or ShellRunner.unprivileged(self._config)
        self._utilbox = resolve_utilbox(self._root_runner, self._config.utilbox_candidates)
        self._walker = DirectoryWalker(self._root_runner, self._utilbox)
        self._reader = RetryingFileReader(
            PrivilegedFileOpener(self._root_runner, self._utilbox),
            max_retries=self._config.max_read_retries,
            chunk_size=self._config.chunk_size,
        )

    @property
    def config(self) -> ShellConfig:
        """Configuration this handler was created with."""
        return self._config

    @property
    def utilbox(self) -> UtilBox:
        """Utility binary resolved for this session."""
        return self._utilbox

    def run_as_root(self, *commands: str) -> CommandResult:
        """Run commands with elevated privileges."""
        return self._root_runner.run(*commands)

    def run_as_user(self, *commands: str) -> CommandResult:
        """Run commands as the current user."""
        return self._user_runner.run(*commands)

    def list_names(self, path: str) -> list[str]:
        """List raw entry names of a directory."""
        return self._walker.list_names(path)

    def list_detailed(
        self,
        path: str,
        *,
        recursive: bool = False,
        parent: str | None = None,
    ) -> list[FileMetadata]:
        """List a directory with full metadata, optionally recursively."""
        return self._walker.list_detailed(path, recursive=recursive, parent=parent)

    def get_owner_group_context(self, path: str) -> OwnerGroupContext:
        """Retrieve owner, group and SELinux context of a path."""
        return self._walker.get_owner_group_context(path)

    def read_file(self, path: str, size: int, output: BinaryIO) -> int:
        """Copy a file of known size to ``output``, recovering early EOFs.

        Returns:
            Number of bytes written.
        """
        return self._reader.copy(path, size, output)

    def read_listed_file(self, metadata: FileMetadata, output: BinaryIO) -> int:
        """Copy a file described by a listing record to ``output``."""
        return self._reader.copy_file(metadata, output)
