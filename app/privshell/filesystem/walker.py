"""Directory listing through a privileged shell.

Issues ``ls`` commands through the resolved utility binary and assembles
the parsed records, optionally for a whole directory tree.
"""

import logging
from dataclasses import dataclass

from privshell.core.errors import ShellCommandFailedError, UnexpectedCommandResultError
from privshell.core.quoting import quote
from privshell.core.utilbox import UtilBox
from privshell.filesystem.listing import parse_listing
from privshell.filesystem.models import FileMetadata, OwnerGroupContext
from privshell.utils.shell import ShellRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _PendingDirectory:
    """A directory waiting to be listed."""

    absolute_path: str
    relative_parent: str


class DirectoryWalker:
    """Lists directories via ``ls`` run through a ShellRunner.

    Command failures are never caught or retried here; they propagate
    as :class:`ShellCommandFailedError`.

    Args:
        runner: Runner executing the listing commands.
        utilbox: Resolved utility binary prefixing every command.
    """

    def __init__(self, runner: ShellRunner, utilbox: UtilBox) -> None:
        self._runner = runner
        self._utilbox = utilbox

    def list_names(self, path: str) -> list[str]:
        """List the raw entry names of a directory (``ls -bA1``).

        Args:
            path: Directory to list.

        Returns:
            Output lines as printed, still escaped.

        Raises:
            ShellCommandFailedError: If the listing command fails.
        """
        result = self._runner.run(self._utilbox.command(f"ls -bA1 {quote(path)}"))
        return result.out

    def list_detailed(
        self,
        path: str,
        *,
        recursive: bool = False,
        parent: str | None = None,
    ) -> list[FileMetadata]:
        """List a directory with full metadata.

        In recursive mode, all entries of a directory come first, followed
        by the subtree of each subdirectory in listing order. Only
        directories are descended into, never symbolic links.

        Args:
            path: Directory (or single file) to list.
            recursive: Whether to descend into subdirectories.
            parent: Logical parent path used to name the entries.

        Returns:
            Records for every listed entry.

        Raises:
            ShellCommandFailedError: If any listing command fails.
        """
        results: list[FileMetadata] = []
        pending = [_PendingDirectory(path, parent or "")]

        while pending:
            directory = pending.pop()
            entries = self._list_once(directory.absolute_path, directory.relative_parent)
            results.extend(entries)
            if not recursive:
                continue
            # Reversed so the first subdirectory is popped first
            pending.extend(
                _PendingDirectory(
                    entry.absolute_path,
                    f"{directory.relative_parent}/{entry.filename}"
                    if directory.relative_parent
                    else entry.filename,
                )
                for entry in reversed(entries)
                if entry.is_directory
            )

        return results

    def get_owner_group_context(self, path: str) -> OwnerGroupContext:
        """Retrieve owner, group and SELinux context of a path (``ls -bdAlZ``).

        Args:
            path: Path to inspect.

        Returns:
            OwnerGroupContext of the path.

        Raises:
            UnexpectedCommandResultError: If the command fails or its output
                does not have the expected fields.
        """
        command = self._utilbox.command(f"ls -bdAlZ {quote(path)}")
        try:
            result = self._runner.run(command)
        except ShellCommandFailedError as e:
            raise UnexpectedCommandResultError(f"'{command}' failed", e.result) from e

        lines = result.out
        fields = lines[0].split(" ", 5) if lines else []
        if len(fields) < 5:
            raise UnexpectedCommandResultError(f"'{command}' returned unexpected output", result)
        owner, group, context = fields[2:5]
        return OwnerGroupContext(owner=owner, group=group, context=context)

    def _list_once(self, path: str, relative_parent: str) -> list[FileMetadata]:
        """Run one non-recursive detailed listing and parse it."""
        result = self._runner.run(self._utilbox.command(f"ls -bAll {quote(path)}"))
        entries = [entry.metadata for entry in parse_listing(result.out, relative_parent, path)]
        logger.debug("Listed %d entries in %s", len(entries), path)
        return entries
