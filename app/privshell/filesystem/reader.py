"""Retrying reads of file content through a random-access primitive.

The privileged file access primitive is known to report end-of-stream
too early on larger files. The reader tracks how many bytes it has
delivered and, while fewer than the expected size have arrived, treats
an empty read as a transient fault: it reopens the file, seeks to the
delivered offset and carries on.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Protocol

from privshell.core.errors import FileReadError
from privshell.core.quoting import quote
from privshell.core.utilbox import UtilBox
from privshell.filesystem.models import FileMetadata
from privshell.utils.shell import ShellRunner

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 10
DEFAULT_CHUNK_SIZE = 65536


class RandomAccessHandle(Protocol):
    """An open file supporting chunked reads and absolute seeks."""

    def read(self, size: int, /) -> bytes:
        """Read up to ``size`` bytes; an empty result means end-of-stream."""
        ...

    def seek(self, offset: int, /) -> object:
        """Move to an absolute byte offset."""
        ...

    def close(self) -> None:
        """Release the handle."""
        ...


class FileOpener(Protocol):
    """Opens random-access handles by path."""

    def open(self, path: str) -> RandomAccessHandle:
        """Open ``path`` for reading."""
        ...


class LocalFileOpener:
    """Opens files directly with the permissions of the current process."""

    def open(self, path: str) -> RandomAccessHandle:
        return open(path, "rb")  # noqa: SIM115


class PrivilegedFileHandle:
    """Reads a file through a shell, one chunk per command.

    Each read runs ``tail -c +<offset+1> <path> | head -c <size>`` with
    the utility binary prefix. An empty output is end-of-stream.

    Args:
        runner: Runner with the required privileges.
        utilbox: Resolved utility binary.
        path: File to read.
    """

    def __init__(self, runner: ShellRunner, utilbox: UtilBox, path: str) -> None:
        self._runner = runner
        self._utilbox = utilbox
        self._path = path
        self._position = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        """Check if the handle has been closed."""
        return self._closed

    def read(self, size: int, /) -> bytes:
        if self._closed:
            msg = f"I/O operation on closed handle for {self._path}"
            raise ValueError(msg)
        tail = self._utilbox.command(f"tail -c +{self._position + 1} {quote(self._path)}")
        head = self._utilbox.command(f"head -c {size}")
        data = self._runner.run_bytes(f"{tail} | {head}")
        self._position += len(data)
        return data

    def seek(self, offset: int, /) -> int:
        if offset < 0:
            msg = f"Negative seek offset {offset}"
            raise ValueError(msg)
        self._position = offset
        return offset

    def close(self) -> None:
        self._closed = True


class PrivilegedFileOpener:
    """Opens :class:`PrivilegedFileHandle` instances."""

    def __init__(self, runner: ShellRunner, utilbox: UtilBox) -> None:
        self._runner = runner
        self._utilbox = utilbox

    def open(self, path: str) -> RandomAccessHandle:
        return PrivilegedFileHandle(self._runner, self._utilbox, path)


class RetryingFileReader:
    """Copies full file content despite premature end-of-stream reports.

    Args:
        opener: Source of random-access handles.
        max_retries: Reopen attempts allowed without progress in between.
        chunk_size: Bytes requested per read.
    """

    def __init__(
        self,
        opener: FileOpener,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if max_retries < 1:
            msg = f"max_retries must be at least 1, got {max_retries}"
            raise ValueError(msg)
        if chunk_size < 1:
            msg = f"chunk_size must be positive, got {chunk_size}"
            raise ValueError(msg)
        self._opener = opener
        self._max_retries = max_retries
        self._chunk_size = chunk_size

    @property
    def max_retries(self) -> int:
        """Retry budget, restored after every successful read."""
        return self._max_retries

    def copy(self, path: str, expected_size: int, output: BinaryIO) -> int:
        """Copy a file's content to ``output``.

        An empty read before ``expected_size`` bytes were delivered makes
        the reader close the handle, reopen the file and seek to the
        delivered offset. Every successful read restores the retry budget.
        An empty read at or beyond ``expected_size`` ends the copy, even if
        the delivered amount differs slightly from the expectation.

        Args:
            path: File to read.
            expected_size: Size the file is expected to have.
            output: Binary sink receiving the content.

        Returns:
            Number of bytes written to ``output``.

        Raises:
            FileReadError: If the retry budget is exhausted before
                ``expected_size`` bytes were delivered.
        """
        delivered = 0
        retries_left = self._max_retries
        handle = self._opener.open(path)
        try:
            while True:
                data = handle.read(self._chunk_size)
                if data:
                    output.write(data)
                    delivered += len(data)
                    retries_left = self._max_retries
                    continue

                if delivered >= expected_size:
                    break

                if retries_left <= 0:
                    logger.error(
                        "Could not recover after %d tries reading %s. "
                        "Maybe the file has changed?",
                        self._max_retries,
                        path,
                    )
                    raise FileReadError(path, expected_size, self._max_retries, delivered)

                logger.warning(
                    "EOF before expected after %d bytes of %s (%d are missing). "
                    "Trying to recover. %d retries left",
                    delivered,
                    path,
                    expected_size - delivered,
                    retries_left,
                )
                handle.close()
                handle = self._opener.open(path)
                handle.seek(delivered)
                retries_left -= 1
        finally:
            handle.close()

        return delivered

    def copy_file(self, metadata: FileMetadata, output: BinaryIO) -> int:
        """Copy a listed file, using its absolute path and size."""
        return self.copy(metadata.absolute_path, metadata.size, output)
