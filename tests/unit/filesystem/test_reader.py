"""Tests for the retrying file reader."""

import io
import logging
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from privshell.core.errors import FileReadError, ShellCommandFailedError
from privshell.core.utilbox import UtilBox
from privshell.filesystem.models import FileMetadata, FileType
from privshell.filesystem.reader import (
    LocalFileOpener,
    PrivilegedFileHandle,
    PrivilegedFileOpener,
    RetryingFileReader,
)
from privshell.utils.shell import CommandResult, ShellRunner


class FakeHandle:
    """Handle over in-memory content that reports EOF after a byte limit."""

    def __init__(self, content: bytes, limit: int | None = None) -> None:
        self._content = content
        self._limit = len(content) if limit is None else limit
        self._position = 0
        self.closed = False
        self.seeks: list[int] = []

    def read(self, size: int) -> bytes:
        end = min(self._position + size, self._limit)
        data = self._content[self._position : end]
        self._position = max(self._position, end)
        return data

    def seek(self, offset: int) -> int:
        self.seeks.append(offset)
        self._position = offset
        return offset

    def close(self) -> None:
        self.closed = True


class FakeOpener:
    """Opener handing out prepared handles, in order."""

    def __init__(self, *handles: FakeHandle) -> None:
        self.handles = list(handles)
        self.opened: list[FakeHandle] = []

    def open(self, path: str) -> FakeHandle:
        handle = self.handles.pop(0)
        self.opened.append(handle)
        return handle


class TestRetryingFileReader:
    """Tests for RetryingFileReader."""

    def test_complete_read(self) -> None:
        """A well-behaved source is copied in one pass."""
        content = bytes(range(256)) * 10
        opener = FakeOpener(FakeHandle(content))
        output = io.BytesIO()

        written = RetryingFileReader(opener, chunk_size=100).copy("/f", len(content), output)

        assert written == len(content)
        assert output.getvalue() == content
        assert len(opener.opened) == 1

    def test_recovers_from_early_eof(self, caplog: pytest.LogCaptureFixture) -> None:
        """An early EOF leads to a reopen at the delivered offset."""
        content = b"0123456789" * 10
        opener = FakeOpener(FakeHandle(content, limit=50), FakeHandle(content))
        output = io.BytesIO()

        with caplog.at_level(logging.WARNING):
            written = RetryingFileReader(opener, chunk_size=16).copy("/f", 100, output)

        assert written == 100
        assert output.getvalue() == content
        assert opener.opened[1].seeks == [50]
        assert "Trying to recover" in caplog.text

    def test_fails_after_retry_budget(self, caplog: pytest.LogCaptureFixture) -> None:
        """A source that never delivers is reopened exactly max_retries times."""
        opener = FakeOpener(*(FakeHandle(b"") for _ in range(20)))
        output = io.BytesIO()

        with caplog.at_level(logging.ERROR), pytest.raises(FileReadError) as exc_info:
            RetryingFileReader(opener).copy("/data/big.bin", 1000, output)

        assert len(opener.opened) == 11
        assert exc_info.value.reached == 0
        assert exc_info.value.max_retries == 10
        assert "Could not recover after 10 tries" in caplog.text

    def test_budget_resets_after_progress(self) -> None:
        """Every successful read restores the full retry budget."""
        content = bytes(30)
        # Two stalls needing three reopens each
        handles = [FakeHandle(content, limit=10)]
        for limit in (20, 30):
            handles.extend([FakeHandle(content, limit=0), FakeHandle(content, limit=0)])
            handles.append(FakeHandle(content, limit=limit))
        opener = FakeOpener(*handles)
        output = io.BytesIO()

        written = RetryingFileReader(opener, max_retries=3).copy("/f", 30, output)

        assert written == 30

    def test_budget_not_reset_without_progress(self) -> None:
        """Stalls without delivered bytes share one budget."""
        content = bytes(30)
        stalled = (FakeHandle(content, limit=0) for _ in range(3))
        opener = FakeOpener(FakeHandle(content, limit=10), *stalled)

        with pytest.raises(FileReadError) as exc_info:
            RetryingFileReader(opener, max_retries=2).copy("/f", 30, io.BytesIO())

        assert len(opener.opened) == 3
        assert exc_info.value.reached == 10

    def test_closes_every_handle(self) -> None:
        """Handles are closed on success and on failure."""
        content = bytes(20)
        opener = FakeOpener(FakeHandle(content, limit=5), FakeHandle(content))
        RetryingFileReader(opener).copy("/f", 20, io.BytesIO())

        failing = FakeOpener(*(FakeHandle(b"") for _ in range(3)))
        with pytest.raises(FileReadError):
            RetryingFileReader(failing, max_retries=2).copy("/f", 20, io.BytesIO())

        assert all(h.closed for h in opener.opened + failing.opened)

    def test_larger_than_expected(self) -> None:
        """A file that grew is copied in full."""
        opener = FakeOpener(FakeHandle(bytes(40)))

        assert RetryingFileReader(opener).copy("/f", 30, io.BytesIO()) == 40

    def test_smaller_than_expected_fails(self) -> None:
        """A file that shrank exhausts the budget."""
        opener = FakeOpener(*(FakeHandle(bytes(20)) for _ in range(3)))

        with pytest.raises(FileReadError) as exc_info:
            RetryingFileReader(opener, max_retries=2).copy("/f", 30, io.BytesIO())

        assert exc_info.value.reached == 20

    def test_empty_file(self) -> None:
        """An empty expected file needs a single open."""
        opener = FakeOpener(FakeHandle(b""))

        assert RetryingFileReader(opener).copy("/f", 0, io.BytesIO()) == 0
        assert len(opener.opened) == 1

    def test_copy_file_uses_metadata(self) -> None:
        """Listed files are read from their absolute path and size."""
        opener = MagicMock()
        opener.open.return_value = FakeHandle(bytes(12))
        metadata = FileMetadata(
            relative_path="files/notes.txt",
            file_type=FileType.REGULAR_FILE,
            absolute_parent="/data/data/com.example/files",
            owner="u0_a441",
            group="u0_a441",
            mode=0o660,
            modification_time=datetime(2021, 10, 19, tzinfo=UTC),
            size=12,
        )

        written = RetryingFileReader(opener).copy_file(metadata, io.BytesIO())

        assert written == 12
        opener.open.assert_called_once_with("/data/data/com.example/files/notes.txt")

    @pytest.mark.parametrize("kwargs", [{"max_retries": 0}, {"chunk_size": 0}])
    def test_invalid_settings(self, kwargs: dict) -> None:
        """Retry budget and chunk size must be positive."""
        with pytest.raises(ValueError):
            RetryingFileReader(FakeOpener(), **kwargs)

    def test_local_files(self, tmp_path: Path) -> None:
        """Local files are copied through the same reader."""
        source = tmp_path / "source.bin"
        source.write_bytes(b"local content")
        output = io.BytesIO()

        written = RetryingFileReader(LocalFileOpener(), chunk_size=4).copy(
            str(source), 13, output
        )

        assert written == 13
        assert output.getvalue() == b"local content"


class TestPrivilegedFileHandle:
    """Tests for PrivilegedFileHandle."""

    def test_read_command(self, toybox: UtilBox) -> None:
        """Reads pipe tail into head with the utility prefix."""
        runner = MagicMock(spec=ShellRunner)
        runner.run_bytes.return_value = b"abcd"
        handle = PrivilegedFileHandle(runner, toybox, "/data/my file")

        assert handle.read(4) == b"abcd"

        runner.run_bytes.assert_called_once_with(
            '"/system/bin/toybox" tail -c +1 "/data/my file" | "/system/bin/toybox" head -c 4'
        )

    def test_position_advances(self, toybox: UtilBox) -> None:
        """Subsequent reads continue after the delivered bytes."""
        runner = MagicMock(spec=ShellRunner)
        runner.run_bytes.side_effect = [b"abcd", b"ef"]
        handle = PrivilegedFileHandle(runner, toybox, "/f")

        handle.read(4)
        handle.read(4)

        assert "tail -c +5 " in runner.run_bytes.call_args.args[0]

    def test_seek(self, toybox: UtilBox) -> None:
        """Seeking sets the offset of the next read."""
        runner = MagicMock(spec=ShellRunner)
        runner.run_bytes.return_value = b""
        handle = PrivilegedFileHandle(runner, toybox, "/f")

        handle.seek(100)
        handle.read(10)

        assert "tail -c +101 " in runner.run_bytes.call_args.args[0]
        with pytest.raises(ValueError):
            handle.seek(-1)

    def test_read_after_close(self, toybox: UtilBox) -> None:
        """Closed handles cannot be read."""
        handle = PrivilegedFileHandle(MagicMock(spec=ShellRunner), toybox, "/f")
        handle.close()

        assert handle.closed
        with pytest.raises(ValueError, match="closed"):
            handle.read(1)

    def test_command_failure_propagates(self, toybox: UtilBox) -> None:
        """Failing reads raise instead of reporting EOF."""
        runner = MagicMock(spec=ShellRunner)
        runner.run_bytes.side_effect = ShellCommandFailedError(
            CommandResult(stdout="", stderr="Permission denied", returncode=1), ("tail",)
        )
        reader = RetryingFileReader(PrivilegedFileOpener(runner, toybox))

        with pytest.raises(ShellCommandFailedError):
            reader.copy("/f", 10, io.BytesIO())
