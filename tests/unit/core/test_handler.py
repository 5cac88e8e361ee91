"""Unit tests for ShellHandler."""

import io
from unittest.mock import MagicMock

import pytest
from fakes import ok, routed_run
from privshell.core.config import ShellConfig
from privshell.core.errors import UtilboxNotAvailableError
from privshell.core.handler import ShellHandler
from privshell.filesystem.models import FileType
from privshell.utils.shell import ShellRunner

UTILBOX_ROUTES = {
    "which toybox": ok("/system/bin/toybox\n"),
    "--version": ok("toybox 0.8.4-android\n"),
}


def _runner(routes: dict) -> MagicMock:
    runner = MagicMock(spec=ShellRunner)
    runner.run.side_effect = routed_run(routes)
    return runner


class TestShellHandlerConstruction:
    """Tests for utility binary resolution on construction."""

    def test_resolves_utilbox_once(self) -> None:
        """The utility binary is probed once and reused."""
        root = _runner({**UTILBOX_ROUTES, "ls -bA1": ok("a\nb\n")})
        handler = ShellHandler(root_runner=root, user_runner=MagicMock(spec=ShellRunner))

        handler.list_names("/data")
        handler.list_names("/data")

        commands = [c.args[0] for c in root.run.call_args_list]
        assert commands.count("which toybox") == 1
        assert handler.utilbox.name == "toybox"
        assert handler.utilbox.quoted == '"/system/bin/toybox"'

    def test_uses_configured_candidates(self) -> None:
        """Candidates come from the configuration."""
        root = _runner({"which busybox": ok("/sbin/busybox\n"), "--version": ok("")})
        config = ShellConfig(utilbox_candidates=["busybox"])

        handler = ShellHandler(config, root_runner=root, user_runner=MagicMock(spec=ShellRunner))

        assert handler.utilbox.path == "/sbin/busybox"
        assert handler.config is config

    def test_no_utilbox_fails(self) -> None:
        """Construction fails when no candidate resolves."""
        root = _runner({"which": ok("")})

        with pytest.raises(UtilboxNotAvailableError):
            ShellHandler(root_runner=root, user_runner=MagicMock(spec=ShellRunner))


class TestShellHandlerOperations:
    """Tests for operations delegated by ShellHandler."""

    def test_run_as_root_and_user(self) -> None:
        """Commands go to the matching runner."""
        root = _runner({**UTILBOX_ROUTES, "id -u": ok("0\n")})
        user = _runner({"id -u": ok("10441\n")})
        handler = ShellHandler(root_runner=root, user_runner=user)

        assert handler.run_as_root("id -u").out == ["0"]
        assert handler.run_as_user("id -u").out == ["10441"]

    def test_list_detailed(self, mock_ls_output: str) -> None:
        """Detailed listings are parsed into records."""
        root = _runner({**UTILBOX_ROUTES, "ls -bAll": ok(mock_ls_output)})
        handler = ShellHandler(root_runner=root, user_runner=MagicMock(spec=ShellRunner))

        entries = handler.list_detailed("/data/data/com.example")

        assert [e.relative_path for e in entries] == [
            "cache",
            "code_cache",
            "files",
            "file.txt",
            "lib",
            "my notes.txt",
        ]
        assert '"/system/bin/toybox" ls -bAll "/data/data/com.example"' in [
            c.args[0] for c in root.run.call_args_list
        ]

    def test_get_owner_group_context(self) -> None:
        """Ownership lookups are delegated to the walker."""
        root = _runner(
            {
                **UTILBOX_ROUTES,
                "ls -bdAlZ": ok(
                    "drwx------ 4 u0_a441 u0_a441 u:object_r:app_data_file:s0 4096 "
                    "2021-10-19 01:54 /data/data/com.example\n"
                ),
            }
        )
        handler = ShellHandler(root_runner=root, user_runner=MagicMock(spec=ShellRunner))

        info = handler.get_owner_group_context("/data/data/com.example")

        assert info.owner == "u0_a441"
        assert info.context == "u:object_r:app_data_file:s0"

    def test_read_file(self) -> None:
        """Files are read through the privileged runner."""
        root = _runner(UTILBOX_ROUTES)
        root.run_bytes.side_effect = [b"hello", b""]
        handler = ShellHandler(root_runner=root, user_runner=MagicMock(spec=ShellRunner))
        output = io.BytesIO()

        written = handler.read_file("/data/file.txt", 5, output)

        assert written == 5
        assert output.getvalue() == b"hello"

    def test_read_listed_file(self, mock_ls_output: str) -> None:
        """A listed file is read from its absolute path."""
        root = _runner({**UTILBOX_ROUTES, "ls -bAll": ok(mock_ls_output)})
        root.run_bytes.side_effect = [b"hello world\n", b""]
        handler = ShellHandler(root_runner=root, user_runner=MagicMock(spec=ShellRunner))
        entry = next(
            e for e in handler.list_detailed("/data/app") if e.relative_path == "my notes.txt"
        )
        assert entry.file_type == FileType.REGULAR_FILE
        output = io.BytesIO()

        written = handler.read_listed_file(entry, output)

        assert written == 12
        command = root.run_bytes.call_args_list[0].args[0]
        assert '"/data/app/my notes.txt"' in command
