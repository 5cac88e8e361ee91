"""Copy command implementation.

Copies a file readable only with elevated privileges to a local path.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from privshell.cli.types import get_handler
from privshell.core.errors import FileReadError, ListingParseError, ShellCommandFailedError
from privshell.core.handler import ShellHandler
from privshell.filesystem.models import FileType
from privshell.utils.formatting import format_size, print_error, print_success, print_warning


def copy_file(
    ctx: typer.Context,
    source: Annotated[str, typer.Argument(help="File to read through the shell.")],
    destination: Annotated[Path, typer.Argument(help="Local file to write.")],
    size: Annotated[
        int | None,
        typer.Option(
            "--size",
            "-s",
            min=0,
            help="Expected size in bytes. Taken from a listing of SOURCE when omitted.",
        ),
    ] = None,
) -> None:
    """Copy a file through the privileged shell, recovering early EOFs."""
    handler = get_handler(ctx)

    if destination.is_dir():
        print_error(f"Destination is a directory: {escape(str(destination))}")
        raise typer.Exit(code=1)

    try:
        expected = size if size is not None else _lookup_size(handler, source)
        destination.parent.mkdir(parents=True, exist_ok=True)
        with open(destination, "wb") as output:
            written = handler.read_file(source, expected, output)
    except (ShellCommandFailedError, FileReadError, ListingParseError) as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(
        f"Copied {escape(source)} to {escape(str(destination))} ({format_size(written)})"
    )
    if written != expected:
        print_warning(f"Copied {written} bytes, expected {expected}")


def _lookup_size(handler: ShellHandler, source: str) -> int:
    """Determine the size of a regular file from its listing entry."""
    entries = handler.list_detailed(source)
    if len(entries) != 1 or entries[0].file_type != FileType.REGULAR_FILE:
        print_error(f"Not a regular file: {escape(source)}")
        raise typer.Exit(code=1)
    return entries[0].size
