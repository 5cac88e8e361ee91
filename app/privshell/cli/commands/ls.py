"""List command implementation.

Lists directory contents through the privileged shell.
"""

import json
from typing import Annotated

import typer
from rich.markup import escape

from privshell.cli.types import OutputFormat, get_handler
from privshell.core.errors import ListingParseError, ShellCommandFailedError, is_file_not_found
from privshell.filesystem.models import FileMetadata
from privshell.utils.formatting import (
    console,
    create_listing_table,
    format_entry_row,
    format_size,
    print_error,
    print_info,
)


def list_directory(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Directory (or file) to list.")],
    recursive: Annotated[
        bool,
        typer.Option("--recursive", "-r", help="Descend into subdirectories."),
    ] = False,
    names_only: Annotated[
        bool,
        typer.Option("--names", "-1", help="Only print raw entry names, one per line."),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """List directory contents with owner, mode, size and timestamp."""
    handler = get_handler(ctx)

    try:
        if names_only:
            for name in handler.list_names(path):
                typer.echo(name)
            return
        entries = handler.list_detailed(path, recursive=recursive)
    except ShellCommandFailedError as e:
        if is_file_not_found(e):
            print_error(f"No such file or directory: {escape(path)}")
        else:
            print_error(escape(str(e)))
        raise typer.Exit(code=1) from e
    except ListingParseError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        _print_json(entries)
        return

    if not entries:
        print_info(f"{escape(path)} is empty.")
        return

    table = create_listing_table(f"Contents of {escape(path)}")
    for entry in entries:
        table.add_row(*format_entry_row(entry))
    console.print(table)

    total_size = sum(e.size for e in entries)
    console.print(f"\n[dim]{len(entries)} entries ({format_size(total_size)} in files)[/dim]")


def _print_json(entries: list[FileMetadata]) -> None:
    """Display entries as JSON."""
    data = [
        {
            "relative_path": e.relative_path,
            "absolute_path": e.absolute_path,
            "file_type": e.file_type.value,
            "owner": e.owner,
            "group": e.group,
            "mode": f"{e.mode:o}",
            "size": e.size,
            "modification_time": e.modification_time.isoformat(),
            "link_target": e.link_target,
        }
        for e in entries
    ]
    console.print_json(json.dumps(data))
