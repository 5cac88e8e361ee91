"""Stat command implementation.

Shows owner, group and SELinux context of a path.
"""

from typing import Annotated

import typer
from rich.markup import escape

from privshell.cli.types import get_handler
from privshell.core.errors import UnexpectedCommandResultError
from privshell.utils.formatting import console, print_error


def show_ownership(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Path to inspect.")],
) -> None:
    """Show owner, group and SELinux context of a path."""
    handler = get_handler(ctx)

    try:
        info = handler.get_owner_group_context(path)
    except UnexpectedCommandResultError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    console.print(f"[header]Owner:[/]   {escape(info.owner)}", highlight=False)
    console.print(f"[header]Group:[/]   {escape(info.group)}", highlight=False)
    console.print(f"[header]Context:[/] {escape(info.context)}", highlight=False)
