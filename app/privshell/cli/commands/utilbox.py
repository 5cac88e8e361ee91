"""Utilbox command implementation.

Shows the utility binary resolved for this system.
"""

import typer
from rich.markup import escape

from privshell.cli.types import get_handler
from privshell.utils.formatting import console


def show_utilbox(ctx: typer.Context) -> None:
    """Show which utility binary (toybox, busybox) is used."""
    handler = get_handler(ctx)
    utilbox = handler.utilbox

    console.print(f"[header]Name:[/]    {escape(utilbox.name)}", highlight=False)
    console.print(f"[header]Path:[/]    {escape(utilbox.path)}", highlight=False)
    console.print(f"[header]Version:[/] {escape(utilbox.version or '-')}", highlight=False)
