"""Quote command implementation.

Prints values quoted for interpolation into a shell command line.
"""

from typing import Annotated

import typer

from privshell.core.quoting import quote_multiple


def quote_values(
    values: Annotated[list[str], typer.Argument(help="Values to quote.")],
) -> None:
    """Quote values for safe use in a shell command line."""
    typer.echo(quote_multiple(values))
