"""CLI package for privshell.

This package contains the Typer application and all subcommands.
"""

from privshell.cli.main import app

__all__ = ["app"]
