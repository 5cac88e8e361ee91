"""Shared helpers for CLI commands.

This module provides the common enums and the handler factory used
across multiple CLI command modules.
"""

from enum import Enum
from pathlib import Path

import typer
from rich.markup import escape

from privshell.core.config import load_config
from privshell.core.errors import ConfigError, ShellCommandFailedError, UtilboxNotAvailableError
from privshell.core.handler import ShellHandler
from privshell.utils.formatting import print_error
from privshell.utils.shell import ShellRunner


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_config_path(ctx: typer.Context) -> Path | None:
    """Return the config path selected with the global ``--config`` option."""
    obj = ctx.obj or {}
    return obj.get("config_path")


def get_handler(ctx: typer.Context) -> ShellHandler:
    """Create a ShellHandler from the global CLI options.

    Exits with code 1 if the configuration is invalid, no utility binary
    is available or the shell cannot be started.

    Args:
        ctx: Typer context carrying the global options.

    Returns:
        A ready ShellHandler.
    """
    obj = ctx.obj or {}
    try:
        config = load_config(get_config_path(ctx))
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    root_runner = ShellRunner.unprivileged(config) if obj.get("user") else None
    try:
        return ShellHandler(config, root_runner=root_runner)
    except (UtilboxNotAvailableError, ShellCommandFailedError) as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e
