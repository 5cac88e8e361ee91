"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from privshell import __version__
from privshell.cli.commands import config, copy, ls, quote, stat, utilbox
from privshell.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="privshell",
    help="List and copy files through a privileged shell.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"privshell version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging, including every command run.",
        ),
    ] = False,
    user: Annotated[
        bool,
        typer.Option(
            "--user",
            "-u",
            help="Run commands as the current user instead of with elevated privileges.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to an alternative config.toml.",
        ),
    ] = None,
) -> None:
    """privshell - list and copy files through a privileged shell.

    Resolves a portable utility binary (toybox, busybox) once and uses
    it for every listing and read.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["user"] = user
    ctx.obj["config_path"] = config_path


# Register commands
app.command(name="ls")(ls.list_directory)
app.command(name="stat")(stat.show_ownership)
app.command(name="copy")(copy.copy_file)
app.command(name="utilbox")(utilbox.show_utilbox)
app.command(name="quote")(quote.quote_values)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
