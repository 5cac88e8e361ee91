"""Config commands.

Shows and initializes the privshell configuration file.
"""

from typing import Annotated

import typer
from rich.markup import escape

from privshell.cli.types import get_config_path
from privshell.core.config import ShellConfig, load_config, save_config
from privshell.core.errors import ConfigError
from privshell.core.paths import get_config_path as get_default_config_path
from privshell.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize the configuration.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective configuration as JSON."""
    try:
        config = load_config(get_config_path(ctx))
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    console.print_json(config.model_dump_json())


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing configuration file."),
    ] = False,
) -> None:
    """Write a configuration file with default values."""
    path = get_config_path(ctx) or get_default_config_path()

    if path.exists() and not force:
        print_info(
            f"Configuration already exists: {escape(str(path))} (use --force to overwrite)"
        )
        raise typer.Exit(code=0)

    try:
        saved = save_config(ShellConfig(), path)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(f"Configuration written to {escape(str(saved))}")
