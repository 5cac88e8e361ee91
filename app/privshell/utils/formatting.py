"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from privshell.core.permissions import mode_to_permission

if TYPE_CHECKING:
    from privshell.filesystem.models import FileMetadata

_THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "directory": "bold #0e8ac8",
        "symlink": "#69B9A1",
        "special": "#d44ebc",
        "dim": "#b2bec3",
    }
)


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=_THEME, color_system=_detect_color_system())
err_console = Console(theme=_THEME, stderr=True, color_system=_detect_color_system())


def create_listing_table(title: str) -> Table:
    """Create a pre-configured table for displaying listing entries.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for listing display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Mode", no_wrap=True, style="muted")
    table.add_column("Owner", no_wrap=True)
    table.add_column("Group", no_wrap=True)
    table.add_column("Size", style="info", justify="right")
    table.add_column("Modified", style="muted", no_wrap=True)
    table.add_column("Path", overflow="fold")
    return table


def format_entry_row(entry: FileMetadata) -> tuple[str, str, str, str, str, str]:
    """Format a listing entry as a table row with styling.

    Args:
        entry: The listed entry.

    Returns:
        Tuple of (mode, owner, group, size, modified, path) with Rich markup.
    """
    from privshell.filesystem.models import FileType

    type_char = _TYPE_CHARS.get(entry.file_type.value, "-")
    mode = f"{type_char}{mode_to_permission(entry.mode)}"

    name = escape(entry.relative_path)
    if entry.file_type == FileType.DIRECTORY:
        path = f"[directory]{name}/[/]"
    elif entry.file_type == FileType.SYMBOLIC_LINK:
        path = f"[symlink]{name}[/] -> {escape(entry.link_target or '')}"
    elif entry.file_type == FileType.REGULAR_FILE:
        path = f"[text]{name}[/]"
    else:
        path = f"[special]{name}[/]"

    size = format_size(entry.size) if entry.file_type == FileType.REGULAR_FILE else "-"
    modified = format_time(entry.modification_time)
    return (mode, escape(entry.owner), escape(entry.group), size, modified, path)


_TYPE_CHARS = {
    "directory": "d",
    "symbolic_link": "l",
    "named_pipe": "p",
    "socket": "s",
    "block_device": "b",
    "char_device": "c",
}


def format_time(value: datetime) -> str:
    """Format a timestamp like ``ls --time-style=long-iso`` with offset."""
    return value.strftime("%Y-%m-%d %H:%M %z")


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string."""
    if size_bytes is None or size_bytes == 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
