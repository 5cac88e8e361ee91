"""CLI commands for privshell.

This package contains all subcommand implementations.
"""

from privshell.cli.commands import config, copy, ls, quote, stat, utilbox

__all__ = ["config", "copy", "ls", "quote", "stat", "utilbox"]
