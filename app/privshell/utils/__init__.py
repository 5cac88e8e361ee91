"""Utility modules for privshell.

This module exports commonly used utility functions.
"""

from privshell.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from privshell.utils.shell import CommandResult, ShellRunner, run_command

__all__ = [
    "CommandResult",
    "ShellRunner",
    "console",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
