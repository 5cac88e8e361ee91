"""privshell - privileged shell access for file listing and copying."""

__version__ = "0.1.0"
