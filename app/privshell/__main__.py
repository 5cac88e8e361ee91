"""Allow running privshell as ``python -m privshell``."""

from privshell.cli.main import app

if __name__ == "__main__":
    app()
