"""
Entry point for running cardbook as a module.

Usage:
    python -m cardbook --help
    python -m cardbook list
    python -m cardbook watch
"""

from cardbook.cli import cli

if __name__ == "__main__":
    cli()
