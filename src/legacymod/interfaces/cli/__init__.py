"""Command-line entry point."""

from .app import CliError, main

__all__ = ["CliError", "main"]
