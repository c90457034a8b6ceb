"""Command-line entry points."""

from .app import build_parser, configure_logging, console_main, main

__all__ = ["build_parser", "configure_logging", "console_main", "main"]
