"""Command-line interface for stackrefresh.

Uses Click for argument parsing. The single command accepts an optional
--dry-run flag and runs the update pipeline over all running containers.
"""

from .main import cli, main

__all__ = ["cli", "main"]
