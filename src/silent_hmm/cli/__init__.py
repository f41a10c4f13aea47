"""
Command-line interface for silent-hmm.
"""

from .main import app, cli_main

__all__ = ["app", "cli_main"]
