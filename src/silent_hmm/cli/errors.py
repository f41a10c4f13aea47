"""
Error handling for CLI commands.

Maps library exceptions to exit codes and prints them with rich formatting
and suggestions.
"""

import traceback
from pathlib import Path
from typing import Optional
import logging

import typer
from rich.console import Console

from ..config import load_config_file
from ..logger import apply_logging_config
from ..exceptions import (
    FillOrderError,
    InvalidSymbolError,
    ModelConstructionError,
    ModelFormatError,
    PersistenceError,
    SequenceFormatError
)

console = Console(stderr=True)
logger = logging.getLogger(__name__)


# Exit codes for different error types
EXIT_CODES = {
    "success": 0,
    "general_error": 1,
    "invalid_usage": 2,
    "sequence_error": 10,
    "model_error": 11,
    "config_error": 13,
    "internal_error": 20
}


class SilentHMMCLIError(Exception):
    """Base exception for CLI-specific errors."""

    def __init__(self, message: str, exit_code: int = 1, suggestions: Optional[list] = None):
        self.message = message
        self.exit_code = exit_code
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(SilentHMMCLIError):
    """Configuration errors."""

    def __init__(self, message: str, suggestions: Optional[list] = None):
        super().__init__(message, EXIT_CODES["config_error"], suggestions)


def _classify(error: Exception):
    """Exit code and default suggestions for a library exception."""
    if isinstance(error, SilentHMMCLIError):
        return error.exit_code, error.suggestions
    if isinstance(error, ModelFormatError):
        return EXIT_CODES["model_error"], [
            "Check the model file is valid JSON with 'begin', 'states' and 'transitions'",
            "Run: silent-hmm inspect <model> to validate it"
        ]
    if isinstance(error, ModelConstructionError):
        return EXIT_CODES["model_error"], [
            "Silent states must not form a cycle",
            "The begin state must be declared and silent",
            "Probabilities must lie in [0, 1]"
        ]
    if isinstance(error, PersistenceError):
        return EXIT_CODES["model_error"], [
            "Compile the model first: silent-hmm compile <model.json> <models_dir>",
            "Use --overwrite to replace an existing model"
        ]
    if isinstance(error, InvalidSymbolError):
        return EXIT_CODES["sequence_error"], [
            "Every symbol must be in the model alphabet",
            "Use --delimiter if symbols are longer than one character"
        ]
    if isinstance(error, SequenceFormatError):
        return EXIT_CODES["sequence_error"], []
    if isinstance(error, FillOrderError):
        return EXIT_CODES["internal_error"], []
    return EXIT_CODES["general_error"], []


def format_error_message(error: Exception, operation: str, debug: bool = False) -> str:
    """Format error message with context and suggestions."""
    _, suggestions = _classify(error)

    message_parts = [
        f"[red]Error during {operation}:[/red]",
        f"[red]{type(error).__name__}: {error}[/red]"
    ]

    if suggestions:
        message_parts.append("")
        message_parts.append("[yellow]Suggestions:[/yellow]")
        for suggestion in suggestions:
            message_parts.append(f"  • {suggestion}")

    if debug:
        message_parts.append("")
        message_parts.append("[dim]Debug information:[/dim]")
        message_parts.append(f"[dim]{traceback.format_exc()}[/dim]")

    return "\n".join(message_parts)


def handle_cli_error(error: Exception, operation: str, debug: bool = False) -> None:
    """Print an error and exit with the matching code."""
    exit_code, _ = _classify(error)

    console.print(format_error_message(error, operation, debug))
    console.print(f"\n[dim]For more help, run: silent-hmm {operation.split()[0]} --help[/dim]")

    logger.error(f"CLI error in {operation}: {error}", exc_info=debug)

    raise typer.Exit(exit_code)


def load_cli_config(path: Path) -> None:
    """Load a JSON config file and apply its logging section; failures are configuration errors."""
    try:
        load_config_file(str(path))
    except ValueError as e:
        raise ConfigurationError(str(e), suggestions=[f"Check that {path} is valid JSON"])

    try:
        apply_logging_config()
    except ValueError as e:
        raise ConfigurationError(str(e), suggestions=[
            "logging.level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL"
        ])
