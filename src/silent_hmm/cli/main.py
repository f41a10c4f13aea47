"""
Main CLI application for silent-hmm.

Provides commands for scoring sequences with the forward algorithm,
inspecting model files and compiling them into persisted models.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..config import get_config
from ..exceptions import SilentHMMError
from ..hmm import DpMatrix, HMM, forward, to_probability
from ..io import ModelPersistence, load_model, read_sequences, validate_sequence
from ..logger import enable_file_logging, set_log_level
from .errors import SilentHMMCLIError, handle_cli_error, load_cli_config

console = Console()

app = typer.Typer(
    name="silent-hmm",
    help="Forward algorithm scoring for Hidden Markov Models with silent states",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True
)


def _debug(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("debug"))


def _open_model(path: Path) -> HMM:
    """Load a JSON model file or a joblib-persisted ``.pkl`` model."""
    if path.suffix == ".pkl":
        model, _ = ModelPersistence(path.parent).load_model(path.stem)
        return model
    return load_model(path)


def _format_log(value: Optional[float]) -> str:
    return "undefined" if value is None else f"{value:.6f}"


def _matrix_table(name: str, matrix: DpMatrix) -> Table:
    table = Table(title=f"DP matrix: {name}")
    table.add_column("State", style="cyan")
    table.add_column("0", justify="right")
    for t, symbol in enumerate(matrix.sequence, start=1):
        table.add_column(f"{t}:{symbol}", justify="right")

    for state in matrix.model.states:
        label = f"{state.id} (silent)" if state.silent else state.id
        values = [_format_log(matrix.get(state, t)) for t in range(matrix.n_columns)]
        table.add_row(label, *values)
    return table


@app.command("score")
def score_command(
    ctx: typer.Context,
    model_file: Path = typer.Argument(
        ...,
        help="Model file (.json definition or .pkl compiled model)",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    sequences_file: Path = typer.Argument(
        ...,
        help="Sequence file, one sequence per line ('>name' headers optional)",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    delimiter: Optional[str] = typer.Option(
        None,
        "--delimiter",
        "-d",
        help="Symbol separator (default: every character is a symbol)"
    ),
    show_matrix: bool = typer.Option(
        False,
        "--matrix",
        help="Print the DP matrix of each sequence"
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write results as JSON"
    ),
    validate: Optional[bool] = typer.Option(
        None,
        "--validate/--no-validate",
        help="Check symbols against the alphabet before scoring"
    )
):
    """Compute the log-probability of each sequence under the model."""
    try:
        model = _open_model(model_file)
        if delimiter is None:
            delimiter = get_config('io', 'symbol_delimiter')
        if validate is None:
            validate = bool(get_config('forward', 'validate_symbols'))

        sequences = read_sequences(sequences_file, delimiter=delimiter)
        if not sequences:
            raise SilentHMMCLIError(f"No sequences found in {sequences_file}",
                                    suggestions=["Lines starting with the comment prefix are skipped"])

        results = []
        table = Table(title=f"Forward scores: {model.name or model_file.name}")
        table.add_column("Sequence", style="cyan")
        table.add_column("Length", justify="right")
        table.add_column("Log probability", justify="right")
        table.add_column("Probability", justify="right")

        for name, symbols in sequences:
            if validate:
                validate_sequence(model, symbols)
            log_probability, matrix = forward(model, symbols)

            results.append({
                "name": name,
                "length": len(symbols),
                "log_probability": log_probability,
                "probability": to_probability(log_probability)
            })
            table.add_row(name, str(len(symbols)), _format_log(log_probability),
                          f"{to_probability(log_probability):.6g}")

            if show_matrix:
                console.print(_matrix_table(name, matrix))

        console.print(table)

        if output_file:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump({"model": model.name, "results": results}, f, indent=2)
            console.print(f"[green]Results saved to: {output_file}[/green]")

    except (SilentHMMError, SilentHMMCLIError) as e:
        handle_cli_error(e, "score", _debug(ctx))


@app.command("inspect")
def inspect_command(
    ctx: typer.Context,
    model_file: Path = typer.Argument(
        ...,
        help="Model file (.json definition or .pkl compiled model)",
        exists=True,
        file_okay=True,
        dir_okay=False
    )
):
    """Validate a model and show its states and silent order."""
    try:
        model = _open_model(model_file)

        table = Table(title=f"Model: {model.name or model_file.name}")
        table.add_column("State", style="cyan")
        table.add_column("Kind")
        table.add_column("Emissions")
        for state in model.states:
            kind = "silent" if state.silent else "emitting"
            if state is model.begin_state:
                kind += " (begin)"
            emissions = ", ".join(f"{s}={p:g}" for s, p in sorted(state.emissions.items()))
            table.add_row(state.id, kind, emissions)
        console.print(table)

        console.print(f"Alphabet: {' '.join(sorted(model.alphabet))}")
        console.print(f"Silent order: {' -> '.join(s.id for s in model.silent_order)}")

    except (SilentHMMError, SilentHMMCLIError) as e:
        handle_cli_error(e, "inspect", _debug(ctx))


@app.command("compile")
def compile_command(
    ctx: typer.Context,
    model_file: Path = typer.Argument(
        ...,
        help="JSON model definition",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    models_dir: Path = typer.Argument(
        ...,
        help="Directory to store the compiled model"
    ),
    name: Optional[str] = typer.Option(
        None,
        "--name",
        "-n",
        help="Stored model name (default: model name or file stem)"
    ),
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        help="Replace an existing compiled model"
    )
):
    """Validate a JSON model and persist it for fast loading."""
    try:
        model = load_model(model_file)
        persistence = ModelPersistence(models_dir)
        model_path, metadata_path = persistence.save_model(
            name or model.name or model_file.stem,
            model,
            metadata={"source_file": str(model_file)},
            overwrite=overwrite
        )
        console.print(f"[green]Model saved to: {model_path}[/green]")
        console.print(f"[green]Metadata saved to: {metadata_path}[/green]")

    except (SilentHMMError, SilentHMMCLIError) as e:
        handle_cli_error(e, "compile", _debug(ctx))


@app.command("version")
def show_version():
    """Show silent-hmm version information."""
    console.print(Panel.fit(
        f"[bold]silent-hmm version {__version__}[/bold]\n"
        f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        border_style="blue"
    ))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress all log output except errors"
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode with detailed error traces"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to JSON configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write log messages to this file"
    )
):
    """
    silent-hmm: forward algorithm for HMMs with silent states

    \b
    Quick Start:
    1. Check a model:     silent-hmm inspect model.json
    2. Score sequences:   silent-hmm score model.json sequences.txt
    3. Compile a model:   silent-hmm compile model.json models/
    """
    ctx.obj = {"verbose": verbose, "quiet": quiet, "debug": debug}

    # Command-line flags override the config file
    if config_file:
        try:
            load_cli_config(config_file)
        except SilentHMMCLIError as e:
            handle_cli_error(e, "config", debug)

    if quiet:
        set_log_level('ERROR')
    elif verbose or debug:
        set_log_level('DEBUG')
    elif not config_file:
        set_log_level(get_config('logging', 'level') or 'INFO')

    if log_file:
        enable_file_logging(str(log_file))


def cli_main():
    """Entry point for the silent-hmm console script."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
