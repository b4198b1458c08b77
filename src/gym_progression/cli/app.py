"""Shared Typer app object, shared option types, and store utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..io.program_store import ProgramStore, get_default_program_path
from . import views

# Shared --program-path option type used across all commands
ProgramPathOption = Annotated[
    Optional[Path],
    typer.Option("--program-path", "-p", help="Path to program JSON file"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="gym-progression",
    help="Adaptive progressive-overload recommendations for your training program.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show engine decisions (debug logging)"),
    ] = False,
) -> None:
    """
    Track progression per exercise and get the next session's targets.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=views.console, show_path=False)],
        )


def get_store(program_path: Path | None) -> ProgramStore:
    """Get program store from path or default location."""
    if program_path is None:
        program_path = get_default_program_path()
    return ProgramStore(program_path)


def require_store(program_path: Path | None) -> ProgramStore:
    """Get the program store, exiting with an error if 'init' was not run."""
    store = get_store(program_path)
    if not store.exists():
        views.print_error(f"Program file not found: {store.program_path}")
        views.print_info("Run 'init' first to create the program.")
        raise typer.Exit(1)
    return store
