"""Read-only commands: status, show-state."""

import json
from typing import Annotated

import typer

from ...io.serializers import ValidationError, program_to_dict, state_to_dict
from .. import views
from ..app import JsonOption, ProgramPathOption, app, require_store


@app.command()
def status(
    program_path: ProgramPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """Show the progression switch, policies and per-exercise targets."""
    store = require_store(program_path)
    try:
        program = store.load_program()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(program_to_dict(program), indent=2, sort_keys=True))
        return

    views.print_program(program)


@app.command("show-state")
def show_state(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID")],
    program_path: ProgramPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """Show the stored progression state of one exercise."""
    store = require_store(program_path)
    try:
        program = store.load_program()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    state = program.progression_state(exercise_id)
    if json_out:
        print(json.dumps(state_to_dict(state) if state is not None else None, indent=2))
        return

    views.print_state(exercise_id, state)
