"""Program configuration commands: init, switch, policy, enable, disable, override, reset."""

from typing import Annotated, Optional

import typer

from ...core.models import PROGRESSION_POLICIES
from ...io.serializers import ValidationError
from .. import views
from ..app import ProgramPathOption, app, get_store, require_store


def _check_policy(policy: str) -> None:
    if policy not in PROGRESSION_POLICIES:
        views.print_error(f"Policy must be one of: {', '.join(PROGRESSION_POLICIES)}")
        raise typer.Exit(1)


def _load(store):
    try:
        return store.load_program()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


@app.command()
def init(
    program_path: ProgramPathOption = None,
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Program name"),
    ] = "",
    policy: Annotated[
        str,
        typer.Option("--policy", help="Default policy: conservative | moderate | adaptive"),
    ] = "moderate",
    disabled: Annotated[
        bool,
        typer.Option("--disabled", help="Create with the progression master switch off"),
    ] = False,
) -> None:
    """
    Create the program file.

    An existing program file is left untouched.
    """
    _check_policy(policy)
    store = get_store(program_path)
    if store.exists():
        views.print_info(f"Program already exists: {store.program_path}")
        return

    store.init(name=name, policy=policy, progression_enabled=not disabled)  # type: ignore[arg-type]
    views.print_success(f"Created program: {store.program_path}")


@app.command()
def switch(
    state: Annotated[str, typer.Argument(help="on | off")],
    program_path: ProgramPathOption = None,
) -> None:
    """
    Turn the program-wide progression switch on or off.

    Per-exercise opt-ins are kept while the switch is off; they only take
    effect while it is on.
    """
    if state not in ("on", "off"):
        views.print_error("State must be 'on' or 'off'")
        raise typer.Exit(1)
    store = require_store(program_path)
    program = _load(store)
    program.progression_enabled = state == "on"
    store.save_program(program)
    views.print_success(f"Progression switched {state}.")


@app.command()
def policy(
    new_policy: Annotated[str, typer.Argument(help="conservative | moderate | adaptive")],
    program_path: ProgramPathOption = None,
) -> None:
    """Set the program's default progression policy."""
    _check_policy(new_policy)
    store = require_store(program_path)
    program = _load(store)
    program.progression_policy = new_policy  # type: ignore[assignment]
    store.save_program(program)
    views.print_success(f"Default policy set to {new_policy}.")


@app.command()
def enable(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID, e.g. bench_press")],
    program_path: ProgramPathOption = None,
) -> None:
    """Opt an exercise into progression."""
    store = require_store(program_path)
    program = _load(store)
    program.set_progression_enabled(True, exercise_id)
    store.save_program(program)
    views.print_success(f"Progression enabled for {exercise_id}.")
    if not program.progression_enabled:
        views.print_warning("The program-wide switch is off; run 'switch on' to activate.")


@app.command()
def disable(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID")],
    program_path: ProgramPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
) -> None:
    """
    Opt an exercise out of progression.

    This discards the exercise's policy override and stored progression
    state; re-enabling starts from scratch.
    """
    store = require_store(program_path)
    program = _load(store)

    has_data = (
        exercise_id in program.exercise_progression_states
        or exercise_id in program.exercise_progression_overrides
    )
    if has_data and not force:
        if not views.confirm_action(
            f"Disabling discards the stored progression for {exercise_id}. Continue?"
        ):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    program.set_progression_enabled(False, exercise_id)
    store.save_program(program)
    views.print_success(f"Progression disabled for {exercise_id}.")


@app.command()
def override(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID")],
    new_policy: Annotated[
        Optional[str],
        typer.Argument(help="conservative | moderate | adaptive (omit with --clear)"),
    ] = None,
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Remove the override"),
    ] = False,
    program_path: ProgramPathOption = None,
) -> None:
    """Set or clear a per-exercise policy override."""
    if not clear:
        if new_policy is None:
            views.print_error("Give a policy or use --clear")
            raise typer.Exit(1)
        _check_policy(new_policy)

    store = require_store(program_path)
    program = _load(store)
    program.set_progression_override(None if clear else new_policy, exercise_id)  # type: ignore[arg-type]
    store.save_program(program)

    if clear:
        views.print_success(f"Override cleared for {exercise_id}.")
        return
    views.print_success(f"{exercise_id} now uses the {new_policy} policy.")
    if exercise_id not in program.progression_enabled_exercises:
        views.print_warning(f"{exercise_id} is not opted in; the override applies once enabled.")


@app.command()
def reset(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID")],
    program_path: ProgramPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
) -> None:
    """Forget the stored progression state of an exercise (stays opted in)."""
    store = require_store(program_path)
    program = _load(store)
    if program.progression_state(exercise_id) is None:
        views.print_info(f"No progression state for {exercise_id}.")
        return
    if not force and not views.confirm_action(f"Reset progression state for {exercise_id}?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    program.set_progression_state(None, exercise_id)
    store.save_program(program)
    views.print_success(f"Progression state reset for {exercise_id}.")
