"""Session commands: log-session and its helpers."""

import json
from typing import Annotated, Optional

import typer

from ...core.exercises.registry import default_scheme_for, get_exercise, is_progression_tracked
from ...core.models import PROGRESSION_OUTCOMES, DefaultSetScheme, SessionExerciseData
from ...core.prescriber import seed_prescription
from ...core.progression import EvaluationResult, record_session
from ...io.serializers import (
    ValidationError,
    parse_sets_string,
    parse_target_string,
    state_to_dict,
)
from .. import views
from ..app import JsonOption, ProgramPathOption, app, require_store


def _interactive_sets() -> str:
    """
    Prompt the user to enter sets one by one.

    Accepts compact format on the first entry (8x3 @135) as well as the
    per-set formats (8@135, or bare 8 for unloaded sets).
    """
    views.console.print()
    views.console.print("[bold]Enter sets one per line.[/bold]")
    views.console.print(
        "  Compact: [cyan]NxM @W[/cyan]  e.g. [green]8x3 @135[/green]"
        "   Per-set: [cyan]reps@weight[/cyan]  e.g. [green]8@135[/green]  [green]8[/green]"
    )
    views.console.print("  Press [bold]Enter[/bold] on an empty line when done.\n")

    parts: list[str] = []
    set_num = 1
    while True:
        raw = views.console.input(f"  Set {set_num}: ").strip()
        if not raw:
            if parts:
                break
            views.print_warning("Enter at least one set.")
            continue
        try:
            parsed = parse_sets_string(raw)
        except ValidationError as e:
            views.print_error(str(e))
            continue
        parts.append(raw)
        set_num += len(parsed)

    return ", ".join(parts)


def _defaults_for(
    exercise_id: str,
    default_weight: float | None,
    default_reps: int | None,
) -> DefaultSetScheme:
    """Catalog default scheme, with command-line values taking precedence."""
    try:
        scheme = default_scheme_for(exercise_id)
    except ValueError:
        if default_reps is None:
            views.print_error(
                f"'{exercise_id}' is not in the exercise catalog; pass --default-reps "
                "(and --default-weight) to seed its first target."
            )
            raise typer.Exit(1)
        return DefaultSetScheme(weight=default_weight, reps=default_reps)

    if default_weight is None and default_reps is None:
        return scheme
    return DefaultSetScheme(
        weight=default_weight if default_weight is not None else scheme.weight,
        reps=default_reps if default_reps is not None else scheme.reps,
        sets=scheme.sets,
        metric=scheme.metric,
    )


def _result_to_dict(result: EvaluationResult) -> dict:
    prescription = result.prescription
    return {
        "exercise_id": result.exercise_id,
        "outcome": result.outcome,
        "policy": result.policy,
        "prescription": (
            {
                "weight": prescription.weight,
                "reps": prescription.reps,
                "change": prescription.change,
            }
            if prescription is not None
            else None
        ),
        "state": state_to_dict(result.state) if result.state is not None else None,
    }


@app.command("log-session")
def log_session(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID, e.g. bench_press")],
    sets: Annotated[
        Optional[str],
        typer.Option("--sets", "-s", help="Sets: 8@135,8@135,7@135 or 8x3 @135"),
    ] = None,
    target: Annotated[
        Optional[str],
        typer.Option("--target", "-t", help="Target that was prescribed, e.g. 8@135 (default: stored)"),
    ] = None,
    skipped: Annotated[
        bool,
        typer.Option("--skipped", help="Exercise was skipped this session"),
    ] = False,
    outcome: Annotated[
        Optional[str],
        typer.Option("--outcome", "-o", help="Choose the outcome: progress | stay | regress"),
    ] = None,
    default_weight: Annotated[
        Optional[float],
        typer.Option("--default-weight", help="Seed weight when no target exists yet"),
    ] = None,
    default_reps: Annotated[
        Optional[int],
        typer.Option("--default-reps", help="Seed reps when no target exists yet"),
    ] = None,
    program_path: ProgramPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log a completed exercise and get the next session's target.

    Run without --sets for interactive entry, or in one line:

      gym-progression log-session bench_press --sets "8@135,8@135,8@135"

    Without --target the stored target is used; on the first session the
    catalog default scheme is the target.  --outcome overrides the outcome
    computed from the sets.
    """
    store = require_store(program_path)
    try:
        program = store.load_program()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not program.is_progression_enabled(exercise_id):
        views.print_error(f"Progression is not active for {exercise_id}.")
        if exercise_id not in program.progression_enabled_exercises:
            views.print_info(f"Run 'enable {exercise_id}' first.")
        else:
            views.print_info("The program-wide switch is off; run 'switch on'.")
        raise typer.Exit(1)

    if not is_progression_tracked(exercise_id):
        kind = get_exercise(exercise_id).exercise_type
        views.print_error(
            f"{exercise_id} is a {kind} exercise; progression only applies to strength exercises."
        )
        raise typer.Exit(1)

    if outcome is not None and outcome not in PROGRESSION_OUTCOMES:
        views.print_error(f"Outcome must be one of: {', '.join(PROGRESSION_OUTCOMES)}")
        raise typer.Exit(1)

    defaults = _defaults_for(exercise_id, default_weight, default_reps)

    parsed_sets = []
    if not skipped and (sets is not None or outcome is None):
        if sets is None:
            sets = _interactive_sets()
        try:
            parsed_sets = parse_sets_string(sets)
        except ValidationError as e:
            views.print_error(f"Invalid sets format: {e}")
            raise typer.Exit(1)

    parsed_target = None
    if target is not None:
        try:
            parsed_target = parse_target_string(target)
        except (ValidationError, ValueError) as e:
            views.print_error(f"Invalid target format: {e}")
            raise typer.Exit(1)
    else:
        stored = program.progression_state(exercise_id)
        if stored is None or not stored.has_prescription:
            # First session: it is measured against the seeded target.
            parsed_target = seed_prescription(defaults).to_target()

    data = SessionExerciseData(
        exercise_id=exercise_id,
        target=parsed_target,
        sets=parsed_sets,
        skipped=skipped,
        recommendation=outcome,  # type: ignore[arg-type]
    )
    result = record_session(program, exercise_id, data, defaults)

    if result.outcome is not None:
        store.save_program(program)

    if json_out:
        print(json.dumps(_result_to_dict(result), indent=2))
        return

    views.print_evaluation(result)
