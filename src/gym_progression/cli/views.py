"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of progression data.
"""

from rich.console import Console
from rich.table import Table

from ..core.models import ExerciseProgressionState, Prescription, Program
from ..core.progression import EvaluationResult

console = Console()

_OUTCOME_STYLES = {
    "progress": "green",
    "stay": "yellow",
    "regress": "red",
}

_CHANGE_LABELS = {
    "increase": "[green]▲ increase[/green]",
    "decrease": "[red]▼ deload[/red]",
    "hold": "[yellow]= hold[/yellow]",
    "seed": "[cyan]● first target[/cyan]",
}


def _fmt_weight(weight: float | None) -> str:
    return f"{weight:g}" if weight is not None else "-"


def _fmt_reps(reps: int | None) -> str:
    return str(reps) if reps is not None else "-"


def fmt_outcome(outcome: str | None) -> str:
    """Colour an outcome tag for display."""
    if outcome is None:
        return "[dim]none[/dim]"
    style = _OUTCOME_STYLES.get(outcome, "white")
    return f"[{style}]{outcome}[/{style}]"


def _fmt_history(outcomes: list[str]) -> str:
    symbols = {"progress": "[green]+[/green]", "stay": "[yellow]=[/yellow]", "regress": "[red]-[/red]"}
    return " ".join(symbols.get(o, "?") for o in outcomes) or "-"


def _fmt_confidence(confidence: float) -> str:
    filled = round(confidence * 10)
    return f"{'█' * filled}{'░' * (10 - filled)} {confidence:.2f}"


def format_program_table(program: Program) -> Table:
    """
    Create a Rich table with one row per opted-in exercise.

    Args:
        program: Program to display

    Returns:
        Rich Table object
    """
    table = Table(title=f"Progression: {program.name or program.program_id}")

    table.add_column("Exercise", style="cyan")
    table.add_column("Policy", style="magenta")
    table.add_column("Target", justify="right", style="bold")
    table.add_column("Streak", justify="right")
    table.add_column("Recent")
    table.add_column("Confidence")

    for ex_id in sorted(program.progression_enabled_exercises):
        policy = program.policy_for_exercise(ex_id)
        if ex_id in program.exercise_progression_overrides:
            policy = f"{policy}*"
        state = program.progression_state(ex_id)
        if state is None:
            table.add_row(ex_id, policy, "-", "-", "[dim]not tracked yet[/dim]", "-")
            continue
        if state.success_streak:
            streak = f"[green]+{state.success_streak}[/green]"
        elif state.fail_streak:
            streak = f"[red]-{state.fail_streak}[/red]"
        else:
            streak = "0"
        table.add_row(
            ex_id,
            policy,
            f"{_fmt_reps(state.last_prescribed_reps)} @ {_fmt_weight(state.last_prescribed_weight)}",
            streak,
            _fmt_history(state.recent_outcomes),
            _fmt_confidence(state.confidence),
        )

    return table


def print_program(program: Program) -> None:
    """Print the program header and per-exercise table."""
    switch = "[green]on[/green]" if program.progression_enabled else "[red]off[/red]"
    console.print(f"Progression: {switch}   Default policy: [magenta]{program.progression_policy}[/magenta]")
    if not program.progression_enabled_exercises:
        console.print("[yellow]No exercises opted into progression yet.[/yellow]")
        return
    console.print(format_program_table(program))
    if program.exercise_progression_overrides:
        console.print("[dim]* per-exercise policy override[/dim]")


def print_state(exercise_id: str, state: ExerciseProgressionState | None) -> None:
    """Print the full stored state of one exercise."""
    if state is None:
        console.print(f"[yellow]No progression state for {exercise_id}.[/yellow]")
        return
    console.print(f"[bold cyan]{exercise_id}[/bold cyan]")
    console.print(f"  Last target:    {_fmt_reps(state.last_prescribed_reps)} @ {_fmt_weight(state.last_prescribed_weight)}")
    console.print(f"  Success streak: {state.success_streak}")
    console.print(f"  Fail streak:    {state.fail_streak}")
    console.print(f"  Recent:         {_fmt_history(state.recent_outcomes)}")
    console.print(f"  Confidence:     {_fmt_confidence(state.confidence)}")
    console.print(f"  Updated:        {state.last_updated_at or '-'}")


def format_prescription(prescription: Prescription) -> str:
    """Format a prescription with its change label."""
    return f"{prescription}  {_CHANGE_LABELS.get(prescription.change, prescription.change)}"


def print_evaluation(result: EvaluationResult) -> None:
    """Print the outcome and next target after logging a session."""
    console.print()
    console.print(f"Outcome: {fmt_outcome(result.outcome)}")
    if result.outcome is None:
        console.print("[dim]No outcome recorded; progression state unchanged.[/dim]")
    if result.state is not None and result.outcome is not None:
        console.print(
            f"Streak: +{result.state.success_streak}/-{result.state.fail_streak}   "
            f"Confidence: {_fmt_confidence(result.state.confidence)}"
        )
    if result.prescription is not None:
        console.print(f"Next target: [bold]{format_prescription(result.prescription)}[/bold]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
