"""
Session evaluation: Classifier -> Updater -> Prescriber for one exercise.

evaluate_session() is pure: it reads the Program and returns the outcome,
the new exercise state and the next prescription without mutating
anything.  record_session() is the convenience wrapper used at
end-of-session that also stores the new state on the Program.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime

from .classifier import classify_session
from .exercises.registry import is_progression_tracked
from .models import (
    DefaultSetScheme,
    ExerciseProgressionState,
    PrescribedTarget,
    Prescription,
    Program,
    ProgressionOutcome,
    ProgressionPolicy,
    SessionExerciseData,
)
from .policies import EngineSettings, get_policy_params, load_engine_settings
from .prescriber import apply_prescription, prescribe, seed_prescription
from .updater import advance, new_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """
    Result of evaluating one exercise of a finished session.

    outcome is None when nothing was classified (progression disabled,
    skipped exercise, no completed sets, or no target on record); state is
    then the unchanged stored state.  prescription is None only when
    progression is not enabled for the exercise or the catalog lists it as
    a non-strength exercise.
    """

    exercise_id: str
    outcome: ProgressionOutcome | None
    state: ExerciseProgressionState | None
    prescription: Prescription | None
    policy: ProgressionPolicy | None = None


def last_prescription_target(state: ExerciseProgressionState | None) -> PrescribedTarget | None:
    """The stored last prescription as a target, or None if none was issued."""
    if state is None or not state.has_prescription:
        return None
    return Prescription(state.last_prescribed_weight, state.last_prescribed_reps).to_target()


def carry_forward(
    state: ExerciseProgressionState | None,
    defaults: DefaultSetScheme,
) -> Prescription:
    """Prescription to show when no new outcome was produced."""
    if state is None or not state.has_prescription:
        return seed_prescription(defaults)
    return Prescription(
        weight=state.last_prescribed_weight,
        reps=state.last_prescribed_reps,
        change="hold",
    )


def evaluate_session(
    program: Program,
    exercise_id: str,
    data: SessionExerciseData,
    defaults: DefaultSetScheme,
    now: datetime | None = None,
    settings: EngineSettings | None = None,
) -> EvaluationResult:
    """
    Evaluate one completed exercise and compute its next prescription.

    Args:
        program: Program owning the exercise's progression configuration
        exercise_id: Exercise identifier
        data: Target and logged sets for the exercise
        defaults: Catalog default scheme (seed + progression metric)
        now: Timestamp for state updates (default: current time)
        settings: Engine settings (default: loaded from YAML)

    Returns:
        EvaluationResult with outcome, new state and next prescription
    """
    if settings is None:
        settings = load_engine_settings()

    stored = program.progression_state(exercise_id)

    if not program.is_progression_enabled(exercise_id):
        logger.debug("progression not enabled for %s; skipping", exercise_id)
        return EvaluationResult(exercise_id, None, stored, None)

    if not is_progression_tracked(exercise_id):
        logger.debug("%s is not a strength exercise; skipping", exercise_id)
        return EvaluationResult(exercise_id, None, stored, None)

    policy = program.policy_for_exercise(exercise_id)
    params = get_policy_params(policy, settings.policy_table)

    if data.recommendation is not None and not data.skipped:
        outcome = data.recommendation
        logger.debug("%s: using chosen outcome %s", exercise_id, outcome)
    else:
        outcome = classify_session(data, last_prescription_target(stored))
    if outcome is None:
        logger.debug("no outcome for %s; state left untouched", exercise_id)
        return EvaluationResult(exercise_id, None, stored, carry_forward(stored, defaults), policy)

    state = stored if stored is not None else new_state(now, settings.initial_confidence)

    # The target shown for the session is the base the next change applies to.
    if data.target is not None and (data.target.weight is not None or data.target.reps is not None):
        state = replace(
            state,
            last_prescribed_weight=data.target.weight,
            last_prescribed_reps=data.target.reps,
        )

    advanced = advance(state, outcome, params, now)
    prescription = prescribe(advanced, params, defaults, settings.confidence_floor)
    final_state = apply_prescription(advanced, prescription)

    logger.debug(
        "%s: outcome=%s policy=%s streaks=+%d/-%d confidence=%.3f -> %s (%s)",
        exercise_id,
        outcome,
        policy,
        final_state.success_streak,
        final_state.fail_streak,
        final_state.confidence,
        prescription,
        prescription.change,
    )
    return EvaluationResult(exercise_id, outcome, final_state, prescription, policy)


def record_session(
    program: Program,
    exercise_id: str,
    data: SessionExerciseData,
    defaults: DefaultSetScheme,
    now: datetime | None = None,
    settings: EngineSettings | None = None,
) -> EvaluationResult:
    """
    Evaluate an exercise and store the new state on the Program.

    State is only written when an outcome was produced; otherwise the
    Program is left untouched.
    """
    result = evaluate_session(program, exercise_id, data, defaults, now, settings)
    if result.outcome is not None:
        program.set_progression_state(result.state, exercise_id, now)
    return result


def record_completed_session(
    program: Program,
    exercises: list[SessionExerciseData],
    defaults_for: Callable[[str], DefaultSetScheme],
    now: datetime | None = None,
    settings: EngineSettings | None = None,
) -> dict[str, EvaluationResult]:
    """
    Run record_session for every exercise of a finished session.

    Exercises without progression enabled, and catalog exercises that are
    not strength exercises, are skipped entirely.

    Args:
        program: Program to update
        exercises: Per-exercise session data
        defaults_for: Lookup of the default scheme by exercise id
        now: Timestamp for state updates
        settings: Engine settings (default: loaded from YAML)

    Returns:
        {exercise_id: EvaluationResult} for the evaluated exercises
    """
    results: dict[str, EvaluationResult] = {}
    for data in exercises:
        if not program.is_progression_enabled(data.exercise_id):
            continue
        if not is_progression_tracked(data.exercise_id):
            continue
        results[data.exercise_id] = record_session(
            program,
            data.exercise_id,
            data,
            defaults_for(data.exercise_id),
            now,
            settings,
        )
    return results
