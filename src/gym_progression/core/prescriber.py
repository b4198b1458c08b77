"""
Prescriber: compute the next session's target from updated state.

Decision order:
1. No prior prescription        -> seed from the catalog default scheme
2. success_streak >= threshold  -> increase (only at/above the confidence floor)
3. fail_streak >= threshold     -> decrease (deload)
4. otherwise                    -> hold

Streaks are not reset when a change is issued: every further
consecutive success past the threshold progresses again, and a "stay"
or an opposite outcome is what breaks momentum (see core/updater.py).

Weight changes are linear in the current load:
    delta   = max(weight * pct / 100, minimum_weight_change)
    next    = round_to(weight ± delta, rounding_increment)
with at least one rounding increment of movement.
"""

import math
from dataclasses import replace

from .config import CONFIDENCE_FLOOR, MIN_PRESCRIBED_REPS
from .models import DefaultSetScheme, ExerciseProgressionState, Prescription
from .policies import PolicyParams


def round_to_increment(value: float, increment: float) -> float:
    """Round half-up to the nearest multiple of *increment*."""
    rounded = math.floor(value / increment + 0.5) * increment
    return round(rounded, 4)


def increased_weight(weight: float, params: PolicyParams) -> float:
    """Next weight after a successful streak."""
    delta = max(weight * params.weight_increment_pct / 100.0, params.minimum_weight_change)
    rounded = round_to_increment(weight + delta, params.rounding_increment)
    return max(rounded, round(weight + params.rounding_increment, 4))


def decreased_weight(weight: float, params: PolicyParams) -> float:
    """Next weight after a failing streak (deload), never below zero."""
    delta = max(weight * params.weight_decrement_pct / 100.0, params.minimum_weight_change)
    rounded = round_to_increment(weight - delta, params.rounding_increment)
    return max(0.0, min(rounded, round(weight - params.rounding_increment, 4)))


def increased_reps(reps: int, params: PolicyParams) -> int:
    """Next rep target for rep-progressed exercises."""
    step = max(params.rep_increment, math.floor(reps * params.weight_increment_pct / 100.0 + 0.5))
    return reps + step


def decreased_reps(reps: int, params: PolicyParams) -> int:
    """Rep target after a failing streak, never below MIN_PRESCRIBED_REPS."""
    step = max(params.rep_increment, math.floor(reps * params.weight_decrement_pct / 100.0 + 0.5))
    return max(MIN_PRESCRIBED_REPS, reps - step)


def _progresses_reps(state: ExerciseProgressionState, defaults: DefaultSetScheme) -> bool:
    """Reps are adjusted for rep-metric exercises and whenever no external load is tracked."""
    if defaults.metric == "reps":
        return True
    # A deload to 0.0 is still a tracked load.
    return state.last_prescribed_weight is None


def seed_prescription(defaults: DefaultSetScheme) -> Prescription:
    """First-ever prescription, taken from the catalog default scheme."""
    return Prescription(weight=defaults.weight, reps=defaults.reps, change="seed")


def prescribe(
    state: ExerciseProgressionState,
    params: PolicyParams,
    defaults: DefaultSetScheme,
    confidence_floor: float = CONFIDENCE_FLOOR,
) -> Prescription:
    """
    Compute the next prescription for an exercise.

    Args:
        state: State already advanced by the latest outcome
        params: Policy row in effect for the exercise
        defaults: Catalog default scheme (seed and progression metric)
        confidence_floor: Minimum confidence required for an increase

    Returns:
        Prescription with the next weight/reps and the kind of change
    """
    if not state.has_prescription:
        return seed_prescription(defaults)

    weight = state.last_prescribed_weight
    reps = state.last_prescribed_reps
    by_reps = _progresses_reps(state, defaults)
    if by_reps and reps is None:
        reps = defaults.reps

    if state.success_streak >= params.progress_threshold and state.confidence >= confidence_floor:
        if by_reps:
            return Prescription(weight=weight, reps=increased_reps(reps, params), change="increase")
        return Prescription(weight=increased_weight(weight, params), reps=reps, change="increase")

    if state.fail_streak >= params.regress_threshold:
        if by_reps:
            return Prescription(weight=weight, reps=decreased_reps(reps, params), change="decrease")
        return Prescription(weight=decreased_weight(weight, params), reps=reps, change="decrease")

    return Prescription(
        weight=state.last_prescribed_weight,
        reps=state.last_prescribed_reps,
        change="hold",
    )


def apply_prescription(
    state: ExerciseProgressionState,
    prescription: Prescription,
) -> ExerciseProgressionState:
    """Store the issued prescription back into the state (new instance)."""
    return replace(
        state,
        last_prescribed_weight=prescription.weight,
        last_prescribed_reps=prescription.reps,
    )
