"""
State updater: advance one exercise's progression state by one outcome.

Pure transform.  Never touches program-level enablement or overrides.

Confidence follows an exponential moving update:
    progress:  c' = c + step * (1 - c)
    regress:   c' = c - step * c
    stay:      c' = c
"""

from dataclasses import replace
from datetime import datetime

from .config import CONFIDENCE_MAX, CONFIDENCE_MIN, INITIAL_CONFIDENCE, OUTCOME_HISTORY_CAP
from .models import ExerciseProgressionState, ProgressionOutcome, utc_timestamp
from .policies import PolicyParams


def clamp_confidence(value: float) -> float:
    """Clamp a confidence value to [0, 1]."""
    return max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, value))


def append_outcome(
    outcomes: list[str],
    outcome: ProgressionOutcome,
    cap: int = OUTCOME_HISTORY_CAP,
) -> list[str]:
    """Return a new history with *outcome* appended and the oldest entries dropped past *cap*."""
    history = list(outcomes) + [outcome]
    return history[-cap:]


def update_confidence(confidence: float, outcome: ProgressionOutcome, step: float) -> float:
    """
    Move confidence toward 1.0 on progress, toward 0.0 on regress.

    Args:
        confidence: Current confidence
        outcome: Classified outcome
        step: Policy confidence step

    Returns:
        Updated confidence, clamped to [0, 1]
    """
    if outcome == "progress":
        confidence = confidence + step * (1.0 - confidence)
    elif outcome == "regress":
        confidence = confidence - step * confidence
    return clamp_confidence(confidence)


def new_state(
    now: datetime | None = None,
    confidence: float = INITIAL_CONFIDENCE,
) -> ExerciseProgressionState:
    """Create a fresh state for an exercise that has none yet."""
    return ExerciseProgressionState(
        confidence=clamp_confidence(confidence),
        last_updated_at=utc_timestamp(now),
    )


def advance(
    state: ExerciseProgressionState,
    outcome: ProgressionOutcome,
    params: PolicyParams,
    now: datetime | None = None,
) -> ExerciseProgressionState:
    """
    Advance streaks, confidence and outcome history by one outcome.

    A mixed ("stay") result breaks momentum in both directions and leaves
    confidence unchanged.

    Args:
        state: Current state (not modified)
        outcome: Classified outcome for the finished session
        params: Policy row in effect for the exercise
        now: Timestamp for last_updated_at (default: current time)

    Returns:
        New ExerciseProgressionState
    """
    if outcome == "progress":
        success_streak = state.success_streak + 1
        fail_streak = 0
    elif outcome == "regress":
        success_streak = 0
        fail_streak = state.fail_streak + 1
    else:
        success_streak = 0
        fail_streak = 0

    return replace(
        state,
        success_streak=success_streak,
        fail_streak=fail_streak,
        recent_outcomes=append_outcome(state.recent_outcomes, outcome),
        confidence=update_confidence(state.confidence, outcome, params.confidence_step),
        last_updated_at=utc_timestamp(now),
    )
