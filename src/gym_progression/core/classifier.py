"""
Outcome classification: compare completed sets against the prescribed target.

A completed exercise is classified as:
- progress: every working set met the target
- regress:  no working set met the target
- stay:     mixed result

No classification (None) is produced when there is nothing to compare:
no target on record, the exercise was skipped, or no set was completed.
Callers must leave progression state untouched in that case.
"""

from .models import PrescribedTarget, ProgressionOutcome, SessionExerciseData, SetRecord


def set_meets_target(set_record: SetRecord, target: PrescribedTarget) -> bool:
    """
    Check whether one set reached every dimension the target tracks.

    A set that lacks a value the target tracks (e.g. no weight logged
    against a weighted target) does not meet it.

    Args:
        set_record: Logged set
        target: Prescribed target for each working set

    Returns:
        True if all tracked dimensions were met or exceeded
    """
    checks = (
        (target.reps, set_record.reps),
        (target.weight, set_record.weight),
        (target.duration_seconds, set_record.duration_seconds),
        (target.distance, set_record.distance),
    )
    for wanted, actual in checks:
        if wanted is None:
            continue
        if actual is None or actual < wanted:
            return False
    return True


def classify(
    target: PrescribedTarget | None,
    sets: list[SetRecord],
) -> ProgressionOutcome | None:
    """
    Classify a completed exercise against its prescription.

    Args:
        target: Target that was issued for the exercise (None on first session)
        sets: Logged sets for the exercise in the finished session

    Returns:
        "progress", "stay", "regress", or None when there is nothing to classify
    """
    if target is None:
        return None

    working = [s for s in sets if s.completed]
    if not working:
        return None

    met = sum(1 for s in working if set_meets_target(s, target))

    if met == len(working):
        return "progress"
    if met == 0:
        return "regress"
    return "stay"


def classify_session(
    data: SessionExerciseData,
    fallback_target: PrescribedTarget | None = None,
) -> ProgressionOutcome | None:
    """
    Classify one exercise of a finished session.

    Uses the target recorded with the session; when the session carries
    none, *fallback_target* (usually the stored last prescription) is used.

    Args:
        data: Session data for the exercise
        fallback_target: Target to compare against if data.target is None

    Returns:
        Outcome, or None for skipped / empty / untargeted exercises
    """
    if data.skipped:
        return None
    target = data.target if data.target is not None else fallback_target
    return classify(target, data.sets)
