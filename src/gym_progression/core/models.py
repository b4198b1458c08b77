"""
Data models for gym-progression.

All core dataclasses representing logged sets, prescriptions, per-exercise
progression state, and the Program aggregate that owns that state.
Policy/outcome values are plain strings constrained by Literal types;
decoding of unknown stored tags is handled in io/serializers.py.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from .config import CONFIDENCE_MAX, CONFIDENCE_MIN, INITIAL_CONFIDENCE, OUTCOME_HISTORY_CAP

ProgressionPolicy = Literal["conservative", "moderate", "adaptive"]
ProgressionOutcome = Literal["progress", "stay", "regress"]
ProgressionMetric = Literal["weight", "reps"]
PrescriptionChange = Literal["increase", "decrease", "hold", "seed"]

PROGRESSION_POLICIES: tuple[str, ...] = ("conservative", "moderate", "adaptive")
PROGRESSION_OUTCOMES: tuple[str, ...] = ("progress", "stay", "regress")
PROGRESSION_METRICS: tuple[str, ...] = ("weight", "reps")


def utc_timestamp(now: datetime | None = None) -> str:
    """Return *now* (default: current time) as an ISO-8601 UTC string."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="seconds")


def _check_non_negative(value: float | int | None, name: str) -> None:
    if value is not None and value < 0:
        raise ValueError(f"{name} must be non-negative")


@dataclass
class SetRecord:
    """
    A single logged set.

    Strength sets carry weight/reps; timed or distance work carries
    duration_seconds/distance. ``weight=None`` means no external load
    was tracked (bodyweight movement).
    """

    weight: float | None = None
    reps: int | None = None
    duration_seconds: int | None = None
    distance: float | None = None
    completed: bool = True

    def __post_init__(self) -> None:
        """Validate set data."""
        _check_non_negative(self.weight, "weight")
        _check_non_negative(self.reps, "reps")
        _check_non_negative(self.duration_seconds, "duration_seconds")
        _check_non_negative(self.distance, "distance")


@dataclass
class PrescribedTarget:
    """
    The target issued for each working set of an exercise.

    Every dimension that is not None is tracked: a set only meets the
    target when it reaches all of them.
    """

    weight: float | None = None
    reps: int | None = None
    duration_seconds: int | None = None
    distance: float | None = None

    def __post_init__(self) -> None:
        """Validate target data."""
        if (
            self.weight is None
            and self.reps is None
            and self.duration_seconds is None
            and self.distance is None
        ):
            raise ValueError("PrescribedTarget needs at least one tracked dimension")
        _check_non_negative(self.weight, "weight")
        _check_non_negative(self.reps, "reps")
        _check_non_negative(self.duration_seconds, "duration_seconds")
        _check_non_negative(self.distance, "distance")

    def __str__(self) -> str:
        parts: list[str] = []
        if self.reps is not None:
            parts.append(f"{self.reps} reps")
        if self.weight is not None:
            parts.append(f"@ {self.weight:g}")
        if self.duration_seconds is not None:
            parts.append(f"{self.duration_seconds}s")
        if self.distance is not None:
            parts.append(f"{self.distance:g} dist")
        return " ".join(parts)


@dataclass
class SessionExerciseData:
    """
    What the session store hands over for one exercise of a finished session.

    ``target`` is the prescription that was shown for the session; it may be
    None when the session was logged without one.
    ``recommendation`` is an outcome chosen by the user; when set it is used
    instead of the classified one.
    """

    exercise_id: str
    target: PrescribedTarget | None = None
    sets: list[SetRecord] = field(default_factory=list)
    skipped: bool = False
    recommendation: ProgressionOutcome | None = None

    def __post_init__(self) -> None:
        if self.recommendation is not None and self.recommendation not in PROGRESSION_OUTCOMES:
            raise ValueError(f"Invalid recommendation: {self.recommendation}")


@dataclass(frozen=True)
class DefaultSetScheme:
    """Catalog default used to seed the first prescription of an exercise."""

    weight: float | None
    reps: int
    sets: int = 3
    metric: ProgressionMetric = "weight"

    def __post_init__(self) -> None:
        if self.reps <= 0:
            raise ValueError("DefaultSetScheme.reps must be positive")
        if self.sets <= 0:
            raise ValueError("DefaultSetScheme.sets must be positive")
        _check_non_negative(self.weight, "weight")
        if self.metric not in PROGRESSION_METRICS:
            raise ValueError(f"Invalid metric: {self.metric}")


@dataclass(frozen=True)
class Prescription:
    """The weight/reps target issued for an exercise's next session."""

    weight: float | None
    reps: int | None
    change: PrescriptionChange = "hold"

    def to_target(self) -> PrescribedTarget:
        """The target the next session is compared against."""
        return PrescribedTarget(weight=self.weight, reps=self.reps)

    def __str__(self) -> str:
        reps = f"{self.reps} reps" if self.reps is not None else "-"
        if self.weight is None:
            return reps
        return f"{reps} @ {self.weight:g}"


@dataclass
class ExerciseProgressionState:
    """
    Stateful progression context for one exercise.

    success_streak and fail_streak are mutually exclusive momentum
    counters. recent_outcomes is chronological and bounded by
    OUTCOME_HISTORY_CAP. confidence is a smoothed [0, 1] estimate of how
    reliably prescriptions are met.
    """

    last_prescribed_weight: float | None = None
    last_prescribed_reps: int | None = None
    success_streak: int = 0
    fail_streak: int = 0
    recent_outcomes: list[str] = field(default_factory=list)
    confidence: float = INITIAL_CONFIDENCE
    last_updated_at: str = ""

    def __post_init__(self) -> None:
        """Validate state invariants."""
        if self.success_streak < 0 or self.fail_streak < 0:
            raise ValueError("streaks must be non-negative")
        if self.success_streak > 0 and self.fail_streak > 0:
            raise ValueError("success_streak and fail_streak cannot both be non-zero")
        if not CONFIDENCE_MIN <= self.confidence <= CONFIDENCE_MAX:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
        if len(self.recent_outcomes) > OUTCOME_HISTORY_CAP:
            raise ValueError(
                f"recent_outcomes holds at most {OUTCOME_HISTORY_CAP} entries"
            )
        _check_non_negative(self.last_prescribed_weight, "last_prescribed_weight")
        _check_non_negative(self.last_prescribed_reps, "last_prescribed_reps")

    @property
    def has_prescription(self) -> bool:
        """True once a target has been issued."""
        return self.last_prescribed_weight is not None or self.last_prescribed_reps is not None


@dataclass
class Program:
    """
    Training program aggregate (progression-relevant view).

    Owns per-exercise enablement, policy overrides and progression state.
    Disabling progression for an exercise is destructive: its override
    and stored state are discarded, not archived.
    """

    program_id: str
    name: str = ""
    progression_enabled: bool = False
    progression_policy: ProgressionPolicy = "moderate"
    progression_enabled_exercises: set[str] = field(default_factory=set)
    exercise_progression_overrides: dict[str, ProgressionPolicy] = field(default_factory=dict)
    exercise_progression_states: dict[str, ExerciseProgressionState] = field(
        default_factory=dict
    )
    updated_at: str = ""

    def __post_init__(self) -> None:
        """Validate program data."""
        if self.progression_policy not in PROGRESSION_POLICIES:
            raise ValueError(f"Invalid progression_policy: {self.progression_policy}")
        for ex_id, policy in self.exercise_progression_overrides.items():
            if policy not in PROGRESSION_POLICIES:
                raise ValueError(
                    f"exercise_progression_overrides[{ex_id!r}] has invalid policy {policy!r}"
                )

    def is_progression_enabled(self, exercise_id: str) -> bool:
        """True when the master switch is on and the exercise is opted in."""
        if not self.progression_enabled:
            return False
        return exercise_id in self.progression_enabled_exercises

    def policy_for_exercise(self, exercise_id: str) -> ProgressionPolicy:
        """Return the override while the exercise is opted in, else the program default."""
        if exercise_id in self.progression_enabled_exercises:
            return self.exercise_progression_overrides.get(exercise_id, self.progression_policy)
        return self.progression_policy

    def progression_state(self, exercise_id: str) -> ExerciseProgressionState | None:
        """Return the stored state for an exercise, if any."""
        return self.exercise_progression_states.get(exercise_id)

    def set_progression_enabled(
        self, enabled: bool, exercise_id: str, now: datetime | None = None
    ) -> None:
        """Opt an exercise in or out. Opting out removes its override and state."""
        if enabled:
            self.progression_enabled_exercises.add(exercise_id)
        else:
            self.progression_enabled_exercises.discard(exercise_id)
            self.exercise_progression_overrides.pop(exercise_id, None)
            self.exercise_progression_states.pop(exercise_id, None)
        self.updated_at = utc_timestamp(now)

    def set_progression_override(
        self,
        policy: ProgressionPolicy | None,
        exercise_id: str,
        now: datetime | None = None,
    ) -> None:
        """Set, replace, or (with None) remove the per-exercise policy override."""
        if policy is None:
            self.exercise_progression_overrides.pop(exercise_id, None)
        else:
            if policy not in PROGRESSION_POLICIES:
                raise ValueError(f"Invalid progression policy: {policy}")
            self.exercise_progression_overrides[exercise_id] = policy
        self.updated_at = utc_timestamp(now)

    def set_progression_state(
        self,
        state: ExerciseProgressionState | None,
        exercise_id: str,
        now: datetime | None = None,
    ) -> None:
        """Replace (or with None remove) the stored state for an exercise."""
        if state is None:
            self.exercise_progression_states.pop(exercise_id, None)
        else:
            self.exercise_progression_states[exercise_id] = state
        self.updated_at = utc_timestamp(now)
