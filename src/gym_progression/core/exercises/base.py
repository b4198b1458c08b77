"""
Base types for exercise catalog entries.

ExerciseDefinition names an exercise and carries the default set scheme
used to seed its first prescription.
"""

from dataclasses import dataclass

from ..models import DefaultSetScheme

EXERCISE_TYPES: tuple[str, ...] = ("strength", "cardio", "mobility", "isometric", "explosive")


@dataclass(frozen=True)
class ExerciseDefinition:
    """Catalog entry for one exercise."""

    exercise_id: str  # e.g. "bench_press"
    display_name: str  # e.g. "Bench Press"
    default_scheme: DefaultSetScheme
    exercise_type: str = "strength"

    def __post_init__(self) -> None:
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        if self.exercise_type not in EXERCISE_TYPES:
            raise ValueError(f"Invalid exercise_type: {self.exercise_type}")
