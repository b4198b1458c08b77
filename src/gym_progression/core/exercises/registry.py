"""
Exercise catalog registry.

All catalog exercises are registered here.  Use get_exercise() to look up
an ExerciseDefinition by its exercise_id string.

Exercises are loaded from per-exercise YAML files in the bundled
``src/gym_progression/exercises/`` directory at import time.  If no
definition can be loaded, a RuntimeError is raised: default schemes
are required to seed first prescriptions.

User overrides: place matching files in ``~/.gym-progression/exercises/``.
"""

from ..models import DefaultSetScheme
from .base import ExerciseDefinition


def _build_registry() -> dict[str, ExerciseDefinition]:
    from .loader import load_exercises_from_yaml

    loaded = load_exercises_from_yaml()
    if not loaded:
        raise RuntimeError(
            "gym-progression: no exercise definitions could be loaded from YAML. "
            "Check that src/gym_progression/exercises/*.yaml files are present and valid."
        )
    return loaded


EXERCISE_REGISTRY: dict[str, ExerciseDefinition] = _build_registry()


def get_exercise(exercise_id: str) -> ExerciseDefinition:
    """
    Return the ExerciseDefinition for the given exercise_id.

    Raises:
        ValueError: If exercise_id is not in the registry
    """
    if exercise_id not in EXERCISE_REGISTRY:
        valid = ", ".join(sorted(EXERCISE_REGISTRY))
        raise ValueError(f"Unknown exercise '{exercise_id}'. Valid IDs: {valid}")
    return EXERCISE_REGISTRY[exercise_id]


def default_scheme_for(exercise_id: str) -> DefaultSetScheme:
    """Default set scheme used to seed the first prescription of an exercise."""
    return get_exercise(exercise_id).default_scheme


def is_progression_tracked(exercise_id: str) -> bool:
    """
    Whether load progression applies to an exercise.

    Only strength exercises progress.  Ids missing from the catalog are
    custom exercises and are treated as strength work.
    """
    exercise = EXERCISE_REGISTRY.get(exercise_id)
    return exercise is None or exercise.exercise_type == "strength"
