"""
Exercise catalog for gym-progression.

Each exercise is described by an ExerciseDefinition carrying the default
set scheme that seeds its first prescription.
"""

from .base import ExerciseDefinition
from .registry import EXERCISE_REGISTRY, default_scheme_for, get_exercise, is_progression_tracked

__all__ = [
    "ExerciseDefinition",
    "EXERCISE_REGISTRY",
    "default_scheme_for",
    "get_exercise",
    "is_progression_tracked",
]
