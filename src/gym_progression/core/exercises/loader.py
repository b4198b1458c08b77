"""
YAML → ExerciseDefinition loader.

Loads catalog entries from individual YAML files in the bundled
``src/gym_progression/exercises/`` directory.  Each file (e.g.
bench_press.yaml) contains one flat exercise definition.

User overrides: place matching files in ``~/.gym-progression/exercises/``.
A user file is deep-merged over the bundled definition, so only changed
keys need to be listed.  A user file whose stem does not match any bundled
file is treated as a new exercise and added to the catalog.

Usage (internal, called by registry.py):
    from .loader import load_exercises_from_yaml
    exercises = load_exercises_from_yaml()   # dict, possibly empty
"""

from __future__ import annotations

import warnings
from pathlib import Path

from ..engine.config_loader import _load_yaml_file, deep_merge, get_user_data_dir
from ..models import DefaultSetScheme
from .base import ExerciseDefinition

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset(
    {"exercise_id", "display_name", "default_scheme"}
)

_REQUIRED_SCHEME_FIELDS: frozenset[str] = frozenset({"reps"})


def _scheme_from_dict(d: dict) -> DefaultSetScheme:
    """Convert a raw dict to DefaultSetScheme, raising ValueError on missing fields."""
    missing = _REQUIRED_SCHEME_FIELDS - set(d)
    if missing:
        raise ValueError(f"default_scheme missing fields: {sorted(missing)}")
    weight = d.get("weight")
    return DefaultSetScheme(
        weight=float(weight) if weight is not None else None,
        reps=int(d["reps"]),
        sets=int(d.get("sets", 3)),
        metric=str(d.get("metric", "weight")),
    )


def exercise_from_dict(d: dict) -> ExerciseDefinition:
    """Convert a raw dict (from YAML) to an ExerciseDefinition.

    Raises ValueError if any required field is absent or invalid.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"ExerciseDefinition missing fields: {sorted(missing)}")
    if not isinstance(d["default_scheme"], dict):
        raise ValueError("default_scheme must be a mapping")

    return ExerciseDefinition(
        exercise_id=str(d["exercise_id"]),
        display_name=str(d["display_name"]),
        default_scheme=_scheme_from_dict(d["default_scheme"]),
        exercise_type=str(d.get("exercise_type", "strength")),
    )


def _get_bundled_exercises_dir() -> Path | None:
    """Return path to the bundled exercises/ data directory, or None if not found."""
    # loader.py lives at src/gym_progression/core/exercises/loader.py
    # three levels up → src/gym_progression/
    candidate = Path(__file__).parent.parent.parent / "exercises"
    return candidate if candidate.is_dir() else None


def _get_user_exercises_dir() -> Path | None:
    """Return ~/.gym-progression/exercises/ if it exists, else None."""
    p = get_user_data_dir() / "exercises"
    return p if p.is_dir() else None


def _add_exercise(result: dict[str, ExerciseDefinition], raw: dict, label: str) -> None:
    try:
        ex = exercise_from_dict(raw)
    except (ValueError, TypeError) as exc:
        warnings.warn(f"gym-progression: skipping exercise '{label}': {exc}", stacklevel=3)
        return
    result[ex.exercise_id] = ex


def load_exercises_from_yaml() -> dict[str, ExerciseDefinition]:
    """Return {exercise_id: ExerciseDefinition} loaded from per-exercise YAML files.

    Loads each ``<exercise_id>.yaml`` from the bundled exercises/ directory,
    deep-merging a same-named file from ``~/.gym-progression/exercises/``
    when present.  User-only files are loaded as new exercises.  Invalid
    files are skipped with a warning.
    """
    bundled_dir = _get_bundled_exercises_dir()
    user_dir = _get_user_exercises_dir()

    result: dict[str, ExerciseDefinition] = {}

    stems: dict[str, Path] = {}
    if bundled_dir is not None:
        for p in sorted(bundled_dir.glob("*.yaml")):
            stems[p.stem] = p

    user_only: list[Path] = []
    if user_dir is not None:
        for p in sorted(user_dir.glob("*.yaml")):
            if p.stem not in stems:
                user_only.append(p)

    for stem, bundled_path in stems.items():
        raw = _load_yaml_file(bundled_path)
        if not raw:
            continue
        if user_dir is not None:
            user_path = user_dir / f"{stem}.yaml"
            if user_path.exists():
                user_raw = _load_yaml_file(user_path)
                if user_raw:
                    raw = deep_merge(raw, user_raw)
        _add_exercise(result, raw, stem)

    for p in user_only:
        raw = _load_yaml_file(p)
        if raw:
            _add_exercise(result, raw, p.stem)

    return result
