"""
JSON serialization for progression data models.

Handles conversion between dataclasses and JSON-compatible dicts, plus the
compact set notation used on the command line.

Stored policy/outcome tags are decoded leniently: an unknown or legacy tag
is replaced by a fixed fallback (policy -> "moderate", outcome -> "stay")
and a warning is logged.  Structural problems (wrong types, non-finite or
negative numbers, conflicting streaks) raise ValidationError.
"""

import json
import logging
import math
import re
from typing import Any

from ..core.config import (
    FALLBACK_OUTCOME,
    FALLBACK_POLICY,
    INITIAL_CONFIDENCE,
    LEGACY_POLICY_TAGS,
    OUTCOME_HISTORY_CAP,
    SCHEMA_VERSION,
)
from ..core.models import (
    PROGRESSION_OUTCOMES,
    PROGRESSION_POLICIES,
    ExerciseProgressionState,
    PrescribedTarget,
    Program,
    ProgressionOutcome,
    ProgressionPolicy,
    SetRecord,
)
from ..core.updater import clamp_confidence

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def _optional_number(data: dict[str, Any], key: str, cast: type) -> Any:
    """Read an optional numeric field, rejecting non-numeric and negative values."""
    raw = data.get(key)
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValidationError(f"{key} must be a number, got {raw!r}")
    if not math.isfinite(raw):
        raise ValidationError(f"{key} must be finite, got {raw!r}")
    validate_non_negative(raw, key)
    return cast(raw)


def _as_mapping(raw: Any, name: str) -> dict:
    """Accept a dict; an empty list is treated as an empty mapping."""
    if raw is None:
        return {}
    if isinstance(raw, list) and not raw:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError(f"{name} must be a mapping, got {type(raw).__name__}")
    return raw


# =============================================================================
# TAG DECODING
# =============================================================================


def parse_policy(raw: Any) -> ProgressionPolicy:
    """
    Decode a stored policy tag.

    Unknown and legacy tags fall back to FALLBACK_POLICY; decoding never fails.
    """
    if raw in PROGRESSION_POLICIES:
        return raw  # type: ignore[return-value]
    if raw in LEGACY_POLICY_TAGS:
        logger.info("legacy policy tag %r read as %r", raw, FALLBACK_POLICY)
    else:
        logger.warning("unknown policy tag %r; using %r", raw, FALLBACK_POLICY)
    return FALLBACK_POLICY  # type: ignore[return-value]


def parse_outcome(raw: Any) -> ProgressionOutcome:
    """
    Decode a stored outcome tag.

    Unknown tags fall back to FALLBACK_OUTCOME; decoding never fails.
    """
    if raw in PROGRESSION_OUTCOMES:
        return raw  # type: ignore[return-value]
    logger.warning("unknown outcome tag %r; using %r", raw, FALLBACK_OUTCOME)
    return FALLBACK_OUTCOME  # type: ignore[return-value]


# =============================================================================
# EXERCISE PROGRESSION STATE
# =============================================================================


def state_to_dict(state: ExerciseProgressionState) -> dict[str, Any]:
    """
    Convert ExerciseProgressionState to a JSON-compatible dict.

    Every field is written, including empty/default values, so that a
    save/load round trip is lossless.
    """
    return {
        "last_prescribed_weight": state.last_prescribed_weight,
        "last_prescribed_reps": state.last_prescribed_reps,
        "success_streak": state.success_streak,
        "fail_streak": state.fail_streak,
        "recent_outcomes": list(state.recent_outcomes),
        "confidence": clamp_confidence(state.confidence),
        "last_updated_at": state.last_updated_at,
    }


def dict_to_state(data: dict[str, Any]) -> ExerciseProgressionState:
    """
    Convert dict to ExerciseProgressionState.

    Confidence is clamped to [0, 1] and the outcome history is trimmed to
    the newest OUTCOME_HISTORY_CAP entries.

    Raises:
        ValidationError: If data is structurally invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"progression state must be a mapping, got {type(data).__name__}")

    success = data.get("success_streak", 0)
    fail = data.get("fail_streak", 0)
    for name, value in (("success_streak", success), ("fail_streak", fail)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer, got {value!r}")
        validate_non_negative(value, name)
    if success > 0 and fail > 0:
        raise ValidationError("success_streak and fail_streak cannot both be non-zero")

    confidence = data.get("confidence", INITIAL_CONFIDENCE)
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise ValidationError(f"confidence must be a number, got {confidence!r}")
    if not math.isfinite(confidence):
        raise ValidationError(f"confidence must be finite, got {confidence!r}")

    raw_outcomes = data.get("recent_outcomes") or []
    if not isinstance(raw_outcomes, list):
        raise ValidationError("recent_outcomes must be a list")
    outcomes = [parse_outcome(o) for o in raw_outcomes][-OUTCOME_HISTORY_CAP:]

    return ExerciseProgressionState(
        last_prescribed_weight=_optional_number(data, "last_prescribed_weight", float),
        last_prescribed_reps=_optional_number(data, "last_prescribed_reps", int),
        success_streak=success,
        fail_streak=fail,
        recent_outcomes=outcomes,
        confidence=clamp_confidence(float(confidence)),
        last_updated_at=str(data.get("last_updated_at") or ""),
    )


# =============================================================================
# PROGRAM
# =============================================================================


def program_to_dict(program: Program) -> dict[str, Any]:
    """
    Convert Program to a JSON-compatible dict.

    The enabled set is written as a sorted list; per-exercise maps keep
    string keys.
    """
    return {
        "schema_version": SCHEMA_VERSION,
        "program_id": program.program_id,
        "name": program.name,
        "progression_enabled": program.progression_enabled,
        "progression_policy": program.progression_policy,
        "progression_enabled_exercises": sorted(program.progression_enabled_exercises),
        "exercise_progression_overrides": dict(program.exercise_progression_overrides),
        "exercise_progression_states": {
            ex_id: state_to_dict(state)
            for ex_id, state in program.exercise_progression_states.items()
        },
        "updated_at": program.updated_at,
    }


def dict_to_program(data: dict[str, Any]) -> Program:
    """
    Convert dict to Program.

    Missing progression fields default to empty values so that records
    written before per-exercise progression existed still load.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("program must be a JSON object")
    if not data.get("program_id"):
        raise ValidationError("program_id is required")

    enabled_raw = data.get("progression_enabled_exercises") or []
    if not isinstance(enabled_raw, list):
        raise ValidationError("progression_enabled_exercises must be a list")

    overrides = {
        str(ex_id): parse_policy(policy)
        for ex_id, policy in _as_mapping(
            data.get("exercise_progression_overrides"), "exercise_progression_overrides"
        ).items()
    }

    states: dict[str, ExerciseProgressionState] = {}
    raw_states = _as_mapping(data.get("exercise_progression_states"), "exercise_progression_states")
    for ex_id, raw_state in raw_states.items():
        try:
            states[str(ex_id)] = dict_to_state(raw_state)
        except ValidationError as e:
            raise ValidationError(f"exercise_progression_states[{ex_id!r}]: {e}") from e

    return Program(
        program_id=str(data["program_id"]),
        name=str(data.get("name") or ""),
        progression_enabled=bool(data.get("progression_enabled", False)),
        progression_policy=parse_policy(data.get("progression_policy", FALLBACK_POLICY)),
        progression_enabled_exercises={str(x) for x in enabled_raw},
        exercise_progression_overrides=overrides,
        exercise_progression_states=states,
        updated_at=str(data.get("updated_at") or ""),
    )


def program_to_json(program: Program) -> str:
    """Serialize a Program to an indented JSON document."""
    return json.dumps(program_to_dict(program), indent=2, sort_keys=True)


def json_to_program(text: str) -> Program:
    """
    Deserialize a JSON document to a Program.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    return dict_to_program(data)


# =============================================================================
# COMMAND-LINE SET NOTATION
# =============================================================================


def _parse_single_set(part: str) -> SetRecord:
    """Parse 'reps@weight' or bare 'reps' into a SetRecord."""
    match_at = re.match(r"^(\d+)\s*@\s*(\d+(?:\.\d+)?)$", part)
    match_bare = re.match(r"^(\d+)$", part)

    if match_at:
        return SetRecord(weight=float(match_at.group(2)), reps=int(match_at.group(1)))
    if match_bare:
        return SetRecord(weight=None, reps=int(match_bare.group(1)))
    raise ValidationError(
        f"Invalid set format: '{part}'.\n"
        "Use: reps@weight (e.g. 8@135), bare reps (e.g. 8),\n"
        "     or compact NxM [@weight] (e.g. 8x3 @135)."
    )


def parse_compact_sets(s: str) -> list[SetRecord] | None:
    """
    Try to parse a compact sets string.

    Format: NxM [@W]   (N reps × M sets, any x/X/× accepted)

    Examples:
        "8x3"        → 3 sets of 8 reps, no load tracked
        "8x3 @135"   → 3 sets of 8 reps at 135

    Returns a list of SetRecord, or None if the format is not recognised.
    """
    m = re.fullmatch(r"\s*(\d+)\s*[xX×]\s*(\d+)\s*(?:@\s*(\d+(?:\.\d+)?))?\s*", s)
    if not m:
        return None
    reps = int(m.group(1))
    n_sets = int(m.group(2))
    if n_sets < 1:
        return None
    weight = float(m.group(3)) if m.group(3) is not None else None
    return [SetRecord(weight=weight, reps=reps) for _ in range(n_sets)]


def parse_sets_string(sets_str: str) -> list[SetRecord]:
    """
    Parse a sets string.

    Compact format (tried first):
        NxM [@W]        e.g. "8x3 @135"  → 3 sets of 8 reps at 135

    Per-set format (comma-separated):
        reps@weight     e.g. "8@135, 8@135, 6@135"
        reps            e.g. "10, 9, 8"   (no load tracked)

    A set prefixed with '-' is recorded as not completed, e.g. "8@135, -8@135".

    Raises:
        ValidationError: If format is invalid
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Sets string cannot be empty")

    compact = parse_compact_sets(sets_str)
    if compact is not None:
        return compact

    sets: list[SetRecord] = []
    for part in (p.strip() for p in sets_str.split(",")):
        if not part:
            continue
        completed = not part.startswith("-")
        record = _parse_single_set(part.lstrip("-").strip())
        record.completed = completed
        sets.append(record)

    if not sets:
        raise ValidationError("No valid sets found in sets string")
    return sets


def parse_target_string(target_str: str) -> PrescribedTarget:
    """
    Parse a target like "8@135" (reps at weight) or "8" (reps only).

    Raises:
        ValidationError: If format is invalid
    """
    record = _parse_single_set(target_str.strip())
    return PrescribedTarget(weight=record.weight, reps=record.reps)
