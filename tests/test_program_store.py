"""
Tests for the Program aggregate, JSON serialization and the file store.

Covers:
- Enable/disable/override/state setters on Program
- Lossless JSON round trip
- Lenient decoding of unknown/legacy tags and out-of-range values
- ProgramStore init/load/save
- Command-line set notation
"""

import json
import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from gym_progression.core.models import ExerciseProgressionState, Program
from gym_progression.io.program_store import ProgramStore
from gym_progression.io.serializers import (
    ValidationError,
    dict_to_program,
    dict_to_state,
    json_to_program,
    parse_sets_string,
    parse_target_string,
    program_to_dict,
    program_to_json,
    state_to_dict,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _bench_state() -> ExerciseProgressionState:
    return ExerciseProgressionState(
        last_prescribed_weight=135.0,
        last_prescribed_reps=8,
        success_streak=2,
        fail_streak=0,
        recent_outcomes=["progress", "stay"],
        confidence=0.8,
        last_updated_at="2026-10-18T12:00:00+00:00",
    )


def _program() -> Program:
    program = Program(program_id="p1", name="Upper/Lower", progression_enabled=True)
    program.set_progression_enabled(True, "bench", NOW)
    program.set_progression_override("adaptive", "bench", NOW)
    program.set_progression_state(_bench_state(), "bench", NOW)
    return program


def _raw_program(**extra) -> dict:
    data = {"program_id": "p1", "progression_enabled": True, "progression_policy": "moderate"}
    data.update(extra)
    return data


class TestProgramSetters:
    def test_disable_discards_override_and_state(self):
        program = Program(program_id="p1", progression_enabled=True)
        program.set_progression_enabled(True, "bench", NOW)
        program.set_progression_override("moderate", "bench", NOW)
        program.set_progression_state(_bench_state(), "bench", NOW)

        program.set_progression_enabled(False, "bench", NOW)

        assert "bench" not in program.progression_enabled_exercises
        assert "bench" not in program.exercise_progression_overrides
        assert program.progression_state("bench") is None

        # Re-enabling starts from scratch
        program.set_progression_enabled(True, "bench", NOW)
        assert program.progression_state("bench") is None
        assert program.policy_for_exercise("bench") == "moderate"

    def test_set_state_is_idempotent(self):
        program = _program()
        program.set_progression_state(_bench_state(), "bench", NOW)
        once = program_to_dict(program)
        program.set_progression_state(_bench_state(), "bench", NOW)
        assert program_to_dict(program) == once

    def test_setters_stamp_updated_at(self):
        program = Program(program_id="p1")
        program.set_progression_enabled(True, "bench", NOW)
        assert program.updated_at == "2026-10-18T12:00:00+00:00"

    def test_override_on_non_enabled_exercise_is_stored_but_inactive(self):
        program = Program(program_id="p1", progression_enabled=True, progression_policy="conservative")
        program.set_progression_override("adaptive", "squat", NOW)
        assert program.exercise_progression_overrides["squat"] == "adaptive"
        assert program.policy_for_exercise("squat") == "conservative"
        program.set_progression_enabled(True, "squat", NOW)
        assert program.policy_for_exercise("squat") == "adaptive"

    def test_clear_override(self):
        program = _program()
        program.set_progression_override(None, "bench", NOW)
        assert program.policy_for_exercise("bench") == "moderate"

    def test_invalid_override_raises(self):
        with pytest.raises(ValueError):
            Program(program_id="p1").set_progression_override("aggressive", "bench")  # type: ignore[arg-type]

    def test_state_rejects_both_streaks(self):
        with pytest.raises(ValueError):
            ExerciseProgressionState(success_streak=1, fail_streak=1)


class TestSerialization:
    def test_round_trip(self):
        program = _program()
        restored = json_to_program(program_to_json(program))
        assert restored == program
        assert restored.progression_state("bench") == _bench_state()

    def test_default_state_round_trip(self):
        state = ExerciseProgressionState()
        assert dict_to_state(state_to_dict(state)) == state

    def test_enabled_list_is_sorted(self):
        program = Program(program_id="p1")
        for ex in ("squat", "bench", "deadlift"):
            program.set_progression_enabled(True, ex, NOW)
        data = program_to_dict(program)
        assert data["progression_enabled_exercises"] == ["bench", "deadlift", "squat"]

    def test_missing_progression_fields_default(self):
        program = dict_to_program({"program_id": "p1"})
        assert program.progression_enabled is False
        assert program.progression_policy == "moderate"
        assert program.progression_enabled_exercises == set()
        assert program.exercise_progression_states == {}

    def test_empty_list_accepted_for_maps(self):
        program = dict_to_program(
            _raw_program(exercise_progression_overrides=[], exercise_progression_states=[])
        )
        assert program.exercise_progression_overrides == {}

    def test_unknown_policy_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            program = dict_to_program(_raw_program(progression_policy="aggressive"))
        assert program.progression_policy == "moderate"
        assert "aggressive" in caplog.text

    def test_legacy_override_tag_falls_back(self):
        program = dict_to_program(_raw_program(exercise_progression_overrides={"bench": "legacy"}))
        assert program.exercise_progression_overrides == {"bench": "moderate"}

    def test_unknown_outcome_falls_back(self):
        state = dict_to_state({"recent_outcomes": ["progress", "crushed_it"]})
        assert state.recent_outcomes == ["progress", "stay"]

    def test_confidence_is_clamped(self):
        assert dict_to_state({"confidence": 1.7}).confidence == 1.0
        assert dict_to_state({"confidence": -0.2}).confidence == 0.0

    def test_long_history_keeps_newest(self):
        outcomes = ["regress", "regress", "stay", "progress", "progress", "stay", "progress", "progress"]
        state = dict_to_state({"recent_outcomes": outcomes})
        assert state.recent_outcomes == outcomes[-5:]

    def test_conflicting_streaks_rejected(self):
        with pytest.raises(ValidationError, match="cannot both"):
            dict_to_state({"success_streak": 2, "fail_streak": 1})

    def test_non_numeric_weight_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_state({"last_prescribed_weight": "heavy"})

    def test_non_finite_numbers_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            dict_to_state({"confidence": float("nan")})
        with pytest.raises(ValidationError, match="finite"):
            dict_to_state({"last_prescribed_weight": float("inf")})

    def test_nan_in_json_document_rejected(self):
        text = json.dumps(
            _raw_program(exercise_progression_states={"bench": {"confidence": float("nan")}})
        )
        assert "NaN" in text
        with pytest.raises(ValidationError, match="bench"):
            json_to_program(text)

    def test_nested_error_names_exercise(self):
        data = _raw_program(exercise_progression_states={"bench": {"fail_streak": -1}})
        with pytest.raises(ValidationError, match="bench"):
            dict_to_program(data)

    def test_program_id_required(self):
        with pytest.raises(ValidationError):
            dict_to_program({"name": "no id"})

    def test_invalid_json(self):
        with pytest.raises(ValidationError, match="Invalid JSON"):
            json_to_program("{not json")


class TestProgramStore:
    def test_init_creates_file(self, temp_dir):
        store = ProgramStore(temp_dir / "upper_lower.json")
        program = store.init(name="Upper/Lower", policy="conservative", now=NOW)

        assert store.exists()
        assert program.program_id == "upper_lower"
        assert program.progression_policy == "conservative"
        assert program.progression_enabled is True

    def test_init_keeps_existing(self, temp_dir):
        store = ProgramStore(temp_dir / "program.json")
        store.save_program(_program())
        program = store.init(name="ignored")
        assert program.program_id == "p1"
        assert program.progression_state("bench") == _bench_state()

    def test_save_and_load(self, temp_dir):
        store = ProgramStore(temp_dir / "nested" / "program.json")
        store.save_program(_program())
        assert store.load_program() == _program()

    def test_file_is_plain_json(self, temp_dir):
        store = ProgramStore(temp_dir / "program.json")
        store.save_program(_program())
        data = json.loads(store.program_path.read_text())
        assert data["exercise_progression_states"]["bench"]["confidence"] == 0.8
        assert data["schema_version"] == 1

    def test_load_missing_raises(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            ProgramStore(temp_dir / "missing.json").load_program()

    def test_load_corrupt_raises(self, temp_dir):
        path = temp_dir / "program.json"
        path.write_text("{broken")
        with pytest.raises(ValidationError, match="program.json"):
            ProgramStore(path).load_program()


class TestSetNotation:
    def test_per_set(self):
        sets = parse_sets_string("8@135, 8@135, 6@135")
        assert [(s.reps, s.weight) for s in sets] == [(8, 135.0), (8, 135.0), (6, 135.0)]

    def test_compact(self):
        sets = parse_sets_string("8x3 @135")
        assert len(sets) == 3
        assert all(s.reps == 8 and s.weight == 135.0 for s in sets)

    def test_bare_reps(self):
        sets = parse_sets_string("10, 9")
        assert [s.weight for s in sets] == [None, None]

    def test_not_completed_marker(self):
        sets = parse_sets_string("8@135, -8@135")
        assert [s.completed for s in sets] == [True, False]

    def test_invalid(self):
        with pytest.raises(ValidationError):
            parse_sets_string("eight at 135")
        with pytest.raises(ValidationError):
            parse_sets_string("  ")

    def test_target(self):
        target = parse_target_string("8@135")
        assert (target.reps, target.weight) == (8, 135.0)
        assert parse_target_string("12").weight is None
