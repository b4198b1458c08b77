"""Tests for the exercise catalog and the YAML config loader."""

import pytest

from gym_progression.core.engine.config_loader import deep_merge, load_model_config
from gym_progression.core.exercises import (
    EXERCISE_REGISTRY,
    default_scheme_for,
    get_exercise,
    is_progression_tracked,
)
from gym_progression.core.exercises.loader import exercise_from_dict
from gym_progression.core.policies import DEFAULT_POLICY_TABLE, build_policy_table


class TestCatalog:
    def test_bundled_exercises_load(self):
        assert {"bench_press", "back_squat", "pull_up"} <= set(EXERCISE_REGISTRY)

    def test_default_scheme(self):
        scheme = default_scheme_for("bench_press")
        assert (scheme.weight, scheme.reps, scheme.metric) == (95.0, 8, "weight")

    def test_bodyweight_exercise_progresses_reps(self):
        scheme = get_exercise("pull_up").default_scheme
        assert scheme.weight is None
        assert scheme.metric == "reps"

    def test_only_strength_exercises_progress(self):
        assert get_exercise("jump_rope").exercise_type == "cardio"
        assert not is_progression_tracked("jump_rope")
        assert is_progression_tracked("bench_press")
        # Custom exercises outside the catalog are treated as strength work
        assert is_progression_tracked("cable_fly")

    def test_unknown_exercise_raises(self):
        with pytest.raises(ValueError, match="Unknown exercise"):
            get_exercise("underwater_basket_weaving")

    def test_from_dict_requires_scheme(self):
        with pytest.raises(ValueError, match="missing fields"):
            exercise_from_dict({"exercise_id": "x", "display_name": "X"})

    def test_from_dict_rejects_bad_metric(self):
        with pytest.raises(ValueError):
            exercise_from_dict(
                {
                    "exercise_id": "x",
                    "display_name": "X",
                    "default_scheme": {"reps": 5, "metric": "tempo"},
                }
            )


class TestConfigLoader:
    def test_deep_merge_keeps_base(self):
        base = {"policies": {"moderate": {"a": 1, "b": 2}}}
        merged = deep_merge(base, {"policies": {"moderate": {"b": 3}}})
        assert merged == {"policies": {"moderate": {"a": 1, "b": 3}}}
        assert base["policies"]["moderate"]["b"] == 2

    def test_bundled_yaml_matches_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        table = build_policy_table(load_model_config())
        assert table == DEFAULT_POLICY_TABLE

    def test_user_override_is_merged(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        user_dir = tmp_path / ".gym-progression"
        user_dir.mkdir()
        (user_dir / "progression.yaml").write_text(
            "policies:\n  conservative:\n    progress_threshold: 4\n"
        )
        table = build_policy_table(load_model_config())
        assert table["conservative"].progress_threshold == 4
        assert table["conservative"].weight_increment_pct == 2.5

    def test_broken_user_file_is_ignored(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        user_dir = tmp_path / ".gym-progression"
        user_dir.mkdir()
        (user_dir / "progression.yaml").write_text("policies: [unclosed\n")
        with pytest.warns(UserWarning):
            config = load_model_config()
        assert config["policies"]["moderate"]["progress_threshold"] == 2
