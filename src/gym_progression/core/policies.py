"""
Policy table: per-policy thresholds, confidence step and increment sizes.

A pure lookup.  The Python defaults live in config.py; rows can be
overridden key-by-key from progression.yaml.  An invalid row is a
programming/configuration error and raises ValueError instead of being
silently repaired.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from .config import (
    CONFIDENCE_FLOOR,
    DEFAULT_MINIMUM_WEIGHT_CHANGE,
    DEFAULT_REP_INCREMENT,
    DEFAULT_ROUNDING_INCREMENT,
    INITIAL_CONFIDENCE,
    POLICY_DEFAULTS,
)
from .engine.config_loader import load_model_config
from .models import PROGRESSION_POLICIES


@dataclass(frozen=True)
class PolicyParams:
    """Parameters for one progression policy."""

    progress_threshold: int  # success_streak needed before an increase
    regress_threshold: int  # fail_streak needed before a deload
    confidence_step: float  # EWMA step toward 1.0 (success) or 0.0 (failure)
    weight_increment_pct: float  # % of current weight added on increase
    weight_decrement_pct: float  # % of current weight removed on deload
    minimum_weight_change: float = DEFAULT_MINIMUM_WEIGHT_CHANGE
    rounding_increment: float = DEFAULT_ROUNDING_INCREMENT
    rep_increment: int = DEFAULT_REP_INCREMENT

    def __post_init__(self) -> None:
        """Validate the row."""
        if self.progress_threshold < 1:
            raise ValueError("progress_threshold must be at least 1")
        if self.regress_threshold < 1:
            raise ValueError("regress_threshold must be at least 1")
        if not 0.0 < self.confidence_step <= 1.0:
            raise ValueError("confidence_step must be within (0, 1]")
        if self.weight_increment_pct < 0 or self.weight_decrement_pct < 0:
            raise ValueError("weight increment/decrement percentages must be non-negative")
        if self.minimum_weight_change < 0:
            raise ValueError("minimum_weight_change must be non-negative")
        if self.rounding_increment <= 0:
            raise ValueError("rounding_increment must be positive")
        if self.rep_increment < 1:
            raise ValueError("rep_increment must be at least 1")


def _default_row(policy: str) -> PolicyParams:
    progress, regress, step, inc_pct, dec_pct = POLICY_DEFAULTS[policy]
    return PolicyParams(
        progress_threshold=progress,
        regress_threshold=regress,
        confidence_step=step,
        weight_increment_pct=inc_pct,
        weight_decrement_pct=dec_pct,
    )


DEFAULT_POLICY_TABLE: dict[str, PolicyParams] = {
    policy: _default_row(policy) for policy in PROGRESSION_POLICIES
}


@dataclass(frozen=True)
class EngineSettings:
    """Policy table plus the confidence knobs that apply to every policy."""

    policy_table: dict[str, PolicyParams] = field(
        default_factory=lambda: dict(DEFAULT_POLICY_TABLE)
    )
    initial_confidence: float = INITIAL_CONFIDENCE
    confidence_floor: float = CONFIDENCE_FLOOR

    def __post_init__(self) -> None:
        missing = set(PROGRESSION_POLICIES) - set(self.policy_table)
        if missing:
            raise ValueError(f"policy table missing rows: {sorted(missing)}")
        if not 0.0 <= self.initial_confidence <= 1.0:
            raise ValueError("initial_confidence must be within [0, 1]")
        if not 0.0 <= self.confidence_floor <= 1.0:
            raise ValueError("confidence_floor must be within [0, 1]")


def policy_params_from_dict(data: dict[str, Any], base: PolicyParams) -> PolicyParams:
    """Overlay the keys present in *data* on *base*."""
    return PolicyParams(
        progress_threshold=int(data.get("progress_threshold", base.progress_threshold)),
        regress_threshold=int(data.get("regress_threshold", base.regress_threshold)),
        confidence_step=float(data.get("confidence_step", base.confidence_step)),
        weight_increment_pct=float(data.get("weight_increment_pct", base.weight_increment_pct)),
        weight_decrement_pct=float(data.get("weight_decrement_pct", base.weight_decrement_pct)),
        minimum_weight_change=float(
            data.get("minimum_weight_change", base.minimum_weight_change)
        ),
        rounding_increment=float(data.get("rounding_increment", base.rounding_increment)),
        rep_increment=int(data.get("rep_increment", base.rep_increment)),
    )


def build_policy_table(config: dict[str, Any]) -> dict[str, PolicyParams]:
    """
    Build the policy table from a config dict (see progression.yaml).

    Unknown policy names in the config are rejected: the set of policies
    is closed.

    Raises:
        ValueError: If a row is invalid or names an unknown policy
    """
    raw_policies = config.get("policies") or {}
    unknown = set(raw_policies) - set(PROGRESSION_POLICIES)
    if unknown:
        raise ValueError(f"Unknown policies in config: {sorted(unknown)}")

    table: dict[str, PolicyParams] = {}
    for policy in PROGRESSION_POLICIES:
        row = raw_policies.get(policy) or {}
        table[policy] = policy_params_from_dict(row, DEFAULT_POLICY_TABLE[policy])
    return table


def build_engine_settings(config: dict[str, Any]) -> EngineSettings:
    """Build EngineSettings from a config dict."""
    confidence = config.get("confidence") or {}
    return EngineSettings(
        policy_table=build_policy_table(config),
        initial_confidence=float(confidence.get("initial", INITIAL_CONFIDENCE)),
        confidence_floor=float(confidence.get("floor", CONFIDENCE_FLOOR)),
    )


@lru_cache(maxsize=1)
def load_engine_settings() -> EngineSettings:
    """Load EngineSettings from the bundled and user YAML files (cached)."""
    return build_engine_settings(load_model_config())


def get_policy_params(
    policy: str,
    table: dict[str, PolicyParams] | None = None,
) -> PolicyParams:
    """
    Return the PolicyParams row for *policy*.

    Args:
        policy: One of "conservative", "moderate", "adaptive"
        table: Policy table to read (default: DEFAULT_POLICY_TABLE)

    Raises:
        ValueError: If policy is not in the table
    """
    table = DEFAULT_POLICY_TABLE if table is None else table
    if policy not in table:
        valid = ", ".join(table)
        raise ValueError(f"Unknown progression policy '{policy}'. Valid policies: {valid}")
    return table[policy]
