"""
Configuration constants for the progression engine.

All adjustable parameters are centralized here for easy tuning.
Policy rows can additionally be overridden from progression.yaml
(see core/engine/config_loader.py).
"""

from typing import Final

# =============================================================================
# OUTCOME HISTORY
# =============================================================================

OUTCOME_HISTORY_CAP: Final[int] = 5  # Max outcomes kept per exercise (oldest dropped)

# =============================================================================
# CONFIDENCE
# =============================================================================

INITIAL_CONFIDENCE: Final[float] = 0.5  # Confidence of a freshly created state
CONFIDENCE_FLOOR: Final[float] = 0.5  # Minimum confidence before an increase is issued
CONFIDENCE_MIN: Final[float] = 0.0
CONFIDENCE_MAX: Final[float] = 1.0

# =============================================================================
# LOAD ROUNDING (pounds: 5 lb steps, 5 lb minimum jump)
# =============================================================================

DEFAULT_ROUNDING_INCREMENT: Final[float] = 5.0
DEFAULT_MINIMUM_WEIGHT_CHANGE: Final[float] = 5.0
DEFAULT_REP_INCREMENT: Final[int] = 1
MIN_PRESCRIBED_REPS: Final[int] = 1

# =============================================================================
# POLICY TABLE DEFAULTS
# =============================================================================

# policy -> (progress_threshold, regress_threshold, confidence_step,
#            weight_increment_pct, weight_decrement_pct)
POLICY_DEFAULTS: Final[dict[str, tuple[int, int, float, float, float]]] = {
    "conservative": (3, 2, 0.10, 2.5, 5.0),
    "moderate": (2, 2, 0.20, 5.0, 7.5),
    "adaptive": (1, 1, 0.30, 7.5, 10.0),
}

# =============================================================================
# DECODING FALLBACKS
# =============================================================================

FALLBACK_POLICY: Final[str] = "moderate"  # Unknown / legacy stored policy tags
FALLBACK_OUTCOME: Final[str] = "stay"  # Unknown stored outcome tags
LEGACY_POLICY_TAGS: Final[frozenset[str]] = frozenset({"legacy"})

# =============================================================================
# STORAGE
# =============================================================================

SCHEMA_VERSION: Final[int] = 1
DEFAULT_DATA_DIR_NAME: Final[str] = ".gym-progression"
