"""
YAML → config dict loader.

Loads engine tunables from progression.yaml (bundled with the package) and
optionally merges user overrides from ~/.gym-progression/progression.yaml.

Usage:
    from gym_progression.core.engine.config_loader import load_model_config
    cfg = load_model_config()
    floor = cfg.get("confidence", {}).get("floor", 0.5)

If the bundled YAML cannot be parsed, all lookups fall back to the Python
defaults from config.py.  If the user override file exists but has parse
errors, a warning is emitted and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import DEFAULT_DATA_DIR_NAME

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; return {} when it is unreadable or not a mapping."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"gym-progression: ignoring {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_user_data_dir() -> Path:
    """Return ~/.gym-progression (not necessarily existing)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / DEFAULT_DATA_DIR_NAME


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled progression.yaml, or None if not found."""
    ref = importlib.resources.files("gym_progression").joinpath("progression.yaml")
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / "progression.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.gym-progression/progression.yaml if it exists, else None."""
    p = get_user_data_dir() / "progression.yaml"
    return p if p.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Load and merge engine configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/gym_progression/progression.yaml
    2. User override at ~/.gym-progression/progression.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            config = deep_merge(config, user_cfg)

    return config
