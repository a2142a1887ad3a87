"""
YAML → typed config loader.

Loads model constants from model.yaml (bundled with the package) and
optionally merges user overrides from ~/.rep-advisor/model.yaml.

Usage:
    from rep_advisor.core.engine.config_loader import load_model_config
    cfg = load_model_config()
    tau_fatigue = cfg.get("fitness_fatigue", {}).get("TAU_FATIGUE", 15.0)

If the bundled YAML cannot be parsed, all lookups return the Python defaults
from config.py (no crash).  If the user override file exists but has parse
errors, a warning is emitted and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    K_FATIGUE,
    K_FITNESS,
    TAU_FATIGUE,
    TAU_FITNESS,
    WEIGHT_FEEDBACK,
    WEIGHT_PRECISION,
    WEIGHT_TREND,
    BanisterParams,
    ScoreWeights,
)

BUNDLED_FILENAME = "model.yaml"
USER_DIRNAME = ".rep-advisor"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file.

    Raises:
        OSError: If the file cannot be read
        yaml.YAMLError: If the file is not valid YAML
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _float_value(section: dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        warnings.warn(
            f"rep-advisor: ignoring non-numeric config value {key}={value!r}",
            stacklevel=3,
        )
        return default
    return float(value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled model.yaml, or None if not found."""
    ref = importlib.resources.files("rep_advisor").joinpath(BUNDLED_FILENAME)
    with importlib.resources.as_file(ref) as p:
        return p if p.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.rep-advisor/model.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / USER_DIRNAME / BUNDLED_FILENAME
    return p if p.exists() else None


def load_model_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge model configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/rep_advisor/model.yaml
    2. User override at ~/.rep-advisor/model.yaml (or user_path)

    Args:
        user_path: Explicit override file (defaults to the one in HOME)

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        try:
            config = _deep_merge(config, _load_yaml_file(bundled))
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"rep-advisor: failed to load bundled config ({exc}); using Python defaults.",
                stacklevel=2,
            )

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None and user.exists():
        try:
            user_cfg = _load_yaml_file(user)
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"rep-advisor: ignoring user config {user} ({exc})",
                stacklevel=2,
            )
        else:
            config = _deep_merge(config, user_cfg)

    return config


def banister_params_from_config(config: dict[str, Any]) -> BanisterParams:
    """
    Fitness-fatigue parameters from the "fitness_fatigue" section.

    Missing keys keep their defaults; invalid values (non-numeric, or
    non-positive time constants) fall back to the defaults with a warning.
    """
    section = config.get("fitness_fatigue") or {}
    if not isinstance(section, dict):
        return BanisterParams()
    try:
        return BanisterParams(
            k1=_float_value(section, "K_FITNESS", K_FITNESS),
            k2=_float_value(section, "K_FATIGUE", K_FATIGUE),
            tau1=_float_value(section, "TAU_FITNESS", TAU_FITNESS),
            tau2=_float_value(section, "TAU_FATIGUE", TAU_FATIGUE),
        )
    except ValueError as exc:
        warnings.warn(f"rep-advisor: invalid fitness_fatigue config ({exc})", stacklevel=2)
        return BanisterParams()


def score_weights_from_config(config: dict[str, Any]) -> ScoreWeights:
    """Composite score weights from the "scoring" section."""
    section = config.get("scoring") or {}
    if not isinstance(section, dict):
        return ScoreWeights()
    try:
        return ScoreWeights(
            precision=_float_value(section, "WEIGHT_PRECISION", WEIGHT_PRECISION),
            feedback=_float_value(section, "WEIGHT_FEEDBACK", WEIGHT_FEEDBACK),
            trend=_float_value(section, "WEIGHT_TREND", WEIGHT_TREND),
        )
    except ValueError as exc:
        warnings.warn(f"rep-advisor: invalid scoring config ({exc})", stacklevel=2)
        return ScoreWeights()
