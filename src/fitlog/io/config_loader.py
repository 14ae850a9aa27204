"""
YAML → typed analytics settings.

Loads tuning values from analytics.yaml (bundled with the package) and
optionally merges user overrides from ~/.fitlog/analytics.yaml.

Usage:
    from fitlog.io.config_loader import load_settings
    settings = load_settings()
    compute_swap(a, 100, b, settings.category_axes, *settings.match_thresholds)

If the bundled YAML cannot be read, the Python defaults from core/config.py
apply. If the user override file exists but cannot be parsed, a warning is
logged and the file is ignored. Individual values of the wrong type are
dropped with a warning, keeping the default.
"""

from __future__ import annotations

import importlib.resources
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..core.config import (
    BODYWEIGHT_RECENT_ENTRIES,
    CATEGORY_AXES,
    DEFAULT_TARGET_CALORIES,
    DEFAULT_TARGET_CARBS_G,
    DEFAULT_TARGET_FAT_G,
    DEFAULT_TARGET_FLUIDS_ML,
    DEFAULT_TARGET_PROTEIN_G,
    DEFAULT_WEEKLY_TARGET,
    DRAFT_MAX_AGE_MS,
    MACRO_AXES,
    MATCH_EXCELLENT_THRESHOLD,
    MATCH_FAIR_THRESHOLD,
    MATCH_MESSAGES,
    MONDAY,
    RANK_COMPLIANCE_WEIGHT,
    RANK_PR_WEIGHT,
    RANK_WORKOUT_WEIGHT,
    SUNDAY,
)
from ..core.models import NutritionTargets

logger = logging.getLogger(__name__)

_WEEKDAYS = {"sunday": SUNDAY, "monday": MONDAY}
_MS_PER_HOUR = 60 * 60 * 1000


@dataclass(frozen=True)
class AnalyticsSettings:
    """Runtime tuning passed from the CLI into engine calls."""

    week_start: int = SUNDAY
    default_weekly_target: int = DEFAULT_WEEKLY_TARGET
    rank_weights: tuple[float, float, float] = (
        RANK_COMPLIANCE_WEIGHT,
        RANK_WORKOUT_WEIGHT,
        RANK_PR_WEIGHT,
    )
    match_thresholds: tuple[float, float] = (MATCH_EXCELLENT_THRESHOLD, MATCH_FAIR_THRESHOLD)
    match_messages: dict[str, str] = field(default_factory=lambda: dict(MATCH_MESSAGES))
    category_axes: dict[str, str] = field(default_factory=lambda: dict(CATEGORY_AXES))
    default_targets: NutritionTargets = field(
        default_factory=lambda: NutritionTargets(
            fluids_ml=DEFAULT_TARGET_FLUIDS_ML,
            protein=DEFAULT_TARGET_PROTEIN_G,
            carbs=DEFAULT_TARGET_CARBS_G,
            fat=DEFAULT_TARGET_FAT_G,
            calories=DEFAULT_TARGET_CALORIES,
        )
    )
    recent_bodyweight_entries: int = BODYWEIGHT_RECENT_ENTRIES
    draft_max_age_ms: int = DRAFT_MAX_AGE_MS

    def weekly_target(self, targets: dict[str, int], trainee_id: str) -> int:
        """Trainee's own weekly target, else the configured default."""
        return targets.get(trainee_id, self.default_weekly_target)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML mapping.

    Raises:
        OSError: If the file cannot be read
        yaml.YAMLError: If the file is not valid YAML
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise yaml.YAMLError(f"top level of {path} is not a mapping")
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _section(cfg: dict[str, Any], name: str) -> dict[str, Any]:
    value = cfg.get(name, {})
    if not isinstance(value, dict):
        logger.warning("Settings section %r is not a mapping; using defaults", name)
        return {}
    return value


def _number(section: dict[str, Any], key: str, default: float, minimum: float = 0.0) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < minimum:
        logger.warning("Ignoring invalid setting %s=%r", key, value)
        return default
    return float(value)


def _integer(section: dict[str, Any], key: str, default: int, minimum: int = 1) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        logger.warning("Ignoring invalid setting %s=%r", key, value)
        return default
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled analytics.yaml, or None if not found."""
    ref = importlib.resources.files("fitlog").joinpath("analytics.yaml")
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent / "analytics.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.fitlog/analytics.yaml if it exists, else None."""
    p = Path.home() / ".fitlog" / "analytics.yaml"
    return p if p.exists() else None


def load_raw_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/fitlog/analytics.yaml
    2. User override (``user_path`` or ~/.fitlog/analytics.yaml)

    Returns:
        Merged dict of config sections. Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        try:
            config = _deep_merge(config, _load_yaml_file(bundled))
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Bundled settings %s unreadable (%s); using built-in defaults", bundled, e)

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None:
        try:
            config = _deep_merge(config, _load_yaml_file(user))
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring settings file %s: %s", user, e)

    return config


def settings_from_dict(cfg: dict[str, Any]) -> AnalyticsSettings:
    """
    Build AnalyticsSettings from a merged config dict.

    Unknown keys are ignored; invalid values fall back to defaults.
    """
    defaults = AnalyticsSettings()

    periods = _section(cfg, "periods")
    week_start = defaults.week_start
    if "week_start" in periods:
        name = str(periods["week_start"]).strip().lower()
        if name in _WEEKDAYS:
            week_start = _WEEKDAYS[name]
        else:
            logger.warning("Unknown week_start %r; expected sunday or monday", periods["week_start"])

    compliance = _section(cfg, "compliance")
    ranking = _section(cfg, "ranking")

    nutrition = _section(cfg, "nutrition")
    thresholds = nutrition.get("match_thresholds", {})
    if not isinstance(thresholds, dict):
        thresholds = {}
    excellent = _number(thresholds, "excellent", defaults.match_thresholds[0])
    fair = _number(thresholds, "fair", defaults.match_thresholds[1])
    if fair > excellent:
        logger.warning("fair threshold %.2f above excellent %.2f; using defaults", fair, excellent)
        excellent, fair = defaults.match_thresholds

    messages = dict(defaults.match_messages)
    raw_messages = nutrition.get("match_messages", {})
    if isinstance(raw_messages, dict):
        messages.update({str(k): str(v) for k, v in raw_messages.items()})

    axes: dict[str, str] = {}
    raw_axes = nutrition.get("category_axes")
    if isinstance(raw_axes, dict):
        for category, axis in raw_axes.items():
            if axis in MACRO_AXES:
                axes[str(category).strip().lower()] = axis
            else:
                logger.warning("Category %r maps to unknown macro %r; skipped", category, axis)
    else:
        axes = dict(defaults.category_axes)

    raw_targets = nutrition.get("default_targets", {})
    if not isinstance(raw_targets, dict):
        raw_targets = {}
    base = defaults.default_targets
    targets = NutritionTargets(
        fluids_ml=_integer(raw_targets, "fluids_ml", base.fluids_ml, minimum=0),
        protein=_number(raw_targets, "protein", base.protein),
        carbs=_number(raw_targets, "carbs", base.carbs),
        fat=_number(raw_targets, "fat", base.fat),
        calories=_number(raw_targets, "calories", base.calories),
    )

    bodyweight = _section(cfg, "bodyweight")
    drafts = _section(cfg, "drafts")
    max_age_hours = _number(drafts, "max_age_hours", defaults.draft_max_age_ms / _MS_PER_HOUR)

    return AnalyticsSettings(
        week_start=week_start,
        default_weekly_target=_integer(
            compliance, "default_weekly_target", defaults.default_weekly_target
        ),
        rank_weights=(
            _number(ranking, "compliance_weight", defaults.rank_weights[0]),
            _number(ranking, "workout_weight", defaults.rank_weights[1]),
            _number(ranking, "pr_weight", defaults.rank_weights[2]),
        ),
        match_thresholds=(excellent, fair),
        match_messages=messages,
        category_axes=axes,
        default_targets=targets,
        recent_bodyweight_entries=_integer(
            bodyweight, "recent_entries", defaults.recent_bodyweight_entries
        ),
        draft_max_age_ms=int(max_age_hours * _MS_PER_HOUR),
    )


def load_settings(user_path: Path | None = None) -> AnalyticsSettings:
    """Load bundled + user YAML and return typed settings."""
    return settings_from_dict(load_raw_config(user_path))
