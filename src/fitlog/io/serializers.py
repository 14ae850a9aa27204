"""
JSON serialization for fitlog data models.

Handles conversion between dataclasses and JSON-compatible dicts. Input
dicts may use snake_case keys or the camelCase / column names of the
remote data store (``user_id``, ``set_logs``, ``weight_kg`` ...).
"""

import json
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

from ..core.config import BODYWEIGHT_MAX_KG, DRAFT_MAX_AGE_MS
from ..core.drafts import migrate_draft
from ..core.models import (
    BodyWeightEntry,
    ComplianceResult,
    Day,
    ExerciseDraft,
    FoodItem,
    LeaderboardEntry,
    Macros,
    NutritionLogEntry,
    OneRepMaxPoint,
    PersonalRecordEvent,
    SetEntry,
    SwapResult,
    WorkoutLog,
)

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_date(value: Any) -> Day:
    """
    Parse an ISO date or datetime.

    ``YYYY-MM-DD`` becomes a date; anything with a time becomes a naive
    datetime (timezone-aware values are converted to UTC first).

    Args:
        value: ISO string, date or datetime

    Returns:
        date or naive datetime

    Raises:
        ValidationError: If the value is not a valid ISO date
    """
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid date: {value!r}. Expected YYYY-MM-DD")

    text = value.strip()
    try:
        if _DATE_RE.match(text):
            return datetime.strptime(text, "%Y-%m-%d").date()
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value}") from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is a non-negative number.

    Raises:
        ValidationError: If value is negative or not a number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is a positive number.

    Raises:
        ValidationError: If value is not positive
    """
    validate_non_negative(value, name)
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def validate_bodyweight(weight: float) -> float:
    """
    Validate a submitted body weight.

    Raises:
        ValidationError: If weight is not positive or implausibly large
    """
    validate_positive(weight, "weight_kg")
    if weight > BODYWEIGHT_MAX_KG:
        raise ValidationError(
            f"weight_kg {weight} is not plausible (max {BODYWEIGHT_MAX_KG:.0f} kg)"
        )
    return float(weight)


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First key present in ``data``."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require(data: Mapping[str, Any], *keys: str) -> Any:
    value = _pick(data, *keys)
    if value is None:
        raise ValidationError(f"Missing field: {keys[0]}")
    return value


def _iso(value: Day | None) -> str | None:
    return value.isoformat() if value is not None else None


# =============================================================================
# INPUT RECORDS
# =============================================================================


def dict_to_set_entry(data: Mapping[str, Any], exercise_id: str | None = None) -> SetEntry:
    """
    Convert dict to SetEntry.

    Missing weight or reps are read as 0 (a set row that was never filled in).

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"Set entry must be an object, got {type(data).__name__}")
    ex_id = _pick(data, "exercise_id", "exerciseId", default=exercise_id)
    if ex_id is None and isinstance(data.get("exercise"), Mapping):
        ex_id = data["exercise"].get("id")
    if ex_id is None:
        raise ValidationError("Set entry has no exercise_id")

    weight = validate_non_negative(_pick(data, "weight_kg", "weightKg", "weight", default=0), "weight_kg")
    reps = validate_non_negative(_pick(data, "reps", default=0), "reps")
    rir = _pick(data, "rir", "rir_actual")
    if rir is not None:
        validate_non_negative(rir, "rir")
    when = _pick(data, "date")

    return SetEntry(
        exercise_id=str(ex_id),
        weight_kg=float(weight),
        reps=int(reps),
        rir=int(rir) if rir is not None else None,
        date=validate_date(when) if when is not None else None,
    )


def set_entry_to_dict(entry: SetEntry) -> dict[str, Any]:
    """Convert SetEntry to JSON-compatible dict."""
    d: dict[str, Any] = {
        "exercise_id": entry.exercise_id,
        "weight_kg": entry.weight_kg,
        "reps": entry.reps,
    }
    if entry.rir is not None:
        d["rir"] = entry.rir
    if entry.date is not None:
        d["date"] = _iso(entry.date)
    return d


def dict_to_workout_log(data: Mapping[str, Any]) -> WorkoutLog:
    """
    Convert dict to WorkoutLog.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"Workout log must be an object, got {type(data).__name__}")
    start = _pick(data, "start_time", "startTime")
    end = _pick(data, "end_time", "endTime")
    raw_sets = _pick(data, "sets", "set_logs", default=[])
    if not isinstance(raw_sets, list):
        raise ValidationError("sets must be a list")

    return WorkoutLog(
        id=str(_require(data, "id")),
        trainee_id=str(_require(data, "trainee_id", "traineeId", "user_id")),
        date=validate_date(_require(data, "date")),
        routine_id=_pick(data, "routine_id", "routineId"),
        completed=bool(_pick(data, "completed", default=True)),
        start_time=validate_date(start) if start is not None else None,  # type: ignore[arg-type]
        end_time=validate_date(end) if end is not None else None,  # type: ignore[arg-type]
        sets=[dict_to_set_entry(s) for s in raw_sets],
    )


def workout_log_to_dict(log: WorkoutLog) -> dict[str, Any]:
    """Convert WorkoutLog to JSON-compatible dict."""
    d: dict[str, Any] = {
        "id": log.id,
        "trainee_id": log.trainee_id,
        "date": _iso(log.date),
        "completed": log.completed,
        "sets": [set_entry_to_dict(s) for s in log.sets],
    }
    if log.routine_id is not None:
        d["routine_id"] = log.routine_id
    if log.start_time is not None:
        d["start_time"] = _iso(log.start_time)
    if log.end_time is not None:
        d["end_time"] = _iso(log.end_time)
    return d


def dict_to_bodyweight_entry(data: Mapping[str, Any], trainee_id: str | None = None) -> BodyWeightEntry:
    """
    Convert dict to BodyWeightEntry.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"Body-weight entry must be an object, got {type(data).__name__}")
    owner = _pick(data, "trainee_id", "traineeId", "user_id", default=trainee_id)
    if owner is None:
        raise ValidationError("Body-weight entry has no trainee_id")
    weight = validate_bodyweight(_require(data, "weight_kg", "weightKg", "weight"))
    return BodyWeightEntry(
        trainee_id=str(owner),
        date=validate_date(_require(data, "date")),
        weight_kg=weight,
    )


def bodyweight_entry_to_dict(entry: BodyWeightEntry) -> dict[str, Any]:
    """Convert BodyWeightEntry to JSON-compatible dict."""
    return {
        "trainee_id": entry.trainee_id,
        "date": _iso(entry.date),
        "weight_kg": entry.weight_kg,
    }


def dict_to_food_item(data: Mapping[str, Any]) -> FoodItem:
    """
    Convert dict to FoodItem.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"Food item must be an object, got {type(data).__name__}")
    values = {}
    for field_name, keys in (
        ("protein_per_100g", ("protein_per_100g", "proteinPer100g")),
        ("carbs_per_100g", ("carbs_per_100g", "carbsPer100g")),
        ("fat_per_100g", ("fat_per_100g", "fatPer100g")),
    ):
        values[field_name] = float(validate_non_negative(_pick(data, *keys, default=0), field_name))
    category = _require(data, "category")
    if not isinstance(category, str) or not category.strip():
        raise ValidationError(f"Invalid category: {category!r}")

    return FoodItem(
        id=str(_require(data, "id")),
        name=str(_pick(data, "name", default=data.get("id"))),
        category=category,
        **values,
    )


def food_item_to_dict(food: FoodItem) -> dict[str, Any]:
    """Convert FoodItem to JSON-compatible dict."""
    return {
        "id": food.id,
        "name": food.name,
        "category": food.category,
        "protein_per_100g": food.protein_per_100g,
        "carbs_per_100g": food.carbs_per_100g,
        "fat_per_100g": food.fat_per_100g,
    }


def dict_to_nutrition_entry(data: Mapping[str, Any]) -> NutritionLogEntry:
    """
    Convert dict to NutritionLogEntry.

    Totals may be null (day not filled in) but never negative.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"Nutrition entry must be an object, got {type(data).__name__}")
    totals: dict[str, float | None] = {}
    for field_name, keys in (
        ("total_protein", ("total_protein", "totalProtein")),
        ("total_carbs", ("total_carbs", "totalCarbs")),
        ("total_fat", ("total_fat", "totalFat")),
        ("total_calories", ("total_calories", "totalCalories")),
    ):
        value = _pick(data, *keys)
        totals[field_name] = float(validate_non_negative(value, field_name)) if value is not None else None

    return NutritionLogEntry(
        trainee_id=str(_require(data, "trainee_id", "traineeId", "user_id")),
        date=validate_date(_require(data, "date")),
        **totals,
    )


def nutrition_entry_to_dict(entry: NutritionLogEntry) -> dict[str, Any]:
    """Convert NutritionLogEntry to JSON-compatible dict."""
    return {
        "trainee_id": entry.trainee_id,
        "date": _iso(entry.date),
        "total_protein": entry.total_protein,
        "total_carbs": entry.total_carbs,
        "total_fat": entry.total_fat,
        "total_calories": entry.total_calories,
    }


# =============================================================================
# DERIVED RECORDS
# =============================================================================


def macros_to_dict(m: Macros, digits: int = 1) -> dict[str, float]:
    """Macros rounded for display."""
    return {k: round(v, digits) for k, v in m.as_dict().items()}


def pr_event_to_dict(event: PersonalRecordEvent) -> dict[str, Any]:
    return {
        "trainee_id": event.trainee_id,
        "exercise_id": event.exercise_id,
        "new_weight": event.new_weight,
        "previous_weight": event.previous_weight,
        "date": _iso(event.date),
    }


def compliance_to_dict(result: ComplianceResult) -> dict[str, int]:
    return {"completed": result.completed, "target": result.target, "percent": result.percent}


def swap_result_to_dict(result: SwapResult) -> dict[str, Any]:
    """Convert SwapResult to JSON-compatible dict."""
    return {
        "target_amount": round(result.target_amount, 1),
        "source_macros": macros_to_dict(result.source_macros),
        "target_macros": macros_to_dict(result.target_macros),
        "differences": macros_to_dict(result.differences),
        "match_quality": {
            "score": round(result.match_quality.score, 3),
            "tier": result.match_quality.tier,
            "message": result.match_quality.message,
        },
    }


def leaderboard_entry_to_dict(entry: LeaderboardEntry) -> dict[str, Any]:
    return {
        "trainee_id": entry.trainee_id,
        "score": entry.score,
        "compliance": entry.compliance,
        "workout_count": entry.workout_count,
        "pr_count": entry.pr_count,
    }


def one_rm_point_to_dict(point: OneRepMaxPoint) -> dict[str, Any]:
    return {"date": _iso(point.date), "one_rm": round(point.one_rm, 1)}


# =============================================================================
# WORKOUT DRAFTS
# =============================================================================


def exercise_draft_to_dict(draft: ExerciseDraft) -> dict[str, Any]:
    """Persisted per-exercise draft shape."""
    return {
        "weight": draft.weight,
        "reps": draft.reps,
        "rir": draft.rir,
        "isComplete": draft.is_complete,
    }


def drafts_to_json(drafts: Mapping[str, ExerciseDraft]) -> str:
    """
    Serialize a routine's drafts to the cached blob format.

    Returns:
        JSON object keyed by exercise id
    """
    return json.dumps(
        {exercise_id: exercise_draft_to_dict(d) for exercise_id, d in drafts.items()},
        separators=(",", ":"),
        ensure_ascii=False,
    )


def json_to_drafts(
    text: str | None,
    exercise_ids: Iterable[str] = (),
    now_ms: int | None = None,
    max_age_ms: int = DRAFT_MAX_AGE_MS,
) -> dict[str, ExerciseDraft]:
    """
    Parse a cached draft blob, migrating old shapes.

    Never raises: text that is not JSON is treated like any other corrupt
    payload and yields empty drafts.
    """
    payload: Any = None
    if text is not None and text.strip():
        try:
            payload = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            logger.warning("Cached workout draft is not valid JSON (%s); starting empty", e)
            payload = None
    return migrate_draft(payload, exercise_ids, now_ms=now_ms, max_age_ms=max_age_ms)
