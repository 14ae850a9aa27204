"""
Workout draft migration.

The workout screen caches the trainee's in-progress entries per routine.
Over time that cache has had several shapes, all keyed by exercise id:

  current   {"weight": "60", "reps": "8", "rir": "1", "isComplete": false}
            (older builds wrote heaviestWeight / heaviestReps / heaviestRir)
  legacy    {"sets": [{"weight": "50", "reps": "10", "rir": "2"}, ...],
             "isComplete": false}
  envelope  {"sets": {exerciseId: [set, ...]}, "routineId": ..,
             "timestamp": <ms>}  (whole-session backup, expires after 24 h)

Each cached entry is classified once into CurrentDraft,
LegacyMultiSetDraft or CorruptDraft, then resolved to a single
ExerciseDraft. Nothing here raises: unreadable data becomes the empty
default so the screen still loads.
"""

import logging
import math
from typing import Any, Iterable, Mapping

from .aggregation import best_set
from .config import DRAFT_DEFAULT_RIR, DRAFT_MAX_AGE_MS
from .models import (
    CorruptDraft,
    CurrentDraft,
    DraftVariant,
    ExerciseDraft,
    LegacyMultiSetDraft,
)

logger = logging.getLogger(__name__)

_CURRENT_FIELDS = {
    "weight": ("weight", "heaviestWeight"),
    "reps": ("reps", "heaviestReps"),
    "rir": ("rir", "heaviestRir"),
}


def empty_draft() -> ExerciseDraft:
    """Fresh entry for an exercise with nothing typed yet."""
    return ExerciseDraft(weight="", reps="", rir=DRAFT_DEFAULT_RIR, is_complete=False)


def _as_text(value: Any) -> str | None:
    """Typed field value as text; None when the value is not text-like."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    return None


def _as_number(text: str) -> float:
    """Lenient numeric read of a typed field; blanks, junk and non-finite values count as 0."""
    try:
        number = float(text)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _first_present(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def classify_draft_entry(raw: Any) -> DraftVariant:
    """
    Decide which cached shape ``raw`` is.

    Args:
        raw: Decoded JSON value stored for one exercise

    Returns:
        CurrentDraft, LegacyMultiSetDraft or CorruptDraft
    """
    if not isinstance(raw, Mapping):
        return CorruptDraft(reason=f"expected an object, got {type(raw).__name__}")

    complete = raw.get("isComplete", False)
    if not isinstance(complete, bool):
        return CorruptDraft(reason="isComplete is not a boolean")

    if "sets" in raw:
        sets = raw["sets"]
        if not isinstance(sets, list):
            return CorruptDraft(reason="sets is not a list")
        parsed: list[tuple[str, str, str]] = []
        for item in sets:
            if not isinstance(item, Mapping):
                continue
            weight = _as_text(item.get("weight"))
            reps = _as_text(item.get("reps"))
            rir = _as_text(item.get("rir"))
            if weight is None or reps is None or rir is None:
                continue
            parsed.append((weight, reps, rir))
        if not parsed:
            return CorruptDraft(reason="no readable sets")
        return LegacyMultiSetDraft(sets=tuple(parsed), is_complete=complete)

    if not any(key in raw for keys in _CURRENT_FIELDS.values() for key in keys) and "isComplete" not in raw:
        return CorruptDraft(reason="unrecognised shape")

    values: dict[str, str] = {}
    for name, keys in _CURRENT_FIELDS.items():
        text = _as_text(_first_present(raw, keys))
        if text is None:
            return CorruptDraft(reason=f"{name} is not text")
        values[name] = text
    return CurrentDraft(
        draft=ExerciseDraft(
            weight=values["weight"],
            reps=values["reps"],
            rir=values["rir"] or DRAFT_DEFAULT_RIR,
            is_complete=complete,
        )
    )


def resolve_draft(variant: DraftVariant) -> ExerciseDraft:
    """
    Collapse a classified entry into the canonical single-set shape.

    Legacy entries keep their heaviest set (weight descending, then reps
    descending) and their completion flag.
    """
    if isinstance(variant, CurrentDraft):
        return variant.draft
    if isinstance(variant, LegacyMultiSetDraft):
        weight, reps, rir = best_set(
            variant.sets, lambda s: (_as_number(s[0]), int(_as_number(s[1])))
        )  # type: ignore[misc]
        return ExerciseDraft(
            weight=weight,
            reps=reps,
            rir=rir or DRAFT_DEFAULT_RIR,
            is_complete=variant.is_complete,
        )
    return empty_draft()


def _unwrap_envelope(
    payload: Mapping[str, Any],
    now_ms: int | None,
    max_age_ms: int,
) -> Mapping[str, Any] | None:
    """
    Turn a whole-session backup into per-exercise legacy entries.

    Returns None when the backup has expired.
    """
    timestamp = payload.get("timestamp")
    if now_ms is not None and isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        if now_ms - timestamp > max_age_ms:
            logger.info("Discarding workout backup older than %d ms", max_age_ms)
            return None
    return {
        exercise_id: {"sets": sets}
        for exercise_id, sets in payload["sets"].items()
    }


def _is_envelope(payload: Mapping[str, Any]) -> bool:
    return isinstance(payload.get("sets"), Mapping) and "timestamp" in payload


def migrate_draft(
    payload: Any,
    exercise_ids: Iterable[str] = (),
    now_ms: int | None = None,
    max_age_ms: int = DRAFT_MAX_AGE_MS,
) -> dict[str, ExerciseDraft]:
    """
    Normalise a cached draft blob for one routine.

    Args:
        payload: Decoded JSON blob (any value; None when nothing is cached)
        exercise_ids: Exercises in the routine. When given, the result has
            exactly these keys and missing ones get the empty default.
            When empty, every readable cached key is returned.
        now_ms: Current time in epoch milliseconds, used to expire
            whole-session backups
        max_age_ms: Backup expiry age

    Returns:
        Dict exercise_id -> ExerciseDraft
    """
    wanted = list(dict.fromkeys(exercise_ids))

    entries: Mapping[str, Any] = {}
    if isinstance(payload, Mapping):
        if _is_envelope(payload):
            entries = _unwrap_envelope(payload, now_ms, max_age_ms) or {}
        else:
            entries = payload
    elif payload is not None:
        logger.warning("Cached workout draft is %s, not an object; starting empty", type(payload).__name__)

    drafts: dict[str, ExerciseDraft] = {}
    for exercise_id, raw in entries.items():
        if wanted and exercise_id not in wanted:
            continue
        variant = classify_draft_entry(raw)
        if isinstance(variant, CorruptDraft):
            logger.warning("Draft for exercise %s is unreadable (%s); resetting", exercise_id, variant.reason)
        elif isinstance(variant, LegacyMultiSetDraft):
            logger.debug("Migrating %d legacy sets for exercise %s", len(variant.sets), exercise_id)
        drafts[str(exercise_id)] = resolve_draft(variant)

    if not wanted:
        return drafts
    return {exercise_id: drafts.get(exercise_id, empty_draft()) for exercise_id in wanted}


def has_logged_data(drafts: Mapping[str, ExerciseDraft]) -> bool:
    """True when at least one exercise has both weight and reps entered."""
    return any(d.weight.strip() and d.reps.strip() for d in drafts.values())
