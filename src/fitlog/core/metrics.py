"""
Pure metric computation functions.

One-rep-max estimation and workout compliance. All functions are pure and
return a defined sentinel (0) instead of raising for bad numeric input.
"""

import math
from typing import Iterable, Mapping

from .aggregation import completed_logs
from .config import BRZYCKI_INTERCEPT, BRZYCKI_SLOPE, DEFAULT_WEEKLY_TARGET
from .models import (
    ComplianceResult,
    ExerciseDraft,
    OneRepMaxPoint,
    PeriodWindow,
    WorkoutLog,
    as_date,
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def one_rep_max(weight, reps) -> float:
    """
    Estimate 1RM using the Brzycki formula.

    1RM = weight / (1.0278 − 0.0278 × reps)

    A single rep is returned as-is. Any input that cannot produce a
    meaningful estimate (non-numeric, non-finite, weight ≤ 0, reps ≤ 0, or
    reps high enough that the denominator reaches zero) yields 0.

    Args:
        weight: Load lifted in kg
        reps: Repetitions performed

    Returns:
        Estimated 1RM in kg, or 0.0 when unknown
    """
    try:
        w = float(weight)
        r = float(reps)
    except (TypeError, ValueError):
        return 0.0
    if not (math.isfinite(w) and math.isfinite(r)) or w <= 0 or r <= 0:
        return 0.0
    if r == 1:
        return w
    denominator = BRZYCKI_INTERCEPT - BRZYCKI_SLOPE * r
    if denominator <= 0:
        return 0.0
    return w / denominator


def one_rep_max_series(
    logs: Iterable[WorkoutLog],
    exercise_ids: Iterable[str],
    window: PeriodWindow,
    trainee_id: str | None = None,
) -> list[OneRepMaxPoint]:
    """
    Strength trend: best estimated 1RM per day for the given exercises.

    Args:
        logs: Workout logs
        exercise_ids: Exercises that make up the lift (e.g. bench variations)
        window: Period to chart
        trainee_id: Restrict to one trainee when given

    Returns:
        One point per day with a logged set, oldest first
    """
    wanted = set(exercise_ids)
    best_by_day: dict = {}
    for log in completed_logs(logs, window, trainee_id):
        for entry in log.sets:
            if entry.exercise_id not in wanted:
                continue
            estimate = one_rep_max(entry.weight_kg, entry.reps)
            if estimate <= 0:
                continue
            day = as_date(log.set_date(entry))
            if estimate > best_by_day.get(day, 0.0):
                best_by_day[day] = estimate
    return [OneRepMaxPoint(date=d, one_rm=v) for d, v in sorted(best_by_day.items())]


def compute_compliance(completed: int, target: int | None = None) -> ComplianceResult:
    """
    Completed-vs-target workouts as a clamped percentage.

    percent = clip(round(completed / target × 100), 0, 100)

    The target is used as given; a weekly target is not rescaled for
    longer periods.

    Args:
        completed: Completed workouts in the period
        target: Target workouts; None means the trainee has no active
            program and DEFAULT_WEEKLY_TARGET applies

    Returns:
        ComplianceResult (percent 0 when target ≤ 0)
    """
    if target is None:
        target = DEFAULT_WEEKLY_TARGET
    completed = max(0, int(completed))
    if target <= 0:
        return ComplianceResult(completed=completed, target=int(target), percent=0)
    percent = round_half_up(completed / target * 100)
    return ComplianceResult(
        completed=completed,
        target=int(target),
        percent=max(0, min(100, percent)),
    )


def period_compliance(
    logs: Iterable[WorkoutLog],
    trainee_id: str,
    window: PeriodWindow,
    target: int | None = None,
) -> ComplianceResult:
    """Compliance for one trainee, counting completed logs in the window."""
    completed = len(completed_logs(logs, window, trainee_id))
    return compute_compliance(completed, target)


def cohort_compliance(
    logs: Iterable[WorkoutLog],
    trainee_ids: Iterable[str],
    window: PeriodWindow,
    targets: Mapping[str, int] | None = None,
) -> dict[str, ComplianceResult]:
    """Compliance per trainee; trainees missing from ``targets`` use the default."""
    logs = list(logs)
    targets = targets or {}
    return {
        trainee_id: period_compliance(logs, trainee_id, window, targets.get(trainee_id))
        for trainee_id in trainee_ids
    }


def session_progress(drafts: Mapping[str, ExerciseDraft], exercise_count: int | None = None) -> int:
    """
    Percent of exercises marked complete in a live workout.

    Args:
        drafts: Current draft per exercise
        exercise_count: Exercises in the routine (defaults to len(drafts))

    Returns:
        Rounded percent, 0 for an empty routine
    """
    total = len(drafts) if exercise_count is None else exercise_count
    if total <= 0:
        return 0
    done = sum(1 for d in drafts.values() if d.is_complete)
    return min(100, round_half_up(done / total * 100))
