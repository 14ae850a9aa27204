"""
Log aggregation.

Groups a flat collection of workout logs by exercise, by trainee and by
period. Only completed logs count as work done; incomplete logs exist for
the draft/resume flow and never reach the statistics.
"""

from collections import Counter
from datetime import date
from typing import Iterable, Sequence, TypeVar

from .models import (
    Day,
    ExerciseExtrema,
    PeriodWindow,
    SetEntry,
    TraineeTotals,
    WorkoutLog,
    as_date,
    as_datetime,
)

T = TypeVar("T")


def heaviest_first_key(weight: float, reps: int) -> tuple[float, int]:
    """Sort key for "best set": weight descending, then reps descending."""
    return (-weight, -reps)


def best_set(sets: Sequence[T], weight_reps) -> T | None:
    """
    Pick the heaviest item, breaking weight ties by higher reps.

    Args:
        sets: Candidate items
        weight_reps: Callable returning ``(weight, reps)`` for an item

    Returns:
        The winning item, or None for an empty sequence. The first item
        wins when two are fully tied.
    """
    best: T | None = None
    best_key: tuple[float, int] | None = None
    for item in sets:
        key = heaviest_first_key(*weight_reps(item))
        if best_key is None or key < best_key:
            best, best_key = item, key
    return best


def completed_logs(
    logs: Iterable[WorkoutLog],
    window: PeriodWindow,
    trainee_id: str | None = None,
) -> list[WorkoutLog]:
    """
    Completed logs dated inside the window.

    Args:
        logs: Any workout logs
        window: Period to keep
        trainee_id: Restrict to one trainee when given

    Returns:
        Matching logs in input order
    """
    return [
        log
        for log in logs
        if log.completed
        and window.contains(log.date)
        and (trainee_id is None or log.trainee_id == trainee_id)
    ]


def _logged_sets(logs: Iterable[WorkoutLog]) -> Iterable[tuple[WorkoutLog, SetEntry]]:
    """Sets with both a weight and reps entered."""
    for log in logs:
        for entry in log.sets:
            if entry.weight_kg > 0 and entry.reps > 0:
                yield log, entry


def exercise_extrema(
    logs: Iterable[WorkoutLog],
    window: PeriodWindow,
    trainee_id: str | None = None,
) -> dict[str, ExerciseExtrema]:
    """
    Heaviest and lightest set per exercise inside the window.

    The heaviest set is chosen weight-first, reps as tie-break. Sets with
    zero weight or zero reps were never really logged and are skipped.

    Args:
        logs: Workout logs (incomplete ones are ignored)
        window: Period to aggregate
        trainee_id: Restrict to one trainee when given

    Returns:
        Dict exercise_id -> ExerciseExtrema
    """
    by_exercise: dict[str, list[tuple[WorkoutLog, SetEntry]]] = {}
    for log, entry in _logged_sets(completed_logs(logs, window, trainee_id)):
        by_exercise.setdefault(entry.exercise_id, []).append((log, entry))

    result: dict[str, ExerciseExtrema] = {}
    for exercise_id, pairs in by_exercise.items():
        best_log, best_entry = best_set(pairs, lambda p: (p[1].weight_kg, p[1].reps))  # type: ignore[misc]
        result[exercise_id] = ExerciseExtrema(
            exercise_id=exercise_id,
            max_weight=best_entry.weight_kg,
            reps_at_max=best_entry.reps,
            min_weight=min(e.weight_kg for _, e in pairs),
            best_date=best_log.set_date(best_entry),
            set_count=len(pairs),
        )
    return result


def max_weight_by_exercise(
    logs: Iterable[WorkoutLog],
    window: PeriodWindow,
    trainee_id: str | None = None,
) -> dict[str, float]:
    """Maximum weight per exercise inside the window."""
    return {
        exercise_id: extrema.max_weight
        for exercise_id, extrema in exercise_extrema(logs, window, trainee_id).items()
    }


def group_by_trainee(logs: Iterable[WorkoutLog]) -> dict[str, list[WorkoutLog]]:
    """Split logs per trainee, keeping input order within each group."""
    grouped: dict[str, list[WorkoutLog]] = {}
    for log in logs:
        grouped.setdefault(log.trainee_id, []).append(log)
    return grouped


def trainee_totals(
    logs: Iterable[WorkoutLog],
    window: PeriodWindow,
) -> dict[str, TraineeTotals]:
    """
    Per-trainee work done inside the window.

    workout_count   = completed logs
    exercise_count  = distinct exercises touched
    total_volume    = Σ weight × reps over every set

    Args:
        logs: Workout logs for any number of trainees
        window: Period to aggregate

    Returns:
        Dict trainee_id -> TraineeTotals (only trainees with completed logs)
    """
    result: dict[str, TraineeTotals] = {}
    for trainee_id, trainee_logs in group_by_trainee(completed_logs(logs, window)).items():
        exercises = {s.exercise_id for log in trainee_logs for s in log.sets}
        volume = sum(s.volume for log in trainee_logs for s in log.sets)
        result[trainee_id] = TraineeTotals(
            trainee_id=trainee_id,
            workout_count=len(trainee_logs),
            exercise_count=len(exercises),
            total_volume=volume,
        )
    return result


def workouts_per_day(
    logs: Iterable[WorkoutLog],
    window: PeriodWindow,
    trainee_id: str | None = None,
) -> list[tuple[date, int]]:
    """
    Completed workouts per calendar day, oldest first (trend chart data).
    """
    counts: Counter[date] = Counter(
        as_date(log.date) for log in completed_logs(logs, window, trainee_id)
    )
    return sorted(counts.items())


def latest_workout_date(logs: Iterable[WorkoutLog], trainee_id: str | None = None) -> Day | None:
    """Date of the most recent completed workout, or None."""
    dates = [
        log.date
        for log in logs
        if log.completed and (trainee_id is None or log.trainee_id == trainee_id)
    ]
    if not dates:
        return None
    return max(dates, key=as_datetime)
