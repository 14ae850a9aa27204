"""
Personal record detection.

A PR is emitted when an exercise's maximum weight in the current window
beats its maximum in the preceding window AND that previous maximum is
positive. An exercise done for the first time has no baseline, so it is
not a record even though it is technically a new maximum.
"""

import logging
from typing import Iterable

from .aggregation import exercise_extrema, group_by_trainee, max_weight_by_exercise
from .models import (
    ExerciseExtrema,
    PeriodWindow,
    PersonalRecordEvent,
    WorkoutLog,
    as_datetime,
)
from .periods import previous_window

logger = logging.getLogger(__name__)


def _newest_first(events: list[PersonalRecordEvent]) -> list[PersonalRecordEvent]:
    return sorted(events, key=lambda e: (as_datetime(e.date), e.trainee_id, e.exercise_id), reverse=True)


def detect_personal_records(
    logs: Iterable[WorkoutLog],
    trainee_id: str,
    window: PeriodWindow,
    previous: PeriodWindow | None = None,
) -> list[PersonalRecordEvent]:
    """
    PR events for one trainee in ``window``.

    Args:
        logs: Workout logs (other trainees' logs are ignored)
        trainee_id: Trainee to evaluate
        window: Current period
        previous: Baseline period; defaults to previous_window(window)

    Returns:
        Events sorted by date, newest first
    """
    logs = list(logs)
    if previous is None:
        previous = previous_window(window)

    current = exercise_extrema(logs, window, trainee_id)
    baseline = max_weight_by_exercise(logs, previous, trainee_id)

    events: list[PersonalRecordEvent] = []
    for exercise_id, extrema in current.items():
        previous_max = baseline.get(exercise_id, 0.0)
        if previous_max <= 0:
            logger.debug(
                "No baseline for %s/%s, %.1f kg not counted as a record",
                trainee_id, exercise_id, extrema.max_weight,
            )
            continue
        if extrema.max_weight > previous_max:
            events.append(
                PersonalRecordEvent(
                    trainee_id=trainee_id,
                    exercise_id=exercise_id,
                    new_weight=extrema.max_weight,
                    previous_weight=previous_max,
                    date=extrema.best_date,
                )
            )
    return _newest_first(events)


def detect_cohort_records(
    logs: Iterable[WorkoutLog],
    window: PeriodWindow,
    previous: PeriodWindow | None = None,
) -> list[PersonalRecordEvent]:
    """
    PR events for every trainee present in ``logs``.

    Each trainee is evaluated on their own history only; the per-trainee
    lists are concatenated and re-sorted newest first.
    """
    events: list[PersonalRecordEvent] = []
    for trainee_id, trainee_logs in group_by_trainee(logs).items():
        events.extend(detect_personal_records(trainee_logs, trainee_id, window, previous))
    return _newest_first(events)


def previous_best_by_exercise(
    logs: Iterable[WorkoutLog],
    trainee_id: str | None = None,
) -> dict[str, ExerciseExtrema]:
    """All-time best set per exercise, shown as "previous best" while logging."""
    return exercise_extrema(logs, PeriodWindow.unbounded(), trainee_id)


def beats_previous_best(weight: float, reps: int, previous: ExerciseExtrema | None) -> bool:
    """
    True when (weight, reps) tops the previous best set.

    Heavier always wins; at equal weight, more reps wins. Without a
    previous best there is nothing to beat.
    """
    if previous is None or weight <= 0 or reps <= 0:
        return False
    if weight > previous.max_weight:
        return True
    return weight == previous.max_weight and reps > previous.reps_at_max
