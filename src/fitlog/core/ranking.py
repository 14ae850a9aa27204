"""
Leaderboard ranking.

score = compliance × 0.5 + workout_count × 10 + pr_count × 20

A plain linear mix: compliance dominates at low activity, raw workout
count and PRs reward high performers. No normalisation across cohort
size; the board is recomputed from raw logs on every call.
"""

from collections import Counter
from typing import Iterable, Mapping

from .aggregation import group_by_trainee, trainee_totals
from .config import RANK_COMPLIANCE_WEIGHT, RANK_PR_WEIGHT, RANK_WORKOUT_WEIGHT
from .metrics import compute_compliance
from .models import LeaderboardEntry, PeriodWindow, WorkoutLog
from .records import detect_cohort_records


def performance_score(
    compliance: float,
    workout_count: int,
    pr_count: int,
    compliance_weight: float = RANK_COMPLIANCE_WEIGHT,
    workout_weight: float = RANK_WORKOUT_WEIGHT,
    pr_weight: float = RANK_PR_WEIGHT,
) -> float:
    """Weighted leaderboard score."""
    return compliance * compliance_weight + workout_count * workout_weight + pr_count * pr_weight


def rank_cohort(
    logs: Iterable[WorkoutLog],
    window: PeriodWindow,
    targets: Mapping[str, int] | None = None,
    trainee_ids: Iterable[str] | None = None,
    previous: PeriodWindow | None = None,
    weights: tuple[float, float, float] | None = None,
) -> list[LeaderboardEntry]:
    """
    Rank every trainee of a cohort for one period.

    Args:
        logs: Workout logs for the whole cohort
        window: Period being ranked
        targets: Weekly target per trainee (missing → default target)
        trainee_ids: Cohort members; trainees without logs still get a row.
            Defaults to every trainee present in ``logs``.
        previous: Baseline window for PR detection
        weights: Optional (compliance, workout, pr) weights

    Returns:
        Entries sorted by score descending, ties by trainee id
    """
    logs = list(logs)
    targets = targets or {}
    members = list(trainee_ids) if trainee_ids is not None else list(group_by_trainee(logs))
    totals = trainee_totals(logs, window)
    pr_counts = Counter(e.trainee_id for e in detect_cohort_records(logs, window, previous))
    compliance_w, workout_w, pr_w = weights or (
        RANK_COMPLIANCE_WEIGHT,
        RANK_WORKOUT_WEIGHT,
        RANK_PR_WEIGHT,
    )

    board: list[LeaderboardEntry] = []
    for trainee_id in dict.fromkeys(members):
        workouts = totals[trainee_id].workout_count if trainee_id in totals else 0
        compliance = compute_compliance(workouts, targets.get(trainee_id)).percent
        prs = pr_counts.get(trainee_id, 0)
        board.append(
            LeaderboardEntry(
                trainee_id=trainee_id,
                score=performance_score(compliance, workouts, prs, compliance_w, workout_w, pr_w),
                compliance=compliance,
                workout_count=workouts,
                pr_count=prs,
            )
        )
    return sorted(board, key=lambda e: (-e.score, e.trainee_id))
