"""
Formula-focused unit tests for the analytics engine.

Values are hand-computed from the formulas in the module docstrings so the
tests double as worked examples. The reference moment is Friday
2024-03-15 12:00 throughout.
"""

import logging
from datetime import date, datetime, timedelta

import pytest

from fitlog.core.aggregation import (
    best_set,
    completed_logs,
    exercise_extrema,
    latest_workout_date,
    trainee_totals,
    workouts_per_day,
)
from fitlog.core.bodyweight import bodyweight_summary, weight_trend
from fitlog.core.config import DEFAULT_WEEKLY_TARGET, DRAFT_MAX_AGE_MS, MONDAY
from fitlog.core.drafts import classify_draft_entry, empty_draft, has_logged_data, migrate_draft
from fitlog.core.metrics import (
    cohort_compliance,
    compute_compliance,
    one_rep_max,
    one_rep_max_series,
    round_half_up,
    session_progress,
)
from fitlog.core.models import (
    BodyWeightEntry,
    ComplianceResult,
    CorruptDraft,
    CurrentDraft,
    ExerciseDraft,
    FoodItem,
    LegacyMultiSetDraft,
    Macros,
    NutritionLogEntry,
    PeriodWindow,
    PersonalRecordEvent,
    SetEntry,
    WorkoutLog,
)
from fitlog.core.nutrition import (
    CategoryMismatchError,
    accumulate_nutrition,
    compute_swap,
    daily_progress,
    default_targets,
    defining_axis,
    macros,
    match_quality,
    nutrition_stats,
    nutrition_trend,
    swap_amount,
    swap_candidates,
)
from fitlog.core.periods import previous_window, resolve_window, shift_months, week_start
from fitlog.core.ranking import performance_score, rank_cohort
from fitlog.core.records import (
    beats_previous_best,
    detect_cohort_records,
    detect_personal_records,
    previous_best_by_exercise,
)

NOW = datetime(2024, 3, 15, 12, 0)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _s(exercise: str, weight: float, reps: int, rir: int | None = None) -> SetEntry:
    return SetEntry(exercise_id=exercise, weight_kg=weight, reps=reps, rir=rir)


def _log(
    trainee: str,
    day: date | datetime,
    sets: list[SetEntry] | None = None,
    *,
    completed: bool = True,
    log_id: str | None = None,
) -> WorkoutLog:
    return WorkoutLog(
        id=log_id or f"{trainee}-{day.isoformat()}",
        trainee_id=trainee,
        date=day,
        completed=completed,
        sets=sets or [],
    )


def _food(
    food_id: str,
    category: str,
    protein: float,
    carbs: float,
    fat: float,
) -> FoodItem:
    return FoodItem(
        id=food_id,
        name=food_id.title(),
        category=category,
        protein_per_100g=protein,
        carbs_per_100g=carbs,
        fat_per_100g=fat,
    )


CHICKEN = _food("chicken", "protein", 31.0, 0.0, 3.6)
TURKEY = _food("turkey", "protein", 29.0, 0.0, 1.0)
RICE = _food("rice", "carbs", 2.7, 28.0, 0.3)


# =============================================================================
# PERIOD WINDOWS
# =============================================================================


class TestPeriodWindows:
    def test_today_starts_at_midnight(self):
        w = resolve_window("today", NOW)
        assert w.start == datetime(2024, 3, 15)
        assert w.end == NOW

    def test_week_starts_sunday_by_default(self):
        # 2024-03-15 is a Friday; the preceding Sunday is the 10th
        assert resolve_window("week", NOW).start == datetime(2024, 3, 10)

    def test_week_start_configurable(self):
        assert resolve_window("week", NOW, MONDAY).start == datetime(2024, 3, 11)

    def test_week_start_on_the_start_day_itself(self):
        sunday = datetime(2024, 3, 10, 9, 30)
        assert week_start(sunday) == datetime(2024, 3, 10)

    def test_month(self):
        assert resolve_window("month", NOW).start == datetime(2024, 3, 1)

    @pytest.mark.parametrize(
        "period, start",
        [
            ("3months", datetime(2023, 12, 15, 12, 0)),
            ("6months", datetime(2023, 9, 15, 12, 0)),
            ("year", datetime(2023, 3, 15, 12, 0)),
        ],
    )
    def test_calendar_month_offsets(self, period, start):
        w = resolve_window(period, NOW)
        assert w.start == start
        assert w.end == NOW

    def test_all_is_unbounded(self):
        w = resolve_window("all", NOW)
        assert w.start is None and w.end is None
        assert w.contains(date(1990, 1, 1))

    def test_unknown_filter_raises(self):
        with pytest.raises(ValueError):
            resolve_window("fortnight", NOW)

    def test_shift_months_clamps_day(self):
        assert shift_months(datetime(2024, 3, 31), -1) == datetime(2024, 2, 29)
        assert shift_months(datetime(2023, 3, 31), -1) == datetime(2023, 2, 28)

    def test_window_is_half_open(self):
        w = resolve_window("month", NOW)
        assert w.contains(w.start)
        assert w.contains(date(2024, 3, 1))
        assert not w.contains(w.end)
        assert not w.contains(date(2024, 2, 29))

    def test_previous_week_window(self):
        week = resolve_window("week", NOW)
        prev = previous_window(week)
        assert prev.duration == week.duration
        assert prev.end == week.start

    def test_previous_window_is_pure(self):
        week = resolve_window("week", NOW)
        assert previous_window(week) == previous_window(week)

    def test_previous_of_unbounded_is_empty(self):
        prev = previous_window(PeriodWindow.unbounded())
        assert prev.empty
        assert not prev.contains(date(2024, 1, 1))
        assert previous_window(prev).empty


# =============================================================================
# LOG AGGREGATION
# =============================================================================


class TestAggregation:
    def test_incomplete_logs_ignored(self):
        logs = [
            _log("a", date(2024, 3, 5), [_s("bench", 80, 5)]),
            _log("a", date(2024, 3, 6), [_s("bench", 120, 5)], completed=False),
        ]
        window = resolve_window("month", NOW)
        assert len(completed_logs(logs, window)) == 1
        assert exercise_extrema(logs, window)["bench"].max_weight == 80

    def test_extrema_tie_broken_by_reps(self):
        logs = [
            _log("a", date(2024, 3, 5), [_s("bench", 80, 5), _s("bench", 80, 7), _s("bench", 60, 12)]),
        ]
        e = exercise_extrema(logs, resolve_window("month", NOW))["bench"]
        assert e.max_weight == 80
        assert e.reps_at_max == 7
        assert e.min_weight == 60
        assert e.set_count == 3

    def test_extrema_skip_empty_sets(self):
        logs = [_log("a", date(2024, 3, 5), [_s("bench", 0, 10), _s("bench", 40, 0), _s("bench", 50, 5)])]
        e = exercise_extrema(logs, resolve_window("month", NOW))["bench"]
        assert e.min_weight == 50
        assert e.set_count == 1

    def test_trainee_totals(self):
        logs = [
            _log("a", date(2024, 3, 5), [_s("bench", 80, 5), _s("squat", 100, 5)]),
            _log("a", date(2024, 3, 7), [_s("bench", 82.5, 4)]),
            _log("b", date(2024, 3, 7), [_s("row", 60, 10)]),
            _log("b", date(2024, 2, 7), [_s("row", 60, 10)]),
        ]
        totals = trainee_totals(logs, resolve_window("month", NOW))
        # a: 80×5 + 100×5 + 82.5×4 = 400 + 500 + 330
        assert totals["a"].workout_count == 2
        assert totals["a"].exercise_count == 2
        assert totals["a"].total_volume == pytest.approx(1230.0)
        assert totals["b"].workout_count == 1

    def test_workouts_per_day(self):
        logs = [
            _log("a", datetime(2024, 3, 5, 7, 0), log_id="1"),
            _log("a", datetime(2024, 3, 5, 18, 0), log_id="2"),
            _log("a", date(2024, 3, 8), log_id="3"),
        ]
        assert workouts_per_day(logs, resolve_window("month", NOW)) == [
            (date(2024, 3, 5), 2),
            (date(2024, 3, 8), 1),
        ]

    def test_latest_workout_date_mixes_dates_and_datetimes(self):
        logs = [
            _log("a", date(2024, 3, 5)),
            _log("a", datetime(2024, 3, 5, 18, 0), log_id="x"),
            _log("b", date(2024, 3, 9)),
        ]
        assert latest_workout_date(logs, "a") == datetime(2024, 3, 5, 18, 0)
        assert latest_workout_date(logs) == date(2024, 3, 9)
        assert latest_workout_date([], "a") is None

    def test_best_set_first_wins_full_tie(self):
        items = [("x", 60, 5), ("y", 60, 5)]
        assert best_set(items, lambda i: (i[1], i[2]))[0] == "x"
        assert best_set([], lambda i: (0, 0)) is None


# =============================================================================
# ONE-REP MAX
# =============================================================================


class TestOneRepMax:
    @pytest.mark.parametrize("weight", [20.0, 62.5, 140.0])
    def test_single_rep_is_identity(self, weight):
        assert one_rep_max(weight, 1) == weight

    @pytest.mark.parametrize("weight, reps", [(0, 5), (-10, 5), (100, 0), (100, -3)])
    def test_non_positive_inputs_give_zero(self, weight, reps):
        assert one_rep_max(weight, reps) == 0.0

    def test_brzycki_reference(self):
        # 100 / (1.0278 − 0.139) = 100 / 0.8888
        assert one_rep_max(100, 5) == pytest.approx(112.51, abs=0.01)

    def test_garbage_inputs_give_zero(self):
        assert one_rep_max("heavy", 5) == 0.0
        assert one_rep_max(None, 5) == 0.0
        assert one_rep_max(float("nan"), 5) == 0.0

    def test_denominator_exhausted(self):
        # 1.0278 − 0.0278 × 37 < 0
        assert one_rep_max(50, 37) == 0.0

    def test_series_best_per_day(self):
        logs = [
            _log("a", date(2024, 3, 5), [_s("bench", 100, 5), _s("bench", 105, 3)]),
            _log("a", date(2024, 3, 8), [_s("incline", 80, 1), _s("curl", 30, 10)]),
        ]
        series = one_rep_max_series(logs, ["bench", "incline"], resolve_window("month", NOW), "a")
        assert [p.date for p in series] == [date(2024, 3, 5), date(2024, 3, 8)]
        # 100×5 → 112.51 beats 105×3 → 105 / 0.9444 = 111.18
        assert series[0].one_rm == pytest.approx(112.51, abs=0.01)
        assert series[1].one_rm == 80


# =============================================================================
# PERSONAL RECORDS
# =============================================================================


class TestPersonalRecords:
    def _logs(self, previous_kg: float | None) -> list[WorkoutLog]:
        logs = [_log("a", date(2024, 3, 5), [_s("bench", 85, 3)])]
        if previous_kg is not None:
            logs.append(_log("a", date(2024, 2, 20), [_s("bench", previous_kg, 5)]))
        return logs

    def test_new_max_over_baseline(self):
        events = detect_personal_records(self._logs(80), "a", resolve_window("month", NOW))
        assert len(events) == 1
        assert events[0].previous_weight == 80
        assert events[0].new_weight == 85
        assert events[0].improvement_kg == 5
        assert events[0].date == date(2024, 3, 5)

    def test_no_baseline_no_event(self):
        assert detect_personal_records(self._logs(None), "a", resolve_window("month", NOW)) == []

    def test_equal_weight_is_not_a_record(self):
        assert detect_personal_records(self._logs(85), "a", resolve_window("month", NOW)) == []

    def test_baseline_outside_previous_window_ignored(self):
        # Month window [03-01, 03-15 12:00) → previous [02-15 12:00, 03-01)
        logs = self._logs(None) + [_log("a", date(2024, 2, 10), [_s("bench", 80, 5)])]
        assert detect_personal_records(logs, "a", resolve_window("month", NOW)) == []

    def test_all_period_never_has_records(self):
        assert detect_personal_records(self._logs(80), "a", resolve_window("all", NOW)) == []

    def test_cohort_records_are_per_trainee(self):
        logs = self._logs(80) + [
            _log("b", date(2024, 2, 20), [_s("bench", 100, 5)]),
            _log("b", date(2024, 3, 9), [_s("bench", 90, 5), _s("squat", 120, 5)]),
        ]
        events = detect_cohort_records(logs, resolve_window("month", NOW))
        assert [(e.trainee_id, e.exercise_id) for e in events] == [("a", "bench")]

    def test_event_requires_positive_baseline(self):
        with pytest.raises(ValueError):
            PersonalRecordEvent("a", "bench", new_weight=85, previous_weight=0, date=date(2024, 3, 5))

    def test_previous_best_by_exercise(self):
        best = previous_best_by_exercise(self._logs(80), "a")
        assert best["bench"].max_weight == 85
        assert best["bench"].reps_at_max == 3

    @pytest.mark.parametrize(
        "weight, reps, expected",
        [(100, 6, True), (100, 5, False), (102.5, 1, True), (95, 10, False), (0, 10, False)],
    )
    def test_beats_previous_best(self, weight, reps, expected):
        previous = previous_best_by_exercise([_log("a", date(2024, 3, 1), [_s("bench", 100, 5)])])["bench"]
        assert beats_previous_best(weight, reps, previous) is expected

    def test_nothing_to_beat(self):
        assert beats_previous_best(100, 5, None) is False


# =============================================================================
# COMPLIANCE
# =============================================================================


class TestCompliance:
    def test_clamped_at_100(self):
        assert compute_compliance(6, 5) == ComplianceResult(completed=6, target=5, percent=100)

    def test_default_target(self):
        result = compute_compliance(2)
        assert result.target == DEFAULT_WEEKLY_TARGET
        assert result.percent == 40

    def test_half_rounds_up(self):
        # 1 / 8 = 12.5 %
        assert compute_compliance(1, 8).percent == 13
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_zero_target(self):
        assert compute_compliance(3, 0).percent == 0

    def test_empty_logs(self):
        results = cohort_compliance([], ["a"], resolve_window("week", NOW))
        assert results["a"].completed == 0
        assert results["a"].percent == 0

    def test_cohort_uses_own_targets(self):
        logs = [_log("a", date(2024, 3, 11), log_id="1"), _log("a", date(2024, 3, 12), log_id="2")]
        results = cohort_compliance(logs, ["a", "b"], resolve_window("week", NOW), {"a": 4})
        assert results["a"].percent == 50
        assert results["b"].target == DEFAULT_WEEKLY_TARGET

    def test_session_progress(self):
        drafts = {
            "bench": ExerciseDraft("60", "8", "1", True),
            "row": ExerciseDraft("50", "10", "1", True),
            "curl": ExerciseDraft(),
        }
        assert session_progress(drafts) == 67
        assert session_progress(drafts, exercise_count=4) == 50
        assert session_progress({}) == 0


# =============================================================================
# NUTRITION
# =============================================================================


class TestNutritionEquivalence:
    def test_macros_and_calories(self):
        m = macros(CHICKEN, 150)
        assert m.protein == pytest.approx(46.5)
        assert m.fat == pytest.approx(5.4)
        # 46.5 × 4 + 5.4 × 9
        assert m.calories == pytest.approx(234.6)

    def test_swap_keeps_defining_macro(self):
        result = compute_swap(CHICKEN, 150, TURKEY)
        # 150 × 31 / 29
        assert result.target_amount == pytest.approx(160.345, abs=0.001)
        assert result.target_macros.protein == pytest.approx(result.source_macros.protein)
        assert result.differences.fat == pytest.approx(1.6034 - 5.4, abs=0.001)

    def test_swap_quality_tier(self):
        # fat diff 3.797/5.4 = 0.703, kcal diff 34.17/234.6 = 0.146
        # score = 1 − (0 + 0 + 0.703 + 0.146) / 4 ≈ 0.788
        q = compute_swap(CHICKEN, 150, TURKEY).match_quality
        assert q.score == pytest.approx(0.788, abs=0.001)
        assert q.tier == "fair"

    def test_round_trip_amount(self):
        there = compute_swap(CHICKEN, 150, TURKEY).target_amount
        back = compute_swap(TURKEY, there, CHICKEN).target_amount
        assert back == pytest.approx(150, abs=1e-9)

    def test_identical_profile_is_excellent(self):
        twin = _food("chicken-breast", "protein", 31.0, 0.0, 3.6)
        result = compute_swap(CHICKEN, 120, twin)
        assert result.target_amount == pytest.approx(120)
        assert result.match_quality.score == pytest.approx(1.0)
        assert result.match_quality.tier == "excellent"

    def test_category_mismatch_raises(self):
        with pytest.raises(CategoryMismatchError):
            compute_swap(CHICKEN, 100, RICE)

    def test_zero_amount_is_no_swap(self):
        result = compute_swap(CHICKEN, 0, TURKEY)
        assert result.target_amount == 0
        assert result.match_quality.tier == "none"

    def test_target_without_defining_macro(self):
        empty = _food("broth", "protein", 0.0, 1.0, 0.5)
        assert swap_amount(CHICKEN, 100, empty) == 0.0
        assert compute_swap(CHICKEN, 100, empty).match_quality.tier == "none"

    def test_unknown_category_uses_dominant_macro(self):
        # kcal: protein 40, carbs 200, fat 180
        snack = _food("bar", "snack", 10.0, 50.0, 20.0)
        assert defining_axis(snack) == "carbs"
        assert defining_axis(CHICKEN) == "protein"
        assert defining_axis(snack, {"snack": "fat"}) == "fat"

    def test_quality_thresholds(self):
        a = Macros(10, 10, 10, 170)
        b = Macros(10, 10, 10, 170)
        assert match_quality(a, b).tier == "excellent"
        assert match_quality(a, Macros()).tier == "poor"
        assert match_quality(a, Macros()).score == 0.0

    def test_swap_candidates(self):
        assert swap_candidates(CHICKEN, [CHICKEN, TURKEY, RICE]) == [TURKEY]


class TestNutritionStats:
    def _entries(self) -> list[NutritionLogEntry]:
        return [
            NutritionLogEntry("a", date(2024, 3, 11), 160.0, 250.0, 80.0, 2400.0),
            NutritionLogEntry("a", date(2024, 3, 12), 160.0, 250.0, 80.0, 2400.0),
            NutritionLogEntry("a", date(2024, 3, 13), None, 100.0, 10.0, 500.0),
            NutritionLogEntry("a", date(2024, 2, 1), 300.0, 300.0, 300.0, 5000.0),
        ]

    def test_averages_skip_incomplete_days(self):
        stats = nutrition_stats(self._entries(), resolve_window("week", NOW), 3000, 200)
        assert stats.average_calories == pytest.approx(2400)
        assert stats.average_protein == pytest.approx(160)
        assert stats.average_fat == pytest.approx(80)

    def test_compliance(self):
        # kcal and protein both off by 20 %
        stats = nutrition_stats(self._entries(), resolve_window("week", NOW), 3000, 200)
        assert stats.compliance == 80

    def test_no_days(self):
        stats = nutrition_stats([], resolve_window("week", NOW), 3000, 200)
        assert stats.average_calories is None
        assert stats.compliance == 0

    def test_missing_targets(self):
        assert nutrition_stats(self._entries(), resolve_window("week", NOW), 0, 200).compliance == 0

    def test_accumulate_from_missing_totals(self):
        entry = NutritionLogEntry("a", date(2024, 3, 15), None, None, None, None)
        updated = accumulate_nutrition(entry, macros(CHICKEN, 100))
        updated = accumulate_nutrition(updated, macros(CHICKEN, 100))
        assert updated.total_protein == pytest.approx(62.0)
        assert updated.total_carbs == 0.0
        assert updated.is_complete

    def test_daily_progress(self):
        entry = NutritionLogEntry("a", date(2024, 3, 15), 100.0, 300.0, 150.0, 1500.0)
        assert daily_progress(entry, default_targets()) == {
            "protein": 50.0,
            "carbs": 100.0,
            "fat": 100.0,
            "calories": 50.0,
        }
        assert daily_progress(None, default_targets())["protein"] == 0.0

    def test_trend_oldest_first(self):
        trend = nutrition_trend(self._entries(), resolve_window("month", NOW))
        assert [d for d, _ in trend] == [date(2024, 3, 11), date(2024, 3, 12)]


# =============================================================================
# RANKING
# =============================================================================


class TestRanking:
    def test_score_formula(self):
        # 60 × 0.5 + 3 × 10 + 1 × 20
        assert performance_score(60, 3, 1) == 80.0

    def test_rank_order(self):
        window = resolve_window("month", NOW)
        logs = [_log("a", date(2024, 2, 20), [_s("bench", 80, 5)])]
        logs += [
            _log("a", date(2024, 3, d), [_s("bench", 85 if d == 5 else 70, 5)])
            for d in (4, 5, 6)
        ]
        logs += [_log("b", date(2024, 3, d)) for d in (2, 4, 6, 8, 11)]

        board = rank_cohort(logs, window, trainee_ids=["a", "b", "d", "c"])
        # a: 60 % → 30 + 30 + 20 = 80; b: 100 % → 50 + 50 = 100
        assert [e.trainee_id for e in board] == ["b", "a", "c", "d"]
        assert board[0].score == 100.0
        assert board[1].score == 80.0
        assert board[1].pr_count == 1
        assert board[2].score == 0.0

    def test_custom_targets_and_weights(self):
        logs = [_log("a", date(2024, 3, d)) for d in (4, 5)]
        board = rank_cohort(logs, resolve_window("month", NOW), targets={"a": 2}, weights=(1.0, 0.0, 0.0))
        assert board[0].compliance == 100
        assert board[0].score == 100.0

    def test_empty(self):
        assert rank_cohort([], resolve_window("week", NOW)) == []


# =============================================================================
# DRAFT MIGRATION
# =============================================================================


class TestDraftMigration:
    def test_legacy_heavier_set_wins(self):
        payload = {"bench": {"sets": [{"weight": "50", "reps": "10"}, {"weight": "60", "reps": "8"}]}}
        drafts = migrate_draft(payload, ["bench"])
        assert drafts["bench"] == ExerciseDraft(weight="60", reps="8", rir="1", is_complete=False)

    def test_legacy_equal_weight_more_reps(self):
        payload = {
            "bench": {
                "sets": [{"weight": "60", "reps": "5", "rir": "3"}, {"weight": 60, "reps": 8, "rir": 2}],
                "isComplete": True,
            }
        }
        d = migrate_draft(payload)["bench"]
        assert (d.weight, d.reps, d.rir, d.is_complete) == ("60", "8", "2", True)

    def test_corrupt_payload_gives_defaults(self, caplog):
        with caplog.at_level(logging.WARNING):
            drafts = migrate_draft("not an object", ["bench", "row"])
        assert drafts == {"bench": empty_draft(), "row": empty_draft()}
        assert "not an object" in caplog.text

    def test_corrupt_entry_reset(self):
        payload = {"bench": {"isComplete": "yes"}, "row": 42, "curl": {"weight": "20", "reps": "12"}}
        drafts = migrate_draft(payload, ["bench", "row", "curl", "dip"])
        assert drafts["bench"] == empty_draft()
        assert drafts["row"] == empty_draft()
        assert drafts["curl"].weight == "20"
        assert drafts["dip"] == empty_draft()

    def test_current_shape_old_field_names(self):
        payload = {"bench": {"heaviestWeight": "70", "heaviestReps": "6", "heaviestRir": "", "isComplete": False}}
        assert migrate_draft(payload)["bench"] == ExerciseDraft("70", "6", "1", False)

    def test_unknown_exercises_dropped_when_ids_given(self):
        payload = {"bench": {"weight": "60", "reps": "5"}, "old": {"weight": "1", "reps": "1"}}
        assert list(migrate_draft(payload, ["bench"])) == ["bench"]

    def test_envelope_unwrapped(self):
        payload = {
            "sets": {"bench": [{"weight": "50", "reps": "5", "rir": "2"}]},
            "routineId": "r1",
            "timestamp": 1_000,
        }
        drafts = migrate_draft(payload, ["bench"], now_ms=2_000)
        assert drafts["bench"] == ExerciseDraft("50", "5", "2", False)

    def test_envelope_expired(self):
        payload = {"sets": {"bench": [{"weight": "50", "reps": "5"}]}, "timestamp": 0}
        drafts = migrate_draft(payload, ["bench"], now_ms=DRAFT_MAX_AGE_MS + 1)
        assert drafts == {"bench": empty_draft()}

    def test_classification(self):
        assert isinstance(classify_draft_entry({"weight": "1", "reps": "1"}), CurrentDraft)
        assert isinstance(classify_draft_entry({"sets": [{"weight": "1", "reps": "1"}]}), LegacyMultiSetDraft)
        assert isinstance(classify_draft_entry({"sets": "x"}), CorruptDraft)
        assert isinstance(classify_draft_entry({"sets": []}), CorruptDraft)
        assert isinstance(classify_draft_entry({"foo": 1}), CorruptDraft)
        assert isinstance(classify_draft_entry(None), CorruptDraft)

    def test_non_finite_numbers_treated_as_zero(self):
        payload = {"bench": {"sets": [{"weight": "60", "reps": "inf"}, {"weight": "50", "reps": "5"}]}}
        assert migrate_draft(payload, ["bench"])["bench"].weight == "60"

        payload = {"bench": {"sets": [{"weight": "1e400", "reps": "1"}, {"weight": "50", "reps": "5"}]}}
        assert migrate_draft(payload, ["bench"])["bench"].weight == "50"

    @pytest.mark.parametrize(
        "payload",
        [
            {"bench": {"sets": [{"weight": "abc", "reps": "xyz"}]}},
            {"bench": {"sets": [{"weight": "inf", "reps": "-inf"}, {"weight": "nan", "reps": "1e400"}]}},
            {"bench": {"sets": [{"weight": float("inf"), "reps": float("nan")}]}},
            {"bench": {"sets": [{"weight": None, "reps": "5"}]}},
            {"bench": {"sets": [1, "x", None, [], {"weight": True}]}},
            {"bench": {"sets": None}},
            {"sets": ["bench"], "timestamp": 1},
            {"sets": {"bench": "x", "row": [None]}, "timestamp": 1},
            {"sets": {"bench": [{"weight": "5", "reps": "5"}]}, "timestamp": "yesterday"},
            {"bench": {"weight": ["60"], "reps": {}}},
            [1, 2, 3],
            3.5,
        ],
    )
    def test_malformed_payload_never_raises(self, payload):
        drafts = migrate_draft(payload, ["bench"], now_ms=2_000)
        assert list(drafts) == ["bench"]
        assert isinstance(drafts["bench"], ExerciseDraft)

    def test_has_logged_data(self):
        assert not has_logged_data({"bench": ExerciseDraft(weight="60")})
        assert has_logged_data({"bench": ExerciseDraft(weight="60", reps="5")})


# =============================================================================
# BODY WEIGHT
# =============================================================================


class TestBodyWeight:
    def _history(self) -> list[BodyWeightEntry]:
        return [
            BodyWeightEntry("a", date(2024, 3, 8), 79.0),
            BodyWeightEntry("a", date(2024, 3, 15), 78.0),
            BodyWeightEntry("a", date(2024, 3, 1), 80.0),
        ]

    def test_summary(self):
        s = bodyweight_summary(self._history())
        assert s.current == 78.0
        assert s.initial == 80.0
        assert s.change == pytest.approx(-2.0)
        assert s.recent_average == pytest.approx(79.0)
        assert s.entries == 3

    def test_recent_average_window(self):
        assert bodyweight_summary(self._history(), recent=2).recent_average == pytest.approx(78.5)

    def test_single_entry_has_no_change(self):
        s = bodyweight_summary([BodyWeightEntry("a", date(2024, 3, 1), 80.0)])
        assert s.change is None
        assert s.current == s.initial == 80.0

    def test_empty(self):
        assert bodyweight_summary([]).entries == 0

    def test_trend_oldest_first(self):
        assert weight_trend(self._history())[0] == (date(2024, 3, 1), 80.0)

    def test_weight_must_be_positive(self):
        with pytest.raises(ValueError):
            BodyWeightEntry("a", date(2024, 3, 1), 0.0)


def test_window_boundaries_are_datetimes():
    w = resolve_window("week", NOW)
    assert w.duration == timedelta(days=5, hours=12)
