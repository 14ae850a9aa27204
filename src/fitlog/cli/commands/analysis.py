"""Analysis commands: summary, prs, leaderboard, compliance, strength-trend, one-rm, bodyweight."""

import json
from typing import Annotated, Optional

import typer

from ...core.aggregation import exercise_extrema, latest_workout_date, trainee_totals, workouts_per_day
from ...core.bodyweight import bodyweight_summary, weight_trend
from ...core.metrics import cohort_compliance, one_rep_max, one_rep_max_series, period_compliance
from ...core.models import TraineeTotals
from ...core.ranking import rank_cohort
from ...core.records import detect_cohort_records, detect_personal_records
from ...io.serializers import (
    compliance_to_dict,
    leaderboard_entry_to_dict,
    one_rm_point_to_dict,
    pr_event_to_dict,
)
from .. import views
from ..app import (
    AsOfOption,
    DataOption,
    JsonOption,
    PeriodOption,
    app,
    get_settings,
    get_window,
    load_dataset,
    reference_time,
)

TraineeArgument = Annotated[str, typer.Argument(help="Trainee ID")]


@app.command()
def summary(
    ctx: typer.Context,
    trainee_id: TraineeArgument,
    period: PeriodOption = "month",
    data_path: DataOption = None,
    as_of: AsOfOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show one trainee's workouts, compliance, PRs and per-exercise bests.
    """
    settings = get_settings(ctx)
    dataset = load_dataset(data_path)
    window = get_window(period, reference_time(as_of), settings)
    logs = dataset.workout_logs

    totals = trainee_totals(logs, window).get(trainee_id, TraineeTotals(trainee_id))
    compliance = period_compliance(
        logs, trainee_id, window, settings.weekly_target(dataset.weekly_targets, trainee_id)
    )
    records = detect_personal_records(logs, trainee_id, window)
    extrema = exercise_extrema(logs, window, trainee_id)
    activity = workouts_per_day(logs, window, trainee_id)
    last = latest_workout_date(logs, trainee_id)

    if json_out:
        print(json.dumps({
            "trainee_id": trainee_id,
            "period": period,
            "workout_count": totals.workout_count,
            "exercise_count": totals.exercise_count,
            "total_volume": round(totals.total_volume, 1),
            "compliance": compliance_to_dict(compliance),
            "personal_records": [pr_event_to_dict(e) for e in records],
            "exercises": {
                exercise_id: {
                    "max_weight": e.max_weight,
                    "reps_at_max": e.reps_at_max,
                    "min_weight": e.min_weight,
                    "set_count": e.set_count,
                    "best_date": views.fmt_day(e.best_date),
                }
                for exercise_id, e in sorted(extrema.items())
            },
            "workouts_per_day": [[d.isoformat(), n] for d, n in activity],
            "last_workout": views.fmt_day(last) if last is not None else None,
        }, indent=2))
        return

    views.console.print()
    views.console.print(views.format_summary_display(
        trainee_id, period, totals, compliance, len(records), last,
    ))
    views.console.print()
    if extrema:
        views.console.print(views.format_extrema_table(extrema))
    else:
        views.print_info("No logged sets in this period.")
    if activity:
        views.console.print(views.format_activity_table(activity))
    if records:
        views.console.print(views.format_pr_table(records))


@app.command()
def prs(
    ctx: typer.Context,
    trainee_id: Annotated[
        Optional[str],
        typer.Option("--trainee", "-t", help="Only this trainee (default: whole cohort)"),
    ] = None,
    period: PeriodOption = "month",
    data_path: DataOption = None,
    as_of: AsOfOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List personal records set in the period, newest first.

    A record needs a heavier lift than the best of the preceding
    equal-length period.
    """
    settings = get_settings(ctx)
    dataset = load_dataset(data_path)
    window = get_window(period, reference_time(as_of), settings)

    if trainee_id is None:
        events = detect_cohort_records(dataset.workout_logs, window)
    else:
        events = detect_personal_records(dataset.workout_logs, trainee_id, window)

    if json_out:
        print(json.dumps([pr_event_to_dict(e) for e in events], indent=2))
        return

    if not events:
        views.print_info(f"No personal records in period '{period}'.")
        return
    views.console.print(views.format_pr_table(events))


@app.command()
def leaderboard(
    ctx: typer.Context,
    period: PeriodOption = "month",
    data_path: DataOption = None,
    as_of: AsOfOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Rank the cohort by compliance, workouts and PRs.
    """
    settings = get_settings(ctx)
    dataset = load_dataset(data_path)
    window = get_window(period, reference_time(as_of), settings)

    members = dataset.trainee_ids()
    board = rank_cohort(
        dataset.workout_logs,
        window,
        targets={t: settings.weekly_target(dataset.weekly_targets, t) for t in members},
        trainee_ids=members,
        weights=settings.rank_weights,
    )

    if json_out:
        print(json.dumps([leaderboard_entry_to_dict(e) for e in board], indent=2))
        return

    if not board:
        views.print_info("No trainees in dataset.")
        return
    views.console.print(views.format_leaderboard_table(board, period))


@app.command()
def compliance(
    ctx: typer.Context,
    period: PeriodOption = "week",
    data_path: DataOption = None,
    as_of: AsOfOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Completed workouts against each trainee's weekly target.
    """
    settings = get_settings(ctx)
    dataset = load_dataset(data_path)
    window = get_window(period, reference_time(as_of), settings)

    members = dataset.trainee_ids()
    results = cohort_compliance(
        dataset.workout_logs,
        members,
        window,
        {t: settings.weekly_target(dataset.weekly_targets, t) for t in members},
    )

    if json_out:
        print(json.dumps({t: compliance_to_dict(r) for t, r in results.items()}, indent=2))
        return

    views.console.print(views.format_compliance_table(results, period))


@app.command("strength-trend")
def strength_trend(
    ctx: typer.Context,
    trainee_id: TraineeArgument,
    exercise_ids: Annotated[
        list[str],
        typer.Option("--exercise", "-e", help="Exercise ID (repeatable)"),
    ],
    period: PeriodOption = "3months",
    data_path: DataOption = None,
    as_of: AsOfOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Best estimated 1RM per day for the given exercises.
    """
    settings = get_settings(ctx)
    dataset = load_dataset(data_path)
    window = get_window(period, reference_time(as_of), settings)

    points = one_rep_max_series(dataset.workout_logs, exercise_ids, window, trainee_id)

    if json_out:
        print(json.dumps([one_rm_point_to_dict(p) for p in points], indent=2))
        return

    if not points:
        views.print_info("No sets for these exercises in this period.")
        return
    views.console.print(views.format_one_rm_table(points, f"Strength trend: {', '.join(exercise_ids)}"))


@app.command("one-rm")
def one_rm(
    weight: Annotated[float, typer.Argument(help="Weight lifted (kg)")],
    reps: Annotated[int, typer.Argument(help="Reps performed")],
    json_out: JsonOption = False,
) -> None:
    """
    Estimate one-rep max (Brzycki).
    """
    estimate = one_rep_max(weight, reps)

    if json_out:
        print(json.dumps({"weight": weight, "reps": reps, "one_rm": round(estimate, 1)}, indent=2))
        return

    if estimate <= 0:
        views.print_warning(f"No meaningful estimate for {weight:g} kg × {reps}.")
        return
    views.console.print(f"Estimated 1RM: [bold]{estimate:.1f} kg[/bold]  ({weight:g} kg × {reps})")


@app.command()
def bodyweight(
    ctx: typer.Context,
    trainee_id: TraineeArgument,
    data_path: DataOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show body-weight change and recent average.
    """
    settings = get_settings(ctx)
    dataset = load_dataset(data_path)
    history = dataset.bodyweights_for(trainee_id)
    result = bodyweight_summary(history, settings.recent_bodyweight_entries)

    if json_out:
        print(json.dumps({
            "current": result.current,
            "initial": result.initial,
            "change": round(result.change, 1) if result.change is not None else None,
            "recent_average": round(result.recent_average, 1) if result.recent_average is not None else None,
            "entries": result.entries,
            "trend": [[d.isoformat(), w] for d, w in weight_trend(history)],
        }, indent=2))
        return

    views.console.print(views.format_bodyweight_display(result))
