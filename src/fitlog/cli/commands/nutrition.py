"""Nutrition commands: swap, nutrition, log-food."""

import json
from datetime import date
from typing import Annotated, Optional

import typer

from ...core.models import NutritionLogEntry, as_date
from ...core.nutrition import (
    CategoryMismatchError,
    accumulate_nutrition,
    compute_swap,
    daily_progress,
    macros,
    nutrition_stats,
    nutrition_trend,
    swap_candidates,
)
from ...io.serializers import ValidationError, macros_to_dict, swap_result_to_dict, validate_date
from .. import views
from ..app import (
    AsOfOption,
    DataOption,
    JsonOption,
    PeriodOption,
    app,
    get_settings,
    get_store,
    get_window,
    load_dataset,
    reference_time,
)


@app.command()
def swap(
    ctx: typer.Context,
    source_id: Annotated[str, typer.Argument(help="Food to replace (id or name)")],
    amount: Annotated[float, typer.Argument(help="Grams of the source food")],
    target_id: Annotated[
        Optional[str],
        typer.Argument(help="Replacement food (default: every food in the same category)"),
    ] = None,
    data_path: DataOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Macro-preserving food swap within a category.
    """
    settings = get_settings(ctx)
    dataset = load_dataset(data_path)

    source = dataset.food(source_id)
    if source is None:
        views.print_error(f"Unknown food: {source_id}")
        raise typer.Exit(1)

    if target_id is None:
        targets = swap_candidates(source, dataset.foods)
    else:
        target = dataset.food(target_id)
        if target is None:
            views.print_error(f"Unknown food: {target_id}")
            raise typer.Exit(1)
        targets = [target]

    excellent, fair = settings.match_thresholds
    try:
        results = [
            (
                target,
                compute_swap(
                    source,
                    amount,
                    target,
                    settings.category_axes,
                    excellent,
                    fair,
                    settings.match_messages,
                ),
            )
            for target in targets
        ]
    except CategoryMismatchError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([
            {"source": source.id, "target": target.id, **swap_result_to_dict(result)}
            for target, result in results
        ], indent=2))
        return

    if not results:
        views.print_info(f"No other foods in category '{source.category}'.")
        return
    for target, result in results:
        views.console.print(views.format_swap_display(source, amount, target, result))


@app.command()
def nutrition(
    ctx: typer.Context,
    trainee_id: Annotated[str, typer.Argument(help="Trainee ID")],
    period: PeriodOption = "week",
    data_path: DataOption = None,
    as_of: AsOfOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Average daily intake, compliance with targets and today's progress.
    """
    settings = get_settings(ctx)
    dataset = load_dataset(data_path)
    now = reference_time(as_of)
    window = get_window(period, now, settings)
    targets = settings.default_targets

    entries = [e for e in dataset.nutrition_logs if e.trainee_id == trainee_id]
    stats = nutrition_stats(entries, window, targets.calories, targets.protein)
    today = next((e for e in entries if as_date(e.date) == now.date()), None)
    progress = daily_progress(today, targets)
    trend = nutrition_trend(entries, window)

    if json_out:
        print(json.dumps({
            "trainee_id": trainee_id,
            "period": period,
            "average_calories": stats.average_calories,
            "average_protein": stats.average_protein,
            "average_carbs": stats.average_carbs,
            "average_fat": stats.average_fat,
            "compliance": stats.compliance,
            "today_progress": {k: round(v, 1) for k, v in progress.items()},
            "trend": [[d.isoformat(), macros_to_dict(m)] for d, m in trend],
        }, indent=2))
        return

    views.console.print(views.format_nutrition_display(trainee_id, period, stats, progress))


@app.command("log-food")
def log_food(
    trainee_id: Annotated[str, typer.Argument(help="Trainee ID")],
    food_id: Annotated[str, typer.Argument(help="Food eaten (id or name)")],
    grams: Annotated[float, typer.Argument(help="Amount in grams")],
    day: Annotated[
        Optional[str],
        typer.Option("--date", help="Day to log (YYYY-MM-DD, default today)"),
    ] = None,
    data_path: DataOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Add a food's macros to a trainee's daily totals.
    """
    dataset = load_dataset(data_path)

    food = dataset.food(food_id)
    if food is None:
        views.print_error(f"Unknown food: {food_id}")
        raise typer.Exit(1)
    if grams <= 0:
        views.print_error("Amount must be positive")
        raise typer.Exit(1)

    try:
        when = as_date(validate_date(day)) if day is not None else date.today()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    index = next(
        (
            i
            for i, e in enumerate(dataset.nutrition_logs)
            if e.trainee_id == trainee_id and as_date(e.date) == when
        ),
        None,
    )
    if index is None:
        dataset.nutrition_logs.append(NutritionLogEntry(trainee_id=trainee_id, date=when))
        index = len(dataset.nutrition_logs) - 1

    updated = accumulate_nutrition(dataset.nutrition_logs[index], macros(food, grams))
    dataset.nutrition_logs[index] = updated
    get_store(data_path).save(dataset)

    if json_out:
        print(json.dumps({
            "trainee_id": trainee_id,
            "date": when.isoformat(),
            "total_protein": round(updated.total_protein or 0.0, 1),
            "total_carbs": round(updated.total_carbs or 0.0, 1),
            "total_fat": round(updated.total_fat or 0.0, 1),
            "total_calories": round(updated.total_calories or 0.0, 1),
        }, indent=2))
        return

    views.print_success(
        f"Logged {grams:g} g {food.name} for {trainee_id} on {when.isoformat()}: "
        f"{updated.total_calories or 0.0:.0f} kcal total"
    )
