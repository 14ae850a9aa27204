"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of analytics results.
"""

from datetime import date, datetime
from typing import Mapping

from rich.console import Console
from rich.table import Table

from ..core.models import (
    BodyWeightSummary,
    ComplianceResult,
    Day,
    ExerciseDraft,
    ExerciseExtrema,
    FoodItem,
    LeaderboardEntry,
    NutritionStats,
    OneRepMaxPoint,
    PersonalRecordEvent,
    SwapResult,
    TraineeTotals,
)

console = Console()

_TIER_STYLES = {"excellent": "green", "fair": "yellow", "poor": "red", "none": "dim"}


def fmt_day(value: Day | None) -> str:
    """Date cell; datetimes keep minutes only when not midnight."""
    if value is None:
        return "-"
    if isinstance(value, datetime):
        if value.hour or value.minute:
            return value.strftime("%Y-%m-%d %H:%M")
        return value.strftime("%Y-%m-%d")
    return value.isoformat()


def _kg(value: float | None, signed: bool = False) -> str:
    if value is None:
        return "-"
    return f"{value:+.1f}" if signed else f"{value:.1f}"


def format_summary_display(
    trainee_id: str,
    period: str,
    totals: TraineeTotals,
    compliance: ComplianceResult,
    pr_count: int,
    last_workout: Day | None,
) -> str:
    """
    Format a trainee's period summary as a text block.

    Returns:
        Formatted string
    """
    lines = [
        f"[bold]{trainee_id}[/bold]  ({period})",
        f"- Workouts: {totals.workout_count}",
        f"- Compliance: {compliance.percent}%  ({compliance.completed}/{compliance.target} per week)",
        f"- Exercises trained: {totals.exercise_count}",
        f"- Volume: {totals.total_volume:,.0f} kg",
        f"- New PRs: {pr_count}",
        f"- Last workout: {fmt_day(last_workout)}",
    ]
    return "\n".join(lines)


def format_extrema_table(extrema: Mapping[str, ExerciseExtrema]) -> Table:
    """
    Create a Rich table of per-exercise best and lightest sets.

    Args:
        extrema: exercise_id -> ExerciseExtrema

    Returns:
        Rich Table object
    """
    table = Table(title="Exercises")

    table.add_column("Exercise", style="cyan")
    table.add_column("Max (kg)", justify="right", style="bold")
    table.add_column("Reps", justify="right")
    table.add_column("Min (kg)", justify="right")
    table.add_column("Sets", justify="right", style="dim")
    table.add_column("Best on")

    for exercise_id in sorted(extrema):
        e = extrema[exercise_id]
        table.add_row(
            exercise_id,
            _kg(e.max_weight),
            str(e.reps_at_max),
            _kg(e.min_weight),
            str(e.set_count),
            fmt_day(e.best_date),
        )

    return table


def format_pr_table(events: list[PersonalRecordEvent]) -> Table:
    """Create a Rich table of personal-record events, newest first."""
    table = Table(title="Personal Records")

    table.add_column("Date", style="cyan")
    table.add_column("Trainee", style="magenta")
    table.add_column("Exercise")
    table.add_column("New (kg)", justify="right", style="bold green")
    table.add_column("Prev (kg)", justify="right")
    table.add_column("Gain", justify="right")

    for event in events:
        table.add_row(
            fmt_day(event.date),
            event.trainee_id,
            event.exercise_id,
            _kg(event.new_weight),
            _kg(event.previous_weight),
            _kg(event.improvement_kg, signed=True),
        )

    return table


def format_leaderboard_table(board: list[LeaderboardEntry], period: str) -> Table:
    """Create the leaderboard table."""
    table = Table(title=f"Leaderboard ({period})")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Trainee", style="magenta")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("Compliance", justify="right")
    table.add_column("Workouts", justify="right")
    table.add_column("PRs", justify="right")

    for rank, entry in enumerate(board, 1):
        table.add_row(
            str(rank),
            entry.trainee_id,
            f"{entry.score:.1f}",
            f"{entry.compliance}%",
            str(entry.workout_count),
            str(entry.pr_count),
        )

    return table


def format_compliance_table(results: Mapping[str, ComplianceResult], period: str) -> Table:
    table = Table(title=f"Compliance ({period})")

    table.add_column("Trainee", style="magenta")
    table.add_column("Completed", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("%", justify="right", style="bold")

    for trainee_id, result in results.items():
        table.add_row(trainee_id, str(result.completed), str(result.target), str(result.percent))

    return table


def format_one_rm_table(points: list[OneRepMaxPoint], title: str) -> Table:
    table = Table(title=title)

    table.add_column("Date", style="cyan")
    table.add_column("Est. 1RM (kg)", justify="right", style="bold")

    for point in points:
        table.add_row(fmt_day(point.date), _kg(point.one_rm))

    return table


def format_activity_table(days: list[tuple[date, int]]) -> Table:
    table = Table(title="Workouts per day")

    table.add_column("Date", style="cyan")
    table.add_column("Workouts", justify="right")

    for day, count in days:
        table.add_row(day.isoformat(), str(count))

    return table


def format_bodyweight_display(summary: BodyWeightSummary) -> str:
    """Format the body-weight headline numbers."""
    if summary.entries == 0:
        return "[yellow]No body-weight entries recorded.[/yellow]"
    lines = [
        "Body weight",
        f"- Current: {_kg(summary.current)} kg",
        f"- Initial: {_kg(summary.initial)} kg",
        f"- Change: {_kg(summary.change, signed=True)} kg",
        f"- Recent average: {_kg(summary.recent_average)} kg  ({summary.entries} entries)",
    ]
    return "\n".join(lines)


def format_swap_display(
    source: FoodItem,
    source_amount: float,
    target: FoodItem,
    result: SwapResult,
) -> Table:
    """
    Create a side-by-side macro table for a food swap.

    Args:
        source: Food being replaced
        source_amount: Grams of the source
        target: Replacement food
        result: Computed swap

    Returns:
        Rich Table object
    """
    style = _TIER_STYLES.get(result.match_quality.tier, "")
    table = Table(
        title=f"{source_amount:g} g {source.name} → {result.target_amount:.0f} g {target.name}",
        caption=f"[{style}]{result.match_quality.message}[/{style}]"
        f"  (score {result.match_quality.score:.2f})",
    )

    table.add_column("Macro", style="cyan")
    table.add_column(source.name, justify="right")
    table.add_column(target.name, justify="right")
    table.add_column("Diff", justify="right", style="bold")

    src = result.source_macros.as_dict()
    dst = result.target_macros.as_dict()
    diff = result.differences.as_dict()
    for name in src:
        unit = "kcal" if name == "calories" else "g"
        table.add_row(
            f"{name} ({unit})",
            f"{src[name]:.1f}",
            f"{dst[name]:.1f}",
            f"{diff[name]:+.1f}",
        )

    return table


def format_nutrition_display(
    trainee_id: str,
    period: str,
    stats: NutritionStats,
    progress: Mapping[str, float] | None = None,
) -> str:
    """Format average intake, target compliance and today's progress."""
    if stats.average_calories is None:
        return f"[yellow]No complete nutrition days for {trainee_id} ({period}).[/yellow]"

    lines = [
        f"[bold]{trainee_id}[/bold] nutrition ({period})",
        f"- Calories: {stats.average_calories:.0f} kcal/day",
        f"- Protein: {stats.average_protein:.1f} g/day",
        f"- Carbs: {stats.average_carbs:.1f} g/day",
        f"- Fat: {stats.average_fat:.1f} g/day",
        f"- Target compliance: {stats.compliance}%",
    ]
    if progress is not None:
        lines.append(
            "- Today: "
            + ", ".join(f"{name} {value:.0f}%" for name, value in progress.items())
        )
    return "\n".join(lines)


def format_drafts_table(drafts: Mapping[str, ExerciseDraft], routine_id: str) -> Table:
    """Create a table of migrated workout drafts."""
    table = Table(title=f"Draft for routine {routine_id}")

    table.add_column("Exercise", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("RIR", justify="right")
    table.add_column("Done", justify="center")

    for exercise_id, d in drafts.items():
        table.add_row(
            exercise_id,
            d.weight or "-",
            d.reps or "-",
            d.rir,
            "[green]✓[/green]" if d.is_complete else "",
        )

    return table


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
