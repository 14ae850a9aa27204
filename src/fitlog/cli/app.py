"""Shared Typer app object, shared option types, and store utilities."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..core.config import PERIOD_FILTERS
from ..core.models import PeriodWindow
from ..core.periods import resolve_window
from ..io.config_loader import AnalyticsSettings, load_settings
from ..io.dataset_store import Dataset, DatasetStore, get_default_dataset_path
from ..io.serializers import ValidationError, validate_date
from . import views

# Shared options used across commands
DataOption = Annotated[
    Optional[Path],
    typer.Option("--data", "-d", help="Path to dataset JSON file (default ~/.fitlog/dataset.json)"),
]
PeriodOption = Annotated[
    str,
    typer.Option("--period", "-p", help=f"Period filter: {', '.join(PERIOD_FILTERS)}"),
]
AsOfOption = Annotated[
    Optional[str],
    typer.Option("--as-of", help="Reference moment (YYYY-MM-DD or ISO datetime); default now"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="fitlog",
    help="Training & nutrition analytics: PRs, compliance, leaderboards, food swaps.",
    no_args_is_help=True,
)


def setup_logging(verbose: bool) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", help="Settings YAML (default ~/.fitlog/analytics.yaml)"),
    ] = None,
) -> None:
    """
    Training & nutrition analytics over a fitlog dataset.
    """
    setup_logging(verbose)
    ctx.obj = load_settings(config_path)


def get_settings(ctx: typer.Context) -> AnalyticsSettings:
    """Settings loaded by the app callback (defaults when invoked directly)."""
    if isinstance(ctx.obj, AnalyticsSettings):
        return ctx.obj
    return AnalyticsSettings()


def get_store(data_path: Path | None) -> DatasetStore:
    """Get dataset store from path or default location."""
    if data_path is None:
        data_path = get_default_dataset_path()
    return DatasetStore(data_path)


def load_dataset(data_path: Path | None) -> Dataset:
    """Load the dataset or exit with an error message."""
    store = get_store(data_path)

    if not store.exists():
        views.print_error(f"Dataset file not found: {store.dataset_path}")
        views.print_info("Pass --data or create ~/.fitlog/dataset.json.")
        raise typer.Exit(1)

    try:
        return store.load()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def reference_time(as_of: str | None) -> datetime:
    """Parse --as-of (a bare date means end of that day), else now."""
    if as_of is None:
        return datetime.now()
    try:
        moment = validate_date(as_of)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    if isinstance(moment, datetime):
        return moment
    return datetime(moment.year, moment.month, moment.day, 23, 59, 59)


def get_window(period: str, now: datetime, settings: AnalyticsSettings) -> PeriodWindow:
    """Resolve --period or exit with an error message."""
    try:
        return resolve_window(period, now, settings.week_start)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
