"""Body-weight history summaries."""

from datetime import date
from typing import Iterable

from .config import BODYWEIGHT_RECENT_ENTRIES
from .models import BodyWeightEntry, BodyWeightSummary, as_date, as_datetime


def newest_first(history: Iterable[BodyWeightEntry]) -> list[BodyWeightEntry]:
    """Order a history most-recent-first (stable for same-day entries)."""
    return sorted(history, key=lambda e: as_datetime(e.date), reverse=True)


def bodyweight_summary(
    history: Iterable[BodyWeightEntry],
    recent: int = BODYWEIGHT_RECENT_ENTRIES,
) -> BodyWeightSummary:
    """
    Current weight, starting weight and the change between them.

    change is current − initial and needs at least two entries;
    recent_average covers the ``recent`` newest entries.
    """
    ordered = newest_first(history)
    if not ordered:
        return BodyWeightSummary(None, None, None, None, entries=0)

    current = ordered[0].weight_kg
    initial = ordered[-1].weight_kg
    window = ordered[: max(1, recent)]
    return BodyWeightSummary(
        current=current,
        initial=initial,
        change=current - initial if len(ordered) >= 2 else None,
        recent_average=sum(e.weight_kg for e in window) / len(window),
        entries=len(ordered),
    )


def weight_trend(history: Iterable[BodyWeightEntry]) -> list[tuple[date, float]]:
    """Oldest-first (date, weight) pairs for charting."""
    return [(as_date(e.date), e.weight_kg) for e in reversed(newest_first(history))]
