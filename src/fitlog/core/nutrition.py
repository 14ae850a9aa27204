"""
Nutrition equivalence and daily nutrition statistics.

Food swaps keep the macro that defines a food's category constant
(protein for protein foods, carbs for carb/bread foods, fat for fats) and
report how well the other macros survive the swap.

    macros(food, g)   = per_100g × g / 100, calories = 4P + 4C + 9F
    target_amount     = source_amount × source.axis / target.axis
    score             = 1 − mean(|t − s| / max(s, t)) over P, C, F, kcal
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Mapping

from .config import (
    CATEGORY_AXES,
    DEFAULT_TARGET_CALORIES,
    DEFAULT_TARGET_CARBS_G,
    DEFAULT_TARGET_FAT_G,
    DEFAULT_TARGET_FLUIDS_ML,
    DEFAULT_TARGET_PROTEIN_G,
    KCAL_PER_G_CARBS,
    KCAL_PER_G_FAT,
    KCAL_PER_G_PROTEIN,
    MACRO_AXES,
    MATCH_EXCELLENT_THRESHOLD,
    MATCH_FAIR_THRESHOLD,
    MATCH_MESSAGES,
)
from .metrics import round_half_up
from .models import (
    FoodItem,
    MacroAxis,
    Macros,
    MatchQuality,
    NutritionLogEntry,
    NutritionStats,
    NutritionTargets,
    PeriodWindow,
    SwapResult,
    as_date,
)

logger = logging.getLogger(__name__)


class CategoryMismatchError(ValueError):
    """Raised when a swap is requested between foods of different categories."""

    pass


# =============================================================================
# MACROS
# =============================================================================


def calories_from(protein: float, carbs: float, fat: float) -> float:
    """Energy in kcal from macro grams (4 / 4 / 9 kcal per g)."""
    return protein * KCAL_PER_G_PROTEIN + carbs * KCAL_PER_G_CARBS + fat * KCAL_PER_G_FAT


def macros(food: FoodItem, grams: float) -> Macros:
    """
    Macros contained in ``grams`` of a food.

    Args:
        food: Catalog item
        grams: Amount in grams (negative amounts are treated as 0)

    Returns:
        Macros with calories derived from the three macros
    """
    factor = max(0.0, grams) / 100.0
    protein = food.protein_per_100g * factor
    carbs = food.carbs_per_100g * factor
    fat = food.fat_per_100g * factor
    return Macros(protein=protein, carbs=carbs, fat=fat, calories=calories_from(protein, carbs, fat))


def defining_axis(
    food: FoodItem,
    category_axes: Mapping[str, str] | None = None,
) -> MacroAxis:
    """
    Macro that characterises the food's category.

    Known categories map through ``category_axes``. An unknown category
    falls back to whichever macro supplies the most calories in this food.
    """
    axes = CATEGORY_AXES if category_axes is None else category_axes
    axis = axes.get(food.category.strip().lower())
    if axis in MACRO_AXES:
        return axis  # type: ignore[return-value]

    energy = {
        "protein": food.protein_per_100g * KCAL_PER_G_PROTEIN,
        "carbs": food.carbs_per_100g * KCAL_PER_G_CARBS,
        "fat": food.fat_per_100g * KCAL_PER_G_FAT,
    }
    fallback = max(MACRO_AXES, key=lambda a: energy[a])
    logger.debug("Unknown food category %r, using dominant macro %s", food.category, fallback)
    return fallback  # type: ignore[return-value]


def _check_same_category(source: FoodItem, target: FoodItem) -> None:
    if source.category != target.category:
        raise CategoryMismatchError(
            f"Cannot swap {source.name!r} ({source.category}) for "
            f"{target.name!r} ({target.category}): categories differ"
        )


def swap_amount(
    source: FoodItem,
    source_amount: float,
    target: FoodItem,
    category_axes: Mapping[str, str] | None = None,
) -> float:
    """
    Grams of ``target`` carrying the same amount of the defining macro.

    Returns 0.0 when the source amount is not positive or the target has
    none of the defining macro.

    Raises:
        CategoryMismatchError: If the foods belong to different categories
    """
    _check_same_category(source, target)
    if source_amount <= 0:
        return 0.0
    axis = defining_axis(source, category_axes)
    target_density = target.per_100g(axis)
    if target_density <= 0:
        return 0.0
    return source_amount * source.per_100g(axis) / target_density


def match_quality(
    source: Macros,
    target: Macros,
    excellent_threshold: float = MATCH_EXCELLENT_THRESHOLD,
    fair_threshold: float = MATCH_FAIR_THRESHOLD,
    messages: Mapping[str, str] | None = None,
) -> MatchQuality:
    """
    Score how closely ``target`` preserves ``source`` macros.

    Each of protein, carbs, fat and calories contributes
    ``|t − s| / max(s, t)`` (0 when both are 0); the score is one minus the
    mean, so 1 means identical and 0 means nothing in common.

    Args:
        source: Macros being replaced
        target: Macros of the replacement
        excellent_threshold: Minimum score for "excellent"
        fair_threshold: Minimum score for "fair"
        messages: Tier -> display message

    Returns:
        MatchQuality with score, tier and message
    """
    texts = MATCH_MESSAGES if messages is None else messages
    diffs: list[float] = []
    for s, t in zip(source.as_dict().values(), target.as_dict().values()):
        scale = max(abs(s), abs(t))
        diffs.append(abs(t - s) / scale if scale > 0 else 0.0)
    score = max(0.0, min(1.0, 1.0 - sum(diffs) / len(diffs)))

    if score >= excellent_threshold:
        tier = "excellent"
    elif score >= fair_threshold:
        tier = "fair"
    else:
        tier = "poor"
    return MatchQuality(score=score, tier=tier, message=texts.get(tier, tier))


def _no_swap(messages: Mapping[str, str] | None = None) -> SwapResult:
    texts = MATCH_MESSAGES if messages is None else messages
    zero = Macros()
    return SwapResult(
        target_amount=0.0,
        source_macros=zero,
        target_macros=zero,
        differences=zero,
        match_quality=MatchQuality(score=0.0, tier="none", message=texts.get("none", MATCH_MESSAGES["none"])),
    )


def compute_swap(
    source: FoodItem,
    source_amount: float,
    target: FoodItem,
    category_axes: Mapping[str, str] | None = None,
    excellent_threshold: float = MATCH_EXCELLENT_THRESHOLD,
    fair_threshold: float = MATCH_FAIR_THRESHOLD,
    messages: Mapping[str, str] | None = None,
) -> SwapResult:
    """
    Full macro-preserving swap of ``source_amount`` g of ``source`` for ``target``.

    Raises:
        CategoryMismatchError: If the foods belong to different categories.
            This is a caller bug, not a runtime condition.
    """
    _check_same_category(source, target)
    amount = swap_amount(source, source_amount, target, category_axes)
    if amount <= 0:
        return _no_swap(messages)

    source_macros = macros(source, source_amount)
    target_macros = macros(target, amount)
    return SwapResult(
        target_amount=amount,
        source_macros=source_macros,
        target_macros=target_macros,
        differences=target_macros - source_macros,
        match_quality=match_quality(
            source_macros, target_macros, excellent_threshold, fair_threshold, messages
        ),
    )


def swap_candidates(source: FoodItem, catalog: Iterable[FoodItem]) -> list[FoodItem]:
    """Foods a source may be swapped for: same category, not itself."""
    return [f for f in catalog if f.category == source.category and f.id != source.id]


# =============================================================================
# DAILY NUTRITION
# =============================================================================


def default_targets() -> NutritionTargets:
    """Targets used until a trainee has a nutrition menu."""
    return NutritionTargets(
        fluids_ml=DEFAULT_TARGET_FLUIDS_ML,
        protein=DEFAULT_TARGET_PROTEIN_G,
        carbs=DEFAULT_TARGET_CARBS_G,
        fat=DEFAULT_TARGET_FAT_G,
        calories=DEFAULT_TARGET_CALORIES,
    )


def accumulate_nutrition(entry: NutritionLogEntry, added: Macros) -> NutritionLogEntry:
    """
    Add a food's macros to the day's totals.

    Totals are never recomputed from scratch; a missing total starts at 0.
    """
    return replace(
        entry,
        total_protein=(entry.total_protein or 0.0) + added.protein,
        total_carbs=(entry.total_carbs or 0.0) + added.carbs,
        total_fat=(entry.total_fat or 0.0) + added.fat,
        total_calories=(entry.total_calories or 0.0) + added.calories,
    )


def _in_window(
    entries: Iterable[NutritionLogEntry],
    window: PeriodWindow,
    trainee_id: str | None,
) -> list[NutritionLogEntry]:
    return [
        e
        for e in entries
        if e.is_complete
        and window.contains(e.date)
        and (trainee_id is None or e.trainee_id == trainee_id)
    ]


def nutrition_stats(
    entries: Iterable[NutritionLogEntry],
    window: PeriodWindow,
    target_calories: float | None = None,
    target_protein: float | None = None,
    trainee_id: str | None = None,
) -> NutritionStats:
    """
    Average daily intake inside the window and closeness to targets.

    compliance = clip((1 − mean(|avg_kcal − T_kcal| / T_kcal,
                                |avg_prot − T_prot| / T_prot)) × 100, 0, 100)

    Days with any missing total are ignored. Compliance is 0 unless both
    targets are positive.

    Returns:
        NutritionStats; averages are None when no complete day is in range
    """
    days = _in_window(entries, window, trainee_id)
    if not days:
        return NutritionStats(None, None, None, None, compliance=0)

    n = len(days)
    avg_calories = sum(d.total_calories for d in days) / n  # type: ignore[misc]
    avg_protein = sum(d.total_protein for d in days) / n  # type: ignore[misc]
    avg_carbs = sum(d.total_carbs for d in days) / n  # type: ignore[misc]
    avg_fat = sum(d.total_fat for d in days) / n  # type: ignore[misc]

    compliance = 0
    if target_calories and target_protein and target_calories > 0 and target_protein > 0:
        calories_diff = abs(avg_calories - target_calories) / target_calories
        protein_diff = abs(avg_protein - target_protein) / target_protein
        overall = (calories_diff + protein_diff) / 2
        compliance = round_half_up(max(0.0, min(100.0, (1 - overall) * 100)))

    return NutritionStats(
        average_calories=avg_calories,
        average_protein=avg_protein,
        average_carbs=avg_carbs,
        average_fat=avg_fat,
        compliance=compliance,
    )


def daily_progress(entry: NutritionLogEntry | None, targets: NutritionTargets) -> dict[str, float]:
    """
    Percent of each daily target reached, capped at 100.

    A missing entry or a non-positive target reports 0 for that macro.
    """
    pairs = {
        "protein": (entry.total_protein if entry else None, targets.protein),
        "carbs": (entry.total_carbs if entry else None, targets.carbs),
        "fat": (entry.total_fat if entry else None, targets.fat),
        "calories": (entry.total_calories if entry else None, targets.calories),
    }
    progress: dict[str, float] = {}
    for name, (value, target) in pairs.items():
        if target <= 0:
            progress[name] = 0.0
        else:
            progress[name] = min(100.0, (value or 0.0) / target * 100)
    return progress


def nutrition_trend(
    entries: Iterable[NutritionLogEntry],
    window: PeriodWindow,
    trainee_id: str | None = None,
) -> list[tuple[date, Macros]]:
    """Daily totals inside the window, oldest first (chart data)."""
    days = _in_window(entries, window, trainee_id)
    points = [
        (
            as_date(d.date),
            Macros(
                protein=d.total_protein or 0.0,
                carbs=d.total_carbs or 0.0,
                fat=d.total_fat or 0.0,
                calories=d.total_calories or 0.0,
            ),
        )
        for d in days
    ]
    return sorted(points, key=lambda p: p[0])
