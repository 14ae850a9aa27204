"""
Data models for fitlog.

Raw records (set entries, workout logs, body-weight readings, foods and
daily nutrition totals) as supplied by the data-access layer, plus the
derived records the engine hands back to the presentation layer.

Dates are ``datetime.date`` or naive ``datetime.datetime`` values; a bare
date is treated as midnight when compared with a window boundary.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Literal, Union

Day = Union[date, datetime]
MacroAxis = Literal["protein", "carbs", "fat"]
QualityTier = Literal["excellent", "fair", "poor", "none"]


def as_datetime(moment: Day) -> datetime:
    """Promote a bare date to midnight; datetimes pass through unchanged."""
    if isinstance(moment, datetime):
        return moment
    return datetime(moment.year, moment.month, moment.day)


def as_date(moment: Day) -> date:
    """Drop the time component of a datetime."""
    if isinstance(moment, datetime):
        return moment.date()
    return moment


@dataclass(frozen=True)
class SetEntry:
    """
    A single logged set.

    Immutable once logged; belongs to exactly one WorkoutLog.
    ``date`` may be omitted, in which case the owning log's date applies.
    """

    exercise_id: str
    weight_kg: float
    reps: int
    rir: int | None = None
    date: Day | None = None

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.weight_kg < 0:
            raise ValueError("weight_kg must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.rir is not None and self.rir < 0:
            raise ValueError("rir must be non-negative")

    @property
    def volume(self) -> float:
        """Load moved in this set (weight × reps)."""
        return self.weight_kg * self.reps


@dataclass
class WorkoutLog:
    """
    A finished (or abandoned) training session owned by one trainee.

    Only logs with ``completed=True`` count towards analytics.
    """

    id: str
    trainee_id: str
    date: Day
    routine_id: str | None = None
    completed: bool = True
    start_time: datetime | None = None
    end_time: datetime | None = None
    sets: list[SetEntry] = field(default_factory=list)

    def set_date(self, entry: SetEntry) -> Day:
        """Date a set was performed: its own date, else the log's."""
        return entry.date if entry.date is not None else self.date


@dataclass(frozen=True)
class BodyWeightEntry:
    """One body-weight submission."""

    trainee_id: str
    date: Day
    weight_kg: float

    def __post_init__(self) -> None:
        if self.weight_kg <= 0:
            raise ValueError("weight_kg must be positive")


@dataclass(frozen=True)
class FoodItem:
    """
    A catalog food with macros per 100 g.

    ``category`` partitions the swap universe: conversions are only valid
    between items of identical category.
    """

    id: str
    name: str
    category: str
    protein_per_100g: float
    carbs_per_100g: float
    fat_per_100g: float

    def __post_init__(self) -> None:
        for name in ("protein_per_100g", "carbs_per_100g", "fat_per_100g"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    def per_100g(self, axis: MacroAxis) -> float:
        """Grams of the given macro per 100 g of this food."""
        return getattr(self, f"{axis}_per_100g")


@dataclass(frozen=True)
class NutritionLogEntry:
    """
    Daily nutrition totals for one trainee.

    Totals grow by successive additions (see core.nutrition.accumulate_nutrition).
    A ``None`` total means the day was never filled in for that macro.
    """

    trainee_id: str
    date: Day
    total_protein: float | None = 0.0
    total_carbs: float | None = 0.0
    total_fat: float | None = 0.0
    total_calories: float | None = 0.0

    @property
    def is_complete(self) -> bool:
        """True when every total is present."""
        return None not in (
            self.total_protein,
            self.total_carbs,
            self.total_fat,
            self.total_calories,
        )


@dataclass(frozen=True)
class PeriodWindow:
    """
    Half-open time range ``[start, end)``.

    ``start=None`` / ``end=None`` mean unbounded on that side (the "all"
    filter). An *empty* window contains nothing; it is what precedes an
    unbounded window.
    """

    start: datetime | None = None
    end: datetime | None = None
    empty: bool = False

    @classmethod
    def unbounded(cls) -> "PeriodWindow":
        return cls(start=None, end=None)

    @classmethod
    def make_empty(cls) -> "PeriodWindow":
        return cls(start=None, end=None, empty=True)

    @property
    def duration(self) -> timedelta | None:
        """Length of a bounded window, else None."""
        if self.empty or self.start is None or self.end is None:
            return None
        return self.end - self.start

    def contains(self, moment: Day) -> bool:
        """Check ``start <= moment < end`` with None bounds open."""
        if self.empty:
            return False
        when = as_datetime(moment)
        if self.start is not None and when < self.start:
            return False
        if self.end is not None and when >= self.end:
            return False
        return True


@dataclass(frozen=True)
class Macros:
    """Macronutrient amounts in grams plus derived calories."""

    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    calories: float = 0.0

    def __sub__(self, other: "Macros") -> "Macros":
        return Macros(
            protein=self.protein - other.protein,
            carbs=self.carbs - other.carbs,
            fat=self.fat - other.fat,
            calories=self.calories - other.calories,
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "calories": self.calories,
        }


@dataclass(frozen=True)
class MatchQuality:
    """Discrete verdict on how well a swap preserves macros."""

    score: float  # 0..1, 1 = identical macros
    tier: QualityTier
    message: str


@dataclass(frozen=True)
class SwapResult:
    """Outcome of a macro-preserving food swap."""

    target_amount: float
    source_macros: Macros
    target_macros: Macros
    differences: Macros  # target − source, signed
    match_quality: MatchQuality


@dataclass(frozen=True)
class PersonalRecordEvent:
    """
    A new per-exercise maximum relative to a positive previous baseline.

    Derived, never persisted.
    """

    trainee_id: str
    exercise_id: str
    new_weight: float
    previous_weight: float
    date: Day

    def __post_init__(self) -> None:
        if not self.new_weight > self.previous_weight > 0:
            raise ValueError(
                "PersonalRecordEvent requires new_weight > previous_weight > 0, "
                f"got {self.new_weight} / {self.previous_weight}"
            )

    @property
    def improvement_kg(self) -> float:
        return self.new_weight - self.previous_weight


@dataclass(frozen=True)
class ComplianceResult:
    """Completed-vs-target workouts for a period."""

    completed: int
    target: int
    percent: int

    def __post_init__(self) -> None:
        if not 0 <= self.percent <= 100:
            raise ValueError(f"percent must be within [0, 100], got {self.percent}")


@dataclass(frozen=True)
class ExerciseExtrema:
    """Heaviest and lightest logged set for one exercise inside a window."""

    exercise_id: str
    max_weight: float
    reps_at_max: int
    min_weight: float
    best_date: Day
    set_count: int


@dataclass(frozen=True)
class TraineeTotals:
    """Work done by one trainee inside a window."""

    trainee_id: str
    workout_count: int = 0
    exercise_count: int = 0
    total_volume: float = 0.0


@dataclass(frozen=True)
class OneRepMaxPoint:
    """One point of a strength-trend series."""

    date: Day
    one_rm: float


@dataclass(frozen=True)
class LeaderboardEntry:
    """A trainee's place on the leaderboard."""

    trainee_id: str
    score: float
    compliance: int
    workout_count: int
    pr_count: int


@dataclass(frozen=True)
class BodyWeightSummary:
    """Headline body-weight numbers for dashboards."""

    current: float | None
    initial: float | None
    change: float | None
    recent_average: float | None
    entries: int


@dataclass(frozen=True)
class NutritionTargets:
    """Daily intake goals."""

    fluids_ml: int
    protein: float
    carbs: float
    fat: float
    calories: float


@dataclass(frozen=True)
class NutritionStats:
    """Average daily intake over a window and closeness to targets."""

    average_calories: float | None
    average_protein: float | None
    average_carbs: float | None
    average_fat: float | None
    compliance: int


# =============================================================================
# WORKOUT DRAFTS
# =============================================================================


@dataclass(frozen=True)
class ExerciseDraft:
    """
    Canonical in-progress entry for one exercise.

    Fields hold the raw text the trainee typed, so partially entered values
    survive a reload untouched.
    """

    weight: str = ""
    reps: str = ""
    rir: str = "1"
    is_complete: bool = False


@dataclass(frozen=True)
class CurrentDraft:
    """Cached entry already in the single-set shape."""

    draft: ExerciseDraft


@dataclass(frozen=True)
class LegacyMultiSetDraft:
    """Cached entry from the older one-row-per-set format."""

    sets: tuple[tuple[str, str, str], ...]  # (weight, reps, rir) as typed
    is_complete: bool = False


@dataclass(frozen=True)
class CorruptDraft:
    """Cached entry that could not be understood."""

    reason: str


DraftVariant = Union[CurrentDraft, LegacyMultiSetDraft, CorruptDraft]
