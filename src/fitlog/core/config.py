"""
Configuration constants for the analytics engine.

All adjustable parameters are centralized here for easy tuning.
Values can be overridden at runtime through AnalyticsSettings
(see fitlog/io/config_loader.py and the bundled analytics.yaml).
"""

from typing import Final

# =============================================================================
# PERIOD WINDOWS
# =============================================================================

PERIOD_FILTERS: Final[tuple[str, ...]] = (
    "today",
    "week",
    "month",
    "3months",
    "6months",
    "year",
    "all",
)

# Python weekday numbering (Monday=0 ... Sunday=6)
SUNDAY: Final[int] = 6
MONDAY: Final[int] = 0
WEEK_START_DAY: Final[int] = SUNDAY  # Week begins on Sunday in the reference locale

# =============================================================================
# ONE-REP-MAX (Brzycki)
# =============================================================================

BRZYCKI_INTERCEPT: Final[float] = 1.0278
BRZYCKI_SLOPE: Final[float] = 0.0278

# =============================================================================
# COMPLIANCE
# =============================================================================

DEFAULT_WEEKLY_TARGET: Final[int] = 5  # Used when the trainee has no active program

# =============================================================================
# PERFORMANCE RANKING
# =============================================================================

RANK_COMPLIANCE_WEIGHT: Final[float] = 0.5
RANK_WORKOUT_WEIGHT: Final[float] = 10.0
RANK_PR_WEIGHT: Final[float] = 20.0

# =============================================================================
# NUTRITION
# =============================================================================

KCAL_PER_G_PROTEIN: Final[float] = 4.0
KCAL_PER_G_CARBS: Final[float] = 4.0
KCAL_PER_G_FAT: Final[float] = 9.0

MACRO_AXES: Final[tuple[str, ...]] = ("protein", "carbs", "fat")

# Category label -> macro that defines the category
CATEGORY_AXES: Final[dict[str, str]] = {
    "protein": "protein",
    "meat": "protein",
    "fish": "protein",
    "poultry": "protein",
    "dairy": "protein",
    "eggs": "protein",
    "carbs": "carbs",
    "bread": "carbs",
    "grains": "carbs",
    "starch": "carbs",
    "fruit": "carbs",
    "fat": "fat",
    "fats": "fat",
    "nuts": "fat",
    "oils": "fat",
}

MATCH_EXCELLENT_THRESHOLD: Final[float] = 0.90
MATCH_FAIR_THRESHOLD: Final[float] = 0.70

MATCH_MESSAGES: Final[dict[str, str]] = {
    "excellent": "Excellent match - macros are nearly identical",
    "fair": "Fair match - small macro differences",
    "poor": "Poor match - consider a different food",
    "none": "—",
}

# Default daily targets when the trainee has no nutrition menu
DEFAULT_TARGET_FLUIDS_ML: Final[int] = 3000
DEFAULT_TARGET_PROTEIN_G: Final[float] = 200.0
DEFAULT_TARGET_CARBS_G: Final[float] = 300.0
DEFAULT_TARGET_FAT_G: Final[float] = 100.0
DEFAULT_TARGET_CALORIES: Final[float] = 3000.0

# =============================================================================
# BODY WEIGHT
# =============================================================================

BODYWEIGHT_MAX_KG: Final[float] = 500.0  # Anything above is treated as a typo
BODYWEIGHT_RECENT_ENTRIES: Final[int] = 7  # Entries used for the recent average

# =============================================================================
# WORKOUT DRAFTS
# =============================================================================

DRAFT_DEFAULT_RIR: Final[str] = "1"
DRAFT_MAX_AGE_MS: Final[int] = 24 * 60 * 60 * 1000  # Backups older than 24 h are stale
DRAFT_FILE_PREFIX: Final[str] = "workout_backup_"
