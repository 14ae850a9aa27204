"""
Pure analytics engine.

Every function takes in-memory records and returns derived records;
nothing in this package touches files, the network or the clock.
"""

from .drafts import migrate_draft
from .metrics import compute_compliance, one_rep_max
from .nutrition import CategoryMismatchError, compute_swap
from .periods import previous_window, resolve_window
from .ranking import rank_cohort
from .records import detect_cohort_records, detect_personal_records

__all__ = [
    "CategoryMismatchError",
    "compute_compliance",
    "compute_swap",
    "detect_cohort_records",
    "detect_personal_records",
    "migrate_draft",
    "one_rep_max",
    "previous_window",
    "rank_cohort",
    "resolve_window",
]
