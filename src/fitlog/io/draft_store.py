"""
Per-routine workout draft storage.

Each routine's in-progress entries live in ``workout_backup_<routine_id>.json``
inside the draft directory. Reads always succeed: a missing or damaged file
yields empty drafts for the routine's exercises.
"""

import logging
import time
from pathlib import Path
from typing import Iterable, Mapping
from urllib.parse import quote

from ..core.config import DRAFT_FILE_PREFIX, DRAFT_MAX_AGE_MS
from ..core.models import ExerciseDraft
from .serializers import drafts_to_json, json_to_drafts

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class DraftStore:
    """Manages cached workout drafts, one file per routine."""

    def __init__(self, directory: str | Path):
        """
        Args:
            directory: Folder holding the draft files
        """
        self.directory = Path(directory)

    def path_for(self, routine_id: str) -> Path:
        """
        File that holds the drafts for ``routine_id``.

        The id is percent-encoded so distinct routines never share a file.
        """
        safe = quote(routine_id, safe="")
        return self.directory / f"{DRAFT_FILE_PREFIX}{safe}.json"

    def load(
        self,
        routine_id: str,
        exercise_ids: Iterable[str] = (),
        now: int | None = None,
        max_age_ms: int = DRAFT_MAX_AGE_MS,
    ) -> dict[str, ExerciseDraft]:
        """
        Load and migrate the drafts for a routine.

        Args:
            routine_id: Routine whose drafts to read
            exercise_ids: Exercises in the routine (see core.drafts.migrate_draft)
            now: Current time in epoch ms (defaults to the wall clock)
            max_age_ms: Expiry for whole-session backups

        Returns:
            Dict exercise_id -> ExerciseDraft
        """
        path = self.path_for(routine_id)
        text: str | None = None
        if path.exists():
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Could not read draft file %s: %s", path, e)
        return json_to_drafts(
            text,
            exercise_ids,
            now_ms=now_ms() if now is None else now,
            max_age_ms=max_age_ms,
        )

    def save(self, routine_id: str, drafts: Mapping[str, ExerciseDraft]) -> Path:
        """
        Persist drafts in the current single-set format.

        Returns:
            Path written
        """
        path = self.path_for(routine_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(drafts_to_json(drafts), encoding="utf-8")
        return path

    def clear(self, routine_id: str) -> None:
        """Remove a routine's drafts (after the workout is submitted)."""
        path = self.path_for(routine_id)
        if path.exists():
            path.unlink()


def get_default_draft_dir() -> Path:
    """Default draft directory (~/.fitlog/drafts)."""
    return Path.home() / ".fitlog" / "drafts"
