"""
JSON-based dataset storage.

A dataset file holds everything the analytics engine reads for a cohort:

    {
      "workout_logs":   [ {...}, ... ],
      "body_weights":   [ {...}, ... ],
      "nutrition_logs": [ {...}, ... ],
      "foods":          [ {...}, ... ],
      "weekly_targets": {"<trainee_id>": 4, ...}
    }

Every section is optional.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeVar

from ..core.models import (
    BodyWeightEntry,
    FoodItem,
    NutritionLogEntry,
    WorkoutLog,
    as_date,
)
from .serializers import (
    ValidationError,
    bodyweight_entry_to_dict,
    dict_to_bodyweight_entry,
    dict_to_food_item,
    dict_to_nutrition_entry,
    dict_to_workout_log,
    food_item_to_dict,
    nutrition_entry_to_dict,
    validate_positive,
    workout_log_to_dict,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Dataset:
    """Everything loaded from one dataset file."""

    workout_logs: list[WorkoutLog] = field(default_factory=list)
    body_weights: list[BodyWeightEntry] = field(default_factory=list)
    nutrition_logs: list[NutritionLogEntry] = field(default_factory=list)
    foods: list[FoodItem] = field(default_factory=list)
    weekly_targets: dict[str, int] = field(default_factory=dict)

    def trainee_ids(self) -> list[str]:
        """Every trainee mentioned anywhere in the dataset, sorted."""
        ids = {log.trainee_id for log in self.workout_logs}
        ids.update(e.trainee_id for e in self.body_weights)
        ids.update(e.trainee_id for e in self.nutrition_logs)
        ids.update(self.weekly_targets)
        return sorted(ids)

    def food(self, food_id: str) -> FoodItem | None:
        """Find a catalog food by id or (case-insensitive) name."""
        for item in self.foods:
            if item.id == food_id:
                return item
        wanted = food_id.strip().lower()
        for item in self.foods:
            if item.name.lower() == wanted:
                return item
        return None

    def bodyweights_for(self, trainee_id: str) -> list[BodyWeightEntry]:
        return [e for e in self.body_weights if e.trainee_id == trainee_id]


def _parse_section(
    raw: dict[str, Any],
    key: str,
    convert: Callable[[Any], T],
    path: Path,
) -> list[T]:
    items = raw.get(key, [])
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError(f"'{key}' in {path} must be a list")
    parsed: list[T] = []
    for index, item in enumerate(items):
        try:
            parsed.append(convert(item))
        except (ValidationError, ValueError, TypeError) as e:
            raise ValidationError(f"Error parsing {key}[{index}] in {path}: {e}") from e
    return parsed


def _parse_targets(raw: Any, path: Path) -> dict[str, int]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError(f"'weekly_targets' in {path} must be an object")
    targets: dict[str, int] = {}
    for trainee_id, target in raw.items():
        try:
            targets[str(trainee_id)] = int(validate_positive(target, f"weekly_targets[{trainee_id}]"))
        except ValidationError as e:
            raise ValidationError(f"{e} in {path}") from e
    return targets


class DatasetStore:
    """
    Manages a cohort dataset stored as a single JSON document.
    """

    def __init__(self, dataset_path: str | Path):
        """
        Initialize the dataset store.

        Args:
            dataset_path: Path to the dataset JSON file
        """
        self.dataset_path = Path(dataset_path)

    def exists(self) -> bool:
        """Check if the dataset file exists."""
        return self.dataset_path.exists()

    def init(self) -> None:
        """
        Create an empty dataset file if it doesn't exist.

        Creates parent directories if needed.
        """
        self.dataset_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.dataset_path.exists():
            self.save(Dataset())

    def load(self) -> Dataset:
        """
        Load the dataset.

        Returns:
            Dataset with logs sorted by date

        Raises:
            FileNotFoundError: If the dataset file doesn't exist
            ValidationError: If the file is not valid JSON or a record is invalid
        """
        if not self.dataset_path.exists():
            raise FileNotFoundError(f"Dataset file not found: {self.dataset_path}")

        try:
            with open(self.dataset_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(f"Error parsing {self.dataset_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ValidationError(f"{self.dataset_path} must contain a JSON object")

        path = self.dataset_path
        dataset = Dataset(
            workout_logs=_parse_section(raw, "workout_logs", dict_to_workout_log, path),
            body_weights=_parse_section(raw, "body_weights", dict_to_bodyweight_entry, path),
            nutrition_logs=_parse_section(raw, "nutrition_logs", dict_to_nutrition_entry, path),
            foods=_parse_section(raw, "foods", dict_to_food_item, path),
            weekly_targets=_parse_targets(raw.get("weekly_targets"), path),
        )
        dataset.workout_logs.sort(key=lambda log: as_date(log.date))
        logger.debug(
            "Loaded %d workout logs, %d body weights, %d nutrition days, %d foods from %s",
            len(dataset.workout_logs),
            len(dataset.body_weights),
            len(dataset.nutrition_logs),
            len(dataset.foods),
            path,
        )
        return dataset

    def save(self, dataset: Dataset) -> None:
        """
        Write the whole dataset back to disk.

        Args:
            dataset: Dataset to persist
        """
        data = {
            "workout_logs": [workout_log_to_dict(log) for log in dataset.workout_logs],
            "body_weights": [bodyweight_entry_to_dict(e) for e in dataset.body_weights],
            "nutrition_logs": [nutrition_entry_to_dict(e) for e in dataset.nutrition_logs],
            "foods": [food_item_to_dict(f) for f in dataset.foods],
            "weekly_targets": dict(dataset.weekly_targets),
        }
        self.dataset_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.dataset_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


def get_default_dataset_path() -> Path:
    """
    Get the default dataset file path.

    Returns:
        ~/.fitlog/dataset.json
    """
    return Path.home() / ".fitlog" / "dataset.json"
