"""User settings and nutrient goals."""

import logging
import math
from dataclasses import dataclass, field, fields, replace
from typing import Protocol
from uuid import UUID

from nutrition_log.domain.models import GOAL_COLUMNS, UserSettings
from nutrition_log.domain.nutrition import NutrientGoals
from nutrition_log.errors import StoreUnavailableError, TableMissingError

CALORIES_PER_GRAM = {"daily_protein": 4, "daily_carbs": 4, "daily_fat": 9}
SETTING_KEYS = frozenset(item.name for item in fields(UserSettings))

_logger = logging.getLogger(__name__)


class UserSettingsRepository(Protocol):
    """Persistence interface for user settings."""

    def get_settings(self, user_id: UUID) -> UserSettings | None:
        """Return the user's settings row, if present."""

    def create_settings(self, user_id: UUID) -> UserSettings:
        """Create a settings row with column defaults and return it."""

    def update_settings(
        self, user_id: UUID, updates: dict[str, object]
    ) -> UserSettings:
        """Apply updates to the user's settings and return the result."""


@dataclass
class UserSettingsService:
    """Service for per-user goals and preferences."""

    repository: UserSettingsRepository
    goal_overrides: dict[str, float] = field(default_factory=dict)

    def defaults(self) -> UserSettings:
        """Return default settings with configured goal overrides applied."""
        columns = {
            column: self.goal_overrides[nutrient]
            for column, nutrient in GOAL_COLUMNS.items()
            if nutrient in self.goal_overrides
        }
        return replace(UserSettings(), **columns)

    def get_settings(self, user_id: UUID) -> UserSettings:
        """Return the user's settings, creating the row on first access."""
        try:
            settings = self.repository.get_settings(user_id)
            if settings is None:
                settings = self.repository.create_settings(user_id)
        except TableMissingError:
            return self.defaults()
        except Exception:
            _logger.exception("Loading settings failed: user_id=%s", user_id)
            return self.defaults()
        return settings

    def get_goals(self, user_id: UUID) -> NutrientGoals:
        """Return the nutrient goals for a user."""
        return self.get_settings(user_id).goals()

    def update_settings(
        self, user_id: UUID, updates: dict[str, object]
    ) -> UserSettings:
        """Validate and persist a partial settings update."""
        cleaned = _clean_updates(updates)
        try:
            return self.repository.update_settings(user_id, cleaned)
        except TableMissingError:
            _logger.warning("Settings table missing; update not persisted")
            return replace(self.get_settings(user_id), **cleaned)
        except Exception as exc:
            raise StoreUnavailableError("Could not update settings") from exc


def recalculate_calories(settings: UserSettings) -> UserSettings:
    """Return settings whose calorie goal matches the macro goals."""
    calories = sum(
        getattr(settings, column) * factor
        for column, factor in CALORIES_PER_GRAM.items()
    )
    return replace(settings, daily_calories=float(round(calories)))


def _clean_updates(updates: dict[str, object]) -> dict[str, object]:
    unknown = set(updates) - SETTING_KEYS
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
    cleaned: dict[str, object] = {}
    for key, value in updates.items():
        if key in GOAL_COLUMNS:
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise ValueError(f"{key} must be a number")
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{key} must be positive")
            cleaned[key] = float(value)
        else:
            if not isinstance(value, str) or not value:
                raise ValueError(f"{key} must be a non-empty string")
            cleaned[key] = value
    return cleaned
