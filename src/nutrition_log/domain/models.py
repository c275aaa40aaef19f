"""Domain models for users and their settings."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from nutrition_log.domain.nutrition import DEFAULT_GOALS, NutrientGoals, NutrientProfile

GOAL_COLUMNS = {
    "daily_calories": "calories",
    "daily_protein": "protein",
    "daily_carbs": "carbs",
    "daily_fat": "fat",
    "daily_fiber": "fiber",
    "daily_sodium": "sodium",
}


@dataclass(frozen=True)
class UserRecord:
    """Represents an authenticated user."""

    id: UUID
    email: str | None = None


@dataclass(frozen=True)
class UserSettings:
    """Per-user daily targets and profile choices."""

    daily_calories: float = DEFAULT_GOALS["calories"]
    daily_protein: float = DEFAULT_GOALS["protein"]
    daily_carbs: float = DEFAULT_GOALS["carbs"]
    daily_fat: float = DEFAULT_GOALS["fat"]
    daily_fiber: float = DEFAULT_GOALS["fiber"]
    daily_sodium: float = DEFAULT_GOALS["sodium"]
    weight_goal: str = "maintain"
    activity_level: str = "moderate"

    def goals(self) -> NutrientGoals:
        """Return the settings as nutrient goals."""
        return {
            nutrient: float(getattr(self, column))
            for column, nutrient in GOAL_COLUMNS.items()
        }


@dataclass(frozen=True)
class RecentFood:
    """A food the user logged recently."""

    food_id: str
    last_used_at: datetime | None
    use_count: int
    profile: NutrientProfile | None = None
