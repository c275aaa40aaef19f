"""Nutrition domain models."""

import math
from dataclasses import dataclass, fields

NUTRIENT_FIELDS = (
    "calories",
    "protein",
    "carbs",
    "fat",
    "fiber",
    "sugar",
    "sodium",
    "calcium",
    "iron",
    "potassium",
    "vitamin_c",
    "vitamin_a",
    "vitamin_d",
    "cholesterol",
)

DEFAULT_GOALS: dict[str, float] = {
    "calories": 2000.0,
    "protein": 150.0,
    "carbs": 250.0,
    "fat": 67.0,
    "fiber": 25.0,
    "sodium": 2300.0,
}

NutrientGoals = dict[str, float]


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient amounts for one serving of a food."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0
    calcium: float = 0.0
    iron: float = 0.0
    potassium: float = 0.0
    vitamin_c: float = 0.0
    vitamin_a: float = 0.0
    vitamin_d: float = 0.0
    cholesterol: float = 0.0
    serving: str | None = None

    def value(self, nutrient: str) -> float:
        """Return a usable amount for a nutrient, 0 when unknown or malformed."""
        if nutrient not in NUTRIENT_FIELDS:
            return 0.0
        return _usable(getattr(self, nutrient))


@dataclass(frozen=True)
class NutrientTotals:
    """Summed nutrient amounts for a set of logged foods."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0
    calcium: float = 0.0
    iron: float = 0.0
    potassium: float = 0.0
    vitamin_c: float = 0.0
    vitamin_a: float = 0.0
    vitamin_d: float = 0.0
    cholesterol: float = 0.0

    def __add__(self, other: "NutrientTotals") -> "NutrientTotals":
        if not isinstance(other, NutrientTotals):
            return NotImplemented
        return NutrientTotals(
            **{
                name: getattr(self, name) + getattr(other, name)
                for name in NUTRIENT_FIELDS
            }
        )

    def __mul__(self, factor: float) -> "NutrientTotals":
        return NutrientTotals(
            **{name: getattr(self, name) * factor for name in NUTRIENT_FIELDS}
        )

    __rmul__ = __mul__

    def get(self, nutrient: str, default: float = 0.0) -> float:
        """Return the total for a nutrient name, or a default for unknown names."""
        if nutrient not in NUTRIENT_FIELDS:
            return default
        return getattr(self, nutrient)

    def as_dict(self) -> dict[str, float]:
        """Return totals keyed by nutrient name."""
        return {field.name: getattr(self, field.name) for field in fields(self)}


@dataclass(frozen=True)
class FoodSummary:
    """Search hit from the food database."""

    id: str
    name: str
    serving: str | None = None


def _usable(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0.0
    number = float(value)
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number
