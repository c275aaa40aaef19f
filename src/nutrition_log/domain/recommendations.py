"""Domain models for nutrient gaps and food recommendations."""

from dataclasses import dataclass
from typing import Literal

Priority = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class NutrientGap:
    """Shortfall between current intake and the goal for one nutrient."""

    current: float
    goal: float
    remaining: float
    percentage: float
    priority: Priority


@dataclass(frozen=True)
class RecommendationReason:
    """An open gap that a recommended food helps close."""

    nutrient: str
    current: float
    goal: float
    remaining: float
    percentage: float


@dataclass(frozen=True)
class NutrientHighlight:
    """Amount of a nutrient a recommended food supplies."""

    nutrient: str
    amount: float
    unit: str


@dataclass(frozen=True)
class Recommendation:
    """A scored food suggestion with its justification."""

    food_id: str
    display_name: str
    score: float
    reasons: tuple[RecommendationReason, ...]
    highlights: tuple[NutrientHighlight, ...]
