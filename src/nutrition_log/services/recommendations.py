"""Food recommendations that close open nutrient gaps."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from uuid import UUID

from nutrition_log.domain.nutrition import (
    NutrientGoals,
    NutrientProfile,
    NutrientTotals,
)
from nutrition_log.domain.recommendations import (
    NutrientGap,
    NutrientHighlight,
    Recommendation,
    RecommendationReason,
)
from nutrition_log.services.aggregation import aggregate
from nutrition_log.services.days import DayLogService
from nutrition_log.services.foods import FoodCatalogService
from nutrition_log.services.gaps import (
    analyze_gaps,
    generate_messages,
    has_significant_gaps,
    is_valid_goal,
    rank_open_gaps,
)
from nutrition_log.services.user_settings import UserSettingsService

CALORIE_PENALTY = 50.0
CALORIE_PENALTY_RATIO = 1.5
PRIORITY_MULTIPLIERS = {"high": 2.0, "medium": 1.5, "low": 1.0}
NUTRIENT_WEIGHTS = {
    "calories": 1.0,
    "protein": 1.5,
    "carbs": 1.0,
    "fat": 1.0,
    "fiber": 1.2,
    # excess sodium is undesirable, so filling it counts for less
    "sodium": 0.5,
}
DEFAULT_WEIGHT = 1.0
FILL_SCALE = 10.0
PROTEIN_DENSITY_BONUS = 20.0
FIBER_DENSITY_BONUS = 15.0
REASON_MIN_SHARE = 0.1
MAX_REASONS = 3

HIGHLIGHT_UNITS = {
    "calories": "kcal",
    "protein": "g",
    "carbs": "g",
    "fat": "g",
    "fiber": "g",
    "sugar": "g",
    "sodium": "mg",
    "calcium": "mg",
    "iron": "mg",
    "potassium": "mg",
    "vitamin_c": "mg",
    "vitamin_a": "mcg",
    "vitamin_d": "mcg",
    "cholesterol": "mg",
}

_logger = logging.getLogger(__name__)


def recommend(
    totals: NutrientTotals | Mapping[str, float],
    goals: Mapping[str, float],
    all_foods: Mapping[str, NutrientProfile],
    limit: int,
) -> list[Recommendation]:
    """Rank candidate foods by how well they close the open gaps.

    Candidates that address no open gap are never returned. Equal scores keep
    the iteration order of ``all_foods``.
    """
    if limit < 1:
        raise ValueError("limit must be a positive integer")
    gaps = analyze_gaps(totals, goals)
    remaining_calories = _calorie_budget(gaps)
    ranked_gaps = rank_open_gaps(gaps)

    candidates: list[Recommendation] = []
    for food_id, profile in all_foods.items():
        score = score_food(profile, gaps, remaining_calories)
        reasons, highlights = _justify(profile, ranked_gaps)
        if score <= 0 or not reasons:
            continue
        candidates.append(
            Recommendation(
                food_id=food_id,
                display_name=display_name(food_id, profile),
                score=score,
                reasons=reasons,
                highlights=highlights,
            )
        )
    candidates.sort(key=lambda rec: rec.score, reverse=True)
    return candidates[:limit]


def score_food(
    profile: NutrientProfile,
    gaps: Mapping[str, NutrientGap],
    remaining_calories: float | None = None,
) -> float:
    """Score one food against the gap map; never negative."""
    score = 0.0
    calories = profile.value("calories")
    if (
        remaining_calories is not None
        and calories > remaining_calories * CALORIE_PENALTY_RATIO
    ):
        score -= CALORIE_PENALTY

    for nutrient, gap in gaps.items():
        if gap.remaining <= 0:
            continue
        contribution = min(profile.value(nutrient), gap.remaining)
        fill_ratio = contribution / gap.remaining
        weight = NUTRIENT_WEIGHTS.get(nutrient, DEFAULT_WEIGHT)
        multiplier = PRIORITY_MULTIPLIERS[gap.priority]
        score += fill_ratio * weight * multiplier * FILL_SCALE

    density_calories = max(calories, 1.0)
    score += profile.value("protein") / density_calories * PROTEIN_DENSITY_BONUS
    score += profile.value("fiber") / density_calories * FIBER_DENSITY_BONUS
    return max(0.0, score)


def display_name(food_id: str, profile: NutrientProfile) -> str:
    """Return the label shown for a recommended food."""
    if profile.serving:
        return f"{food_id} ({profile.serving})"
    return food_id


def _calorie_budget(gaps: Mapping[str, NutrientGap]) -> float | None:
    gap = gaps.get("calories")
    if gap is None or not is_valid_goal(gap.goal):
        return None
    return gap.remaining


def _justify(
    profile: NutrientProfile, ranked_gaps: list[tuple[str, NutrientGap]]
) -> tuple[tuple[RecommendationReason, ...], tuple[NutrientHighlight, ...]]:
    reasons: list[RecommendationReason] = []
    highlights: list[NutrientHighlight] = []
    for nutrient, gap in ranked_gaps:
        amount = profile.value(nutrient)
        if amount < gap.remaining * REASON_MIN_SHARE:
            continue
        reasons.append(
            RecommendationReason(
                nutrient=nutrient,
                current=gap.current,
                goal=gap.goal,
                remaining=gap.remaining,
                percentage=gap.percentage,
            )
        )
        highlights.append(
            NutrientHighlight(
                nutrient=nutrient,
                amount=amount,
                unit=HIGHLIGHT_UNITS.get(nutrient, ""),
            )
        )
        if len(reasons) == MAX_REASONS:
            break
    return tuple(reasons), tuple(highlights)


@dataclass(frozen=True)
class RecommendationReport:
    """Totals, gaps and suggestions for one logged day."""

    totals: NutrientTotals
    goals: NutrientGoals
    gaps: dict[str, NutrientGap]
    messages: list[str]
    recommendations: list[Recommendation]
    has_significant_gaps: bool


@dataclass
class RecommendationService:
    """Builds recommendation reports from a user's stored day."""

    day_service: DayLogService
    food_service: FoodCatalogService
    settings_service: UserSettingsService

    async def build_report(
        self, user_id: UUID, day_date: str, limit: int = 6
    ) -> RecommendationReport:
        """Aggregate the day, analyse gaps and rank the catalog."""
        day = await self.day_service.load_day(user_id, day_date)
        catalog = self.food_service.all_foods()
        lookup = self.food_service.profile_lookup(
            {ref.food_id for ref in day.items()}, prefetched=catalog
        )
        totals = aggregate(day, lookup)
        goals = self.settings_service.get_goals(user_id)
        gaps = analyze_gaps(totals, goals)
        recommendations = recommend(totals, goals, catalog, limit)
        _logger.info(
            "Built recommendations: date=%s items=%s suggestions=%s",
            day_date,
            day.item_count(),
            len(recommendations),
        )
        return RecommendationReport(
            totals=totals,
            goals=goals,
            gaps=gaps,
            messages=generate_messages(gaps),
            recommendations=recommendations,
            has_significant_gaps=has_significant_gaps(gaps),
        )
