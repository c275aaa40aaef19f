"""Gap analysis between nutrient totals and goals."""

import math
from collections.abc import Mapping

from nutrition_log.domain.nutrition import NutrientTotals
from nutrition_log.domain.recommendations import NutrientGap, Priority

HIGH_PRIORITY_BELOW = 50.0
MEDIUM_PRIORITY_BELOW = 80.0
SIGNIFICANT_GAP_BELOW = 90.0
MAX_MESSAGES = 3

PRIORITY_RANK: dict[Priority, int] = {"high": 3, "medium": 2, "low": 1}

MESSAGE_UNITS = {
    "calories": "calories",
    "protein": "g protein",
    "carbs": "g carbs",
    "fat": "g fat",
    "fiber": "g fiber",
    "sugar": "g sugar",
    "sodium": "mg sodium",
    "calcium": "mg calcium",
    "iron": "mg iron",
    "potassium": "mg potassium",
    "vitamin_c": "mg vitamin C",
    "vitamin_a": "mcg vitamin A",
    "vitamin_d": "mcg vitamin D",
    "cholesterol": "mg cholesterol",
}


def priority_for(percentage: float) -> Priority:
    """Classify how urgent a gap is from its percentage of goal."""
    if percentage < HIGH_PRIORITY_BELOW:
        return "high"
    if percentage < MEDIUM_PRIORITY_BELOW:
        return "medium"
    return "low"


def analyze_gaps(
    totals: NutrientTotals | Mapping[str, float], goals: Mapping[str, float]
) -> dict[str, NutrientGap]:
    """Compare totals against goals for every nutrient that has a goal."""
    gaps: dict[str, NutrientGap] = {}
    for nutrient, goal in goals.items():
        current = float(totals.get(nutrient, 0.0) or 0.0)
        if not math.isfinite(current):
            current = 0.0
        if not is_valid_goal(goal):
            gaps[nutrient] = NutrientGap(
                current=current,
                goal=goal,
                remaining=0.0,
                percentage=0.0,
                priority="low",
            )
            continue
        percentage = current / goal * 100
        gaps[nutrient] = NutrientGap(
            current=current,
            goal=goal,
            remaining=max(0.0, goal - current),
            percentage=percentage,
            priority=priority_for(percentage),
        )
    return gaps


def rank_open_gaps(gaps: Mapping[str, NutrientGap]) -> list[tuple[str, NutrientGap]]:
    """Return gaps with something remaining, most urgent first."""
    open_gaps = [(name, gap) for name, gap in gaps.items() if gap.remaining > 0]
    return sorted(
        open_gaps,
        key=lambda entry: (PRIORITY_RANK[entry[1].priority], entry[1].remaining),
        reverse=True,
    )


def generate_messages(gaps: Mapping[str, NutrientGap]) -> list[str]:
    """Render the most urgent gaps as short suggestions."""
    messages: list[str] = []
    for nutrient, gap in rank_open_gaps(gaps)[:MAX_MESSAGES]:
        unit = MESSAGE_UNITS.get(nutrient, nutrient)
        remaining = _round_half_up(gap.remaining)
        if gap.priority == "high":
            messages.append(f"You need {remaining} more {unit} to reach your goal")
        elif gap.priority == "medium":
            messages.append(f"Consider adding {remaining} more {unit}")
    return messages


def has_significant_gaps(gaps: Mapping[str, NutrientGap]) -> bool:
    """Return True when any goal is still clearly short."""
    return any(
        gap.remaining > 0 and gap.percentage < SIGNIFICANT_GAP_BELOW
        for gap in gaps.values()
    )


def is_valid_goal(goal: object) -> bool:
    """Return True for a finite, positive goal."""
    if isinstance(goal, bool) or not isinstance(goal, int | float):
        return False
    return math.isfinite(goal) and goal > 0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
