"""Quantity-weighted aggregation of nutrient profiles."""

import logging
import math
from collections.abc import Callable, Iterable

from nutrition_log.domain.days import DayLog, FoodReference
from nutrition_log.domain.nutrition import (
    NUTRIENT_FIELDS,
    NutrientProfile,
    NutrientTotals,
)

ProfileLookup = Callable[[str], NutrientProfile | None]

_logger = logging.getLogger(__name__)


def aggregate(
    items: Iterable[FoodReference] | DayLog, lookup: ProfileLookup
) -> NutrientTotals:
    """Sum nutrient profiles weighted by quantity.

    Unknown foods and malformed quantities or profile values contribute
    nothing; a single bad reference never aborts the aggregate. A day log is
    aggregated over all three meal buckets.
    """
    references = items.items() if isinstance(items, DayLog) else items
    sums = dict.fromkeys(NUTRIENT_FIELDS, 0.0)
    for item in references:
        qty = _usable_quantity(item)
        if qty == 0.0:
            continue
        profile = _resolve(lookup, item.food_id)
        if profile is None:
            continue
        for name in NUTRIENT_FIELDS:
            contribution = profile.value(name) * qty
            if math.isfinite(contribution):
                sums[name] += contribution
    return NutrientTotals(
        **{name: value if math.isfinite(value) else 0.0 for name, value in sums.items()}
    )


def mapping_lookup(profiles: dict[str, NutrientProfile]) -> ProfileLookup:
    """Build a lookup over an explicit food id to profile mapping."""
    return profiles.get


def _usable_quantity(item: FoodReference) -> float:
    qty = item.qty
    if isinstance(qty, bool) or not isinstance(qty, int | float):
        _logger.warning("Ignoring non-numeric quantity for %s", item.food_id)
        return 0.0
    if not math.isfinite(qty) or qty < 0:
        _logger.warning("Ignoring invalid quantity %s for %s", qty, item.food_id)
        return 0.0
    return float(qty)


def _resolve(lookup: ProfileLookup, food_id: str) -> NutrientProfile | None:
    try:
        return lookup(food_id)
    except Exception:
        _logger.warning("Profile lookup failed for %s", food_id, exc_info=True)
        return None
