"""Domain models for day logs."""

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from typing import Literal
from uuid import UUID

MealBucket = Literal["breakfast", "lunch", "dinner"]

MEAL_BUCKETS: tuple[MealBucket, ...] = ("breakfast", "lunch", "dinner")
DEFAULT_MEAL: MealBucket = "dinner"


@dataclass(frozen=True)
class FoodReference:
    """A logged food and the multiplier applied to its nutrient profile."""

    food_id: str
    qty: float = 1.0
    serving_override: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class DayLog:
    """Foods logged on one date, grouped into the three meal buckets."""

    breakfast: tuple[FoodReference, ...] = ()
    lunch: tuple[FoodReference, ...] = ()
    dinner: tuple[FoodReference, ...] = ()

    @classmethod
    def empty(cls) -> "DayLog":
        """Return a day with no items."""
        return cls()

    def bucket(self, meal: MealBucket) -> tuple[FoodReference, ...]:
        """Return the items of one meal bucket."""
        return getattr(self, meal)

    def items(self) -> Iterator[FoodReference]:
        """Iterate all items, breakfast first."""
        for meal in MEAL_BUCKETS:
            yield from self.bucket(meal)

    def item_count(self) -> int:
        """Return the number of items across all buckets."""
        return sum(len(self.bucket(meal)) for meal in MEAL_BUCKETS)

    def bucket_counts(self) -> dict[str, int]:
        """Return the number of items per meal bucket."""
        return {meal: len(self.bucket(meal)) for meal in MEAL_BUCKETS}

    def is_empty(self) -> bool:
        """Return True when no bucket has items."""
        return self.item_count() == 0

    def with_item(self, meal: MealBucket, item: FoodReference) -> "DayLog":
        """Return a copy with an item appended to a bucket."""
        return replace(self, **{meal: (*self.bucket(meal), item)})


@dataclass(frozen=True)
class DayRecord:
    """Persisted day row for a user and date."""

    id: UUID
    user_id: UUID
    day_date: str


@dataclass(frozen=True)
class DayItem:
    """Persisted line item of a day."""

    food_id: str
    qty: float
    meal: MealBucket
    serving_override: str | None = None


def normalize_meal(value: object) -> MealBucket:
    """Map stored meal metadata onto a bucket, defaulting to dinner."""
    if isinstance(value, str) and value in MEAL_BUCKETS:
        return value  # type: ignore[return-value]
    return DEFAULT_MEAL


def day_log_from_items(items: list[DayItem]) -> DayLog:
    """Group persisted items into a day log, keeping insertion order."""
    buckets: dict[str, list[FoodReference]] = {meal: [] for meal in MEAL_BUCKETS}
    for item in items:
        buckets[normalize_meal(item.meal)].append(
            FoodReference(
                food_id=item.food_id,
                qty=item.qty,
                serving_override=item.serving_override,
            )
        )
    return DayLog(**{meal: tuple(refs) for meal, refs in buckets.items()})


def day_log_to_items(day: DayLog) -> list[DayItem]:
    """Flatten a day log into persistable items."""
    return [
        DayItem(
            food_id=ref.food_id,
            qty=ref.qty,
            meal=meal,
            serving_override=ref.serving_override,
        )
        for meal in MEAL_BUCKETS
        for ref in day.bucket(meal)
    ]


def day_log_from_payload(payload: object) -> DayLog:
    """Parse the plain JSON meal shape.

    Accepts ``{"breakfast": [{"name": ..., "qty": ...}], ...}`` and the legacy
    flat list of items, which is placed in the dinner bucket.
    """
    if payload is None:
        return DayLog.empty()
    if isinstance(payload, list):
        payload = {DEFAULT_MEAL: payload}
    if not isinstance(payload, dict):
        raise ValueError("Day payload must be an object or a list")
    buckets: dict[str, tuple[FoodReference, ...]] = {}
    for meal in MEAL_BUCKETS:
        raw_items = payload.get(meal) or []
        if not isinstance(raw_items, list):
            raise ValueError(f"Meal '{meal}' must be a list")
        buckets[meal] = tuple(_reference_from_payload(raw) for raw in raw_items)
    return DayLog(**buckets)


def day_log_to_payload(day: DayLog) -> dict[str, list[dict[str, object]]]:
    """Serialize a day log into the plain JSON meal shape."""
    payload: dict[str, list[dict[str, object]]] = {}
    for meal in MEAL_BUCKETS:
        entries = []
        for ref in day.bucket(meal):
            entry: dict[str, object] = {"name": ref.food_id, "qty": ref.qty}
            if ref.serving_override:
                entry["serving_override"] = ref.serving_override
            entries.append(entry)
        payload[meal] = entries
    return payload


def _reference_from_payload(raw: object) -> FoodReference:
    if not isinstance(raw, dict):
        raise ValueError("Meal item must be an object")
    food_id = raw.get("name") or raw.get("food_id")
    if not isinstance(food_id, str) or not food_id:
        raise ValueError("Meal item needs a food name")
    qty = raw.get("qty", 1)
    if isinstance(qty, bool) or not isinstance(qty, int | float):
        raise ValueError(f"Invalid quantity for '{food_id}'")
    serving_override = raw.get("serving_override")
    return FoodReference(
        food_id=food_id,
        qty=float(qty),
        serving_override=(
            serving_override if isinstance(serving_override, str) else None
        ),
    )
