"""Pydantic models for API request bodies."""

from typing import Literal

from pydantic import BaseModel, Field


class MealItemModel(BaseModel):
    """One logged food in a meal bucket."""

    name: str = Field(min_length=1)
    qty: float = Field(default=1.0, ge=0, allow_inf_nan=False)
    serving_override: str | None = None


class MealsModel(BaseModel):
    """The three meal buckets of a day."""

    breakfast: list[MealItemModel] = Field(default_factory=list)
    lunch: list[MealItemModel] = Field(default_factory=list)
    dinner: list[MealItemModel] = Field(default_factory=list)


DayBody = MealsModel | list[MealItemModel]


class AddItemRequest(BaseModel):
    """Request to append a food to a day."""

    food_id: str = Field(min_length=1)
    qty: float = Field(default=1.0, ge=0, allow_inf_nan=False)
    meal: Literal["breakfast", "lunch", "dinner"] = "dinner"
    serving_override: str | None = None


class ReconcileRequest(BaseModel):
    """Offline day data to reconcile, with an optional resolution."""

    local: DayBody | None = None
    resolution: Literal["import_local", "keep_server"] | None = None


class RecentFoodRequest(BaseModel):
    """Request to record a food use."""

    food_id: str = Field(min_length=1)


def day_body_payload(body: DayBody) -> object:
    """Return the plain JSON shape of a day body."""
    if isinstance(body, list):
        return [item.model_dump() for item in body]
    return body.model_dump()
