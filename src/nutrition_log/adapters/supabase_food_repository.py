"""Supabase repository for the food nutrient database."""

from dataclasses import dataclass

from supabase import Client

from nutrition_log.domain.nutrition import NUTRIENT_FIELDS, FoodSummary, NutrientProfile
from nutrition_log.services.foods import FoodRepository

COLUMN_NAMES = {
    "vitamin_c": "vitaminC",
    "vitamin_a": "vitaminA",
    "vitamin_d": "vitaminD",
}


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase-backed read access to the ``foods`` table."""

    client: Client

    def get_food(self, food_id: str) -> NutrientProfile | None:
        """Return the profile for a food id, if present."""
        response = (
            self.client.table("foods")
            .select("*")
            .eq("id", food_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_profile(response.data[0])

    def search_foods(self, query: str, limit: int) -> list[FoodSummary]:
        """Search foods by name with a case-insensitive substring match."""
        response = (
            self.client.table("foods")
            .select("id, name, serving")
            .ilike("name", f"%{query}%")
            .order("name", desc=False)
            .limit(limit)
            .execute()
        )
        return [
            FoodSummary(
                id=str(row["id"]),
                name=str(row.get("name") or row["id"]),
                serving=row.get("serving"),
            )
            for row in response.data or []
        ]

    def list_foods(self) -> dict[str, NutrientProfile]:
        """Return every food profile keyed by id."""
        response = self.client.table("foods").select("*").order("id").execute()
        return {str(row["id"]): parse_profile(row) for row in response.data or []}


def parse_profile(row: dict[str, object]) -> NutrientProfile:
    """Parse a ``foods`` row; missing or null nutrients become 0."""
    values = {
        name: _to_float(row.get(COLUMN_NAMES.get(name, name), row.get(name)))
        for name in NUTRIENT_FIELDS
    }
    serving = row.get("serving")
    return NutrientProfile(
        **values, serving=str(serving) if serving is not None else None
    )


def _to_float(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
