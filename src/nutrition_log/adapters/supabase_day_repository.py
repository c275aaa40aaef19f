"""Supabase repository for user days and their items."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_log.domain.days import DayItem, DayRecord, normalize_meal
from nutrition_log.services.days import DayRepository


@dataclass
class SupabaseDayRepository(DayRepository):
    """Supabase implementation over ``user_days`` and ``user_day_items``."""

    client: Client

    def get_or_create_day(self, user_id: UUID, day_date: str) -> DayRecord:
        """Return the day row for a user and date, creating it if needed."""
        response = (
            self.client.table("user_days")
            .select("id, user_id, day_date")
            .eq("day_date", day_date)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_day(response.data[0])
        inserted = (
            self.client.table("user_days")
            .insert({"day_date": day_date, "user_id": str(user_id)})
            .execute()
        )
        if not inserted.data:
            raise RuntimeError("Failed to create day")
        return _parse_day(inserted.data[0])

    def list_items(self, day_id: UUID) -> list[DayItem]:
        """Return the items of a day in insertion order."""
        response = (
            self.client.table("user_day_items")
            .select("day_id, food_id, qty, serving_override, metadata, created_at")
            .eq("day_id", str(day_id))
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]

    def replace_items(self, day_id: UUID, items: list[DayItem]) -> None:
        """Delete all items of a day, then insert the given ones."""
        self.client.table("user_day_items").delete().eq("day_id", str(day_id)).execute()
        if not items:
            return
        self.client.table("user_day_items").insert(
            [_item_payload(day_id, item) for item in items]
        ).execute()

    def insert_item(self, day_id: UUID, item: DayItem) -> None:
        """Append one item to a day."""
        response = (
            self.client.table("user_day_items")
            .insert(_item_payload(day_id, item))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to add day item")

    def list_days(self, user_id: UUID, limit: int) -> list[DayRecord]:
        """Return a user's days, most recent date first."""
        response = (
            self.client.table("user_days")
            .select("id, user_id, day_date")
            .eq("user_id", str(user_id))
            .order("day_date", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_day(row) for row in response.data or []]

    def list_items_for_days(self, day_ids: list[UUID]) -> dict[UUID, list[DayItem]]:
        """Return items for several days in a single query."""
        if not day_ids:
            return {}
        response = (
            self.client.table("user_day_items")
            .select("day_id, food_id, qty, serving_override, metadata, created_at")
            .in_("day_id", [str(day_id) for day_id in day_ids])
            .order("created_at", desc=False)
            .execute()
        )
        grouped: dict[UUID, list[DayItem]] = {}
        for row in response.data or []:
            grouped.setdefault(UUID(row["day_id"]), []).append(_parse_item(row))
        return grouped


def _item_payload(day_id: UUID, item: DayItem) -> dict[str, object]:
    payload: dict[str, object] = {
        "day_id": str(day_id),
        "food_id": item.food_id,
        "qty": item.qty,
        "metadata": {"meal": item.meal},
    }
    if item.serving_override:
        payload["serving_override"] = item.serving_override
    return payload


def _parse_day(row: dict[str, object]) -> DayRecord:
    return DayRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        day_date=str(row["day_date"]),
    )


def _parse_item(row: dict[str, object]) -> DayItem:
    metadata = row.get("metadata") or {}
    meal = metadata.get("meal") if isinstance(metadata, dict) else None
    return DayItem(
        food_id=str(row["food_id"]),
        qty=float(row.get("qty") or 0.0),
        meal=normalize_meal(meal),
        serving_override=row.get("serving_override"),
    )
