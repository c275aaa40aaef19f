"""Supabase repository for per-user food usage history."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from nutrition_log.adapters.supabase_errors import missing_table_guard
from nutrition_log.domain.models import RecentFood
from nutrition_log.services.food_history import FoodHistoryRepository


@dataclass
class SupabaseFoodHistoryRepository(FoodHistoryRepository):
    """Supabase implementation over ``user_food_history``."""

    client: Client

    def list_recent(self, user_id: UUID, limit: int) -> list[RecentFood]:
        """Return foods ordered by last use."""
        with missing_table_guard("user_food_history"):
            response = (
                self.client.table("user_food_history")
                .select("food_id, last_used_at, use_count")
                .eq("user_id", str(user_id))
                .order("last_used_at", desc=True)
                .limit(limit)
                .execute()
            )
        return [_parse_recent(row) for row in response.data or []]

    def record_use(self, user_id: UUID, food_id: str, used_at: datetime) -> None:
        """Increment the use count of a food, creating the row on first use."""
        with missing_table_guard("user_food_history"):
            response = (
                self.client.table("user_food_history")
                .select("use_count")
                .eq("user_id", str(user_id))
                .eq("food_id", food_id)
                .limit(1)
                .execute()
            )
            if not response.data:
                self.client.table("user_food_history").insert(
                    {
                        "user_id": str(user_id),
                        "food_id": food_id,
                        "use_count": 1,
                        "last_used_at": used_at.isoformat(),
                    }
                ).execute()
                return
            current = int(response.data[0].get("use_count") or 0)
            self.client.table("user_food_history").update(
                {"use_count": current + 1, "last_used_at": used_at.isoformat()}
            ).eq("user_id", str(user_id)).eq("food_id", food_id).execute()


def _parse_recent(row: dict[str, object]) -> RecentFood:
    last_used_raw = row.get("last_used_at")
    last_used_at = (
        datetime.fromisoformat(last_used_raw)
        if isinstance(last_used_raw, str) and last_used_raw
        else None
    )
    return RecentFood(
        food_id=str(row["food_id"]),
        last_used_at=last_used_at,
        use_count=int(row.get("use_count") or 0),
    )
