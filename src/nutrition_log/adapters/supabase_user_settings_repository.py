"""Supabase repository for user settings."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutrition_log.adapters.supabase_errors import missing_table_guard
from nutrition_log.domain.models import GOAL_COLUMNS, UserSettings
from nutrition_log.services.user_settings import UserSettingsRepository

_COLUMNS = ", ".join([*GOAL_COLUMNS, "weight_goal", "activity_level"])


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for user settings."""

    client: Client

    def get_settings(self, user_id: UUID) -> UserSettings | None:
        """Return the stored settings for a user."""
        with missing_table_guard("user_settings"):
            response = (
                self.client.table("user_settings")
                .select(_COLUMNS)
                .eq("user_id", str(user_id))
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _parse_settings(response.data[0])

    def create_settings(self, user_id: UUID) -> UserSettings:
        """Insert a settings row relying on column defaults."""
        with missing_table_guard("user_settings"):
            response = (
                self.client.table("user_settings")
                .insert({"user_id": str(user_id)})
                .execute()
            )
        if not response.data:
            raise RuntimeError("Failed to create user settings")
        return _parse_settings(response.data[0])

    def update_settings(
        self, user_id: UUID, updates: dict[str, object]
    ) -> UserSettings:
        """Update the user's settings and return the stored row."""
        with missing_table_guard("user_settings"):
            response = (
                self.client.table("user_settings")
                .update({**updates, "updated_at": datetime.now(tz=UTC).isoformat()})
                .eq("user_id", str(user_id))
                .execute()
            )
        if not response.data:
            raise RuntimeError("Failed to update user settings")
        return _parse_settings(response.data[0])


def _parse_settings(row: dict[str, object]) -> UserSettings:
    defaults = UserSettings()
    values: dict[str, object] = {}
    for column in GOAL_COLUMNS:
        raw = row.get(column)
        values[column] = (
            float(raw) if isinstance(raw, int | float) else getattr(defaults, column)
        )
    values["weight_goal"] = str(row.get("weight_goal") or defaults.weight_goal)
    values["activity_level"] = str(row.get("activity_level") or defaults.activity_level)
    return UserSettings(**values)
