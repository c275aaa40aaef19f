"""Day log service over the per-user day store."""

import logging
import math
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_log.domain.days import (
    DayItem,
    DayLog,
    DayRecord,
    MealBucket,
    day_log_from_items,
    day_log_to_items,
)
from nutrition_log.errors import NotAuthenticatedError, StoreUnavailableError

_logger = logging.getLogger(__name__)


class DayRepository(Protocol):
    """Persistence interface for days and their items."""

    def get_or_create_day(self, user_id: UUID, day_date: str) -> DayRecord:
        """Return the day row for a user and date, creating it if needed."""

    def list_items(self, day_id: UUID) -> list[DayItem]:
        """Return the items of a day in insertion order."""

    def replace_items(self, day_id: UUID, items: list[DayItem]) -> None:
        """Delete all items of a day and insert the given ones."""

    def insert_item(self, day_id: UUID, item: DayItem) -> None:
        """Append one item to a day."""

    def list_days(self, user_id: UUID, limit: int) -> list[DayRecord]:
        """Return a user's days, most recent date first."""

    def list_items_for_days(self, day_ids: list[UUID]) -> dict[UUID, list[DayItem]]:
        """Return items for several days keyed by day id."""


@dataclass
class DayLogService:
    """Reads and writes day logs owned by a user."""

    repository: DayRepository

    async def fetch_day(self, user_id: UUID | None, day_date: str) -> DayLog:
        """Return the stored day, creating an empty one on first access."""
        owner = _require_user(user_id)
        try:
            day = self.repository.get_or_create_day(owner, day_date)
            items = self.repository.list_items(day.id)
        except Exception as exc:
            raise StoreUnavailableError(f"Could not load day {day_date}") from exc
        return day_log_from_items(items)

    async def load_day(self, user_id: UUID | None, day_date: str) -> DayLog:
        """Return the stored day, or an empty day when it can't be loaded."""
        try:
            return await self.fetch_day(user_id, day_date)
        except (NotAuthenticatedError, StoreUnavailableError):
            _logger.exception("Using empty day for %s", day_date)
            return DayLog.empty()

    async def replace_day(
        self, user_id: UUID | None, day_date: str, day: DayLog
    ) -> DayLog:
        """Overwrite every item of a day with the given log."""
        owner = _require_user(user_id)
        items = day_log_to_items(day)
        for item in items:
            _validate_quantity(item.food_id, item.qty)
        try:
            record = self.repository.get_or_create_day(owner, day_date)
            self.repository.replace_items(record.id, items)
        except Exception as exc:
            raise StoreUnavailableError(f"Could not save day {day_date}") from exc
        _logger.info("Saved day: date=%s items=%s", day_date, len(items))
        return day

    async def add_item(  # noqa: PLR0913
        self,
        user_id: UUID | None,
        day_date: str,
        food_id: str,
        qty: float = 1.0,
        meal: MealBucket = "dinner",
        serving_override: str | None = None,
    ) -> DayLog:
        """Append one food to a meal bucket and return the updated day."""
        owner = _require_user(user_id)
        _validate_quantity(food_id, qty)
        item = DayItem(
            food_id=food_id, qty=qty, meal=meal, serving_override=serving_override
        )
        try:
            record = self.repository.get_or_create_day(owner, day_date)
            self.repository.insert_item(record.id, item)
            items = self.repository.list_items(record.id)
        except Exception as exc:
            raise StoreUnavailableError(f"Could not add item to {day_date}") from exc
        return day_log_from_items(items)

    async def list_days(self, user_id: UUID | None, limit: int = 50) -> list[DayRecord]:
        """Return the user's days, most recent first."""
        owner = _require_user(user_id)
        try:
            return self.repository.list_days(owner, limit)
        except Exception as exc:
            raise StoreUnavailableError("Could not list days") from exc

    async def load_all_days(
        self, user_id: UUID | None, limit: int = 100
    ) -> dict[str, DayLog]:
        """Return every stored day keyed by date, or nothing when unavailable."""
        owner = _require_user(user_id)
        try:
            days = self.repository.list_days(owner, limit)
            if not days:
                return {}
            items_by_day = self.repository.list_items_for_days(
                [day.id for day in days]
            )
        except Exception:
            _logger.exception("Loading all days failed")
            return {}
        return {
            day.day_date: day_log_from_items(items_by_day.get(day.id, []))
            for day in days
        }


def _require_user(user_id: UUID | None) -> UUID:
    if user_id is None:
        raise NotAuthenticatedError("User not authenticated")
    return user_id


def _validate_quantity(food_id: str, qty: float) -> None:
    if not math.isfinite(qty) or qty < 0:
        raise ValueError(f"Quantity for '{food_id}' must be a non-negative number")

