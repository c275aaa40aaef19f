"""Recently used foods per user."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from nutrition_log.domain.models import RecentFood
from nutrition_log.errors import StoreUnavailableError, TableMissingError
from nutrition_log.services.foods import FoodCatalogService

_logger = logging.getLogger(__name__)


class FoodHistoryRepository(Protocol):
    """Persistence interface for food usage history."""

    def list_recent(self, user_id: UUID, limit: int) -> list[RecentFood]:
        """Return foods ordered by last use, most recent first."""

    def record_use(self, user_id: UUID, food_id: str, used_at: datetime) -> None:
        """Bump the usage counter and timestamp of a food."""


@dataclass
class FoodHistoryService:
    """Tracks which foods a user logs and surfaces the recent ones."""

    repository: FoodHistoryRepository
    food_service: FoodCatalogService

    def record_use(self, user_id: UUID, food_id: str) -> bool:
        """Record a food use; returns False when history isn't provisioned."""
        try:
            self.repository.record_use(user_id, food_id, used_at=datetime.now(tz=UTC))
        except TableMissingError:
            _logger.warning("Food history table missing; use not recorded")
            return False
        except Exception as exc:
            raise StoreUnavailableError("Could not record food use") from exc
        return True

    def list_recent(self, user_id: UUID, limit: int = 20) -> list[RecentFood]:
        """Return recent foods with their nutrient profiles attached."""
        try:
            recent = self.repository.list_recent(user_id, limit)
        except TableMissingError:
            return []
        except Exception:
            _logger.exception("Loading recent foods failed: user_id=%s", user_id)
            return []
        return [
            replace(entry, profile=self.food_service.lookup(entry.food_id))
            for entry in recent
        ]
