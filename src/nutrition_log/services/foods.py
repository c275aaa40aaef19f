"""Food catalog lookups with caching and graceful degradation."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from nutrition_log.domain.nutrition import FoodSummary, NutrientProfile
from nutrition_log.services.aggregation import ProfileLookup
from nutrition_log.services.cache import Cache

_logger = logging.getLogger(__name__)

_MISSING = "__missing__"


class FoodRepository(Protocol):
    """Read interface for the food nutrient database."""

    def get_food(self, food_id: str) -> NutrientProfile | None:
        """Return the profile for a food id, if present."""

    def search_foods(self, query: str, limit: int) -> list[FoodSummary]:
        """Return foods whose name contains the query, case-insensitively."""

    def list_foods(self) -> dict[str, NutrientProfile]:
        """Return every food profile keyed by id."""


@dataclass
class FoodCatalogService:
    """Service for food lookups with caching."""

    repository: FoodRepository
    cache: Cache
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    debug: bool = False

    def lookup(self, food_id: str) -> NutrientProfile | None:
        """Return a food profile, or None when unknown or unavailable."""
        key = food_id.strip().lower()
        if not key:
            return None
        cache_key = f"foods:get:{key}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutrientProfile):
            return cached
        if cached == _MISSING:
            return None
        try:
            profile = self.repository.get_food(key)
        except Exception:
            _logger.exception("Food lookup failed: food_id=%s", key)
            return None
        self.cache.set(
            cache_key,
            profile if profile is not None else _MISSING,
            ttl_seconds=self.food_ttl_seconds,
        )
        if self.debug:
            _logger.info("Food lookup: food_id=%s found=%s", key, profile is not None)
        return profile

    def search(self, query: str, limit: int = 8) -> list[FoodSummary]:
        """Search foods by name; empty on blank queries or store errors."""
        cleaned = query.strip()
        if not cleaned:
            return []
        cache_key = f"foods:search:{cleaned.lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached
        try:
            results = self.repository.search_foods(cleaned, limit)
        except Exception:
            _logger.exception("Food search failed: query=%s", cleaned)
            return []
        self.cache.set(cache_key, results, ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info("Food search: query=%s results=%s", cleaned, len(results))
        return results

    def all_foods(self) -> dict[str, NutrientProfile]:
        """Return the whole catalog, or an empty one when unavailable."""
        cached = self.cache.get("foods:all")
        if isinstance(cached, dict):
            return cached
        try:
            foods = self.repository.list_foods()
        except Exception:
            _logger.exception("Loading food catalog failed")
            return {}
        self.cache.set("foods:all", foods, ttl_seconds=self.food_ttl_seconds)
        return foods

    def profile_lookup(
        self,
        food_ids: Iterable[str],
        prefetched: dict[str, NutrientProfile] | None = None,
    ) -> ProfileLookup:
        """Resolve a set of food ids up front and return a lookup over them."""
        known = prefetched or {}
        profiles: dict[str, NutrientProfile] = {}
        for food_id in food_ids:
            profile = known.get(food_id) or self.lookup(food_id)
            if profile is not None:
                profiles[food_id] = profile
        return profiles.get
