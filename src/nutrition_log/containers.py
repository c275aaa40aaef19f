"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from nutrition_log.adapters.supabase_day_repository import SupabaseDayRepository
from nutrition_log.adapters.supabase_food_history_repository import (
    SupabaseFoodHistoryRepository,
)
from nutrition_log.adapters.supabase_food_repository import SupabaseFoodRepository
from nutrition_log.adapters.supabase_identity_provider import SupabaseIdentityProvider
from nutrition_log.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from nutrition_log.config import Settings, parse_goal_overrides
from nutrition_log.services.cache import InMemoryCache
from nutrition_log.services.days import DayLogService
from nutrition_log.services.food_history import FoodHistoryService
from nutrition_log.services.foods import FoodCatalogService
from nutrition_log.services.recommendations import RecommendationService
from nutrition_log.services.user_settings import UserSettingsService
from nutrition_log.services.users import AuthService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    food_service: FoodCatalogService
    day_service: DayLogService
    settings_service: UserSettingsService
    history_service: FoodHistoryService
    recommendation_service: RecommendationService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_service = FoodCatalogService(
        repository=SupabaseFoodRepository(supabase_client),
        cache=InMemoryCache(),
        search_ttl_seconds=resolved_settings.food_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )
    day_service = DayLogService(SupabaseDayRepository(supabase_client))
    settings_service = UserSettingsService(
        repository=SupabaseUserSettingsRepository(supabase_client),
        goal_overrides=parse_goal_overrides(resolved_settings.default_goal_overrides),
    )
    history_service = FoodHistoryService(
        repository=SupabaseFoodHistoryRepository(supabase_client),
        food_service=food_service,
    )
    recommendation_service = RecommendationService(
        day_service=day_service,
        food_service=food_service,
        settings_service=settings_service,
    )
    return AppContainer(
        settings=resolved_settings,
        auth_service=AuthService(SupabaseIdentityProvider(supabase_client)),
        food_service=food_service,
        day_service=day_service,
        settings_service=settings_service,
        history_service=history_service,
        recommendation_service=recommendation_service,
    )
