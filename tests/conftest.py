"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from nutrition_log.config import Settings
from nutrition_log.containers import AppContainer
from nutrition_log.domain.days import DayItem, DayRecord
from nutrition_log.domain.models import RecentFood, UserRecord, UserSettings
from nutrition_log.domain.nutrition import FoodSummary, NutrientProfile
from nutrition_log.errors import TableMissingError
from nutrition_log.services.cache import InMemoryCache
from nutrition_log.services.days import DayLogService, DayRepository
from nutrition_log.services.food_history import (
    FoodHistoryRepository,
    FoodHistoryService,
)
from nutrition_log.services.foods import FoodCatalogService, FoodRepository
from nutrition_log.services.recommendations import RecommendationService
from nutrition_log.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)
from nutrition_log.services.users import AuthService, IdentityProvider

USER_TOKEN = "user-token"


def sample_foods() -> dict[str, NutrientProfile]:
    return {
        "eggs": NutrientProfile(
            calories=78, protein=6.3, carbs=0.6, fat=5.3, sodium=62,
            cholesterol=186, serving="1 large egg",
        ),
        "chicken_breast": NutrientProfile(
            calories=165, protein=31, fat=3.6, sodium=74, serving="100g",
        ),
        "oatmeal": NutrientProfile(
            calories=150, protein=5, carbs=27, fat=3, fiber=4, serving="1 cup",
        ),
        "broccoli": NutrientProfile(
            calories=55, protein=3.7, carbs=11, fiber=5, vitamin_c=89, serving="1 cup",
        ),
        "water": NutrientProfile(serving="1 glass"),
    }


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food database for tests."""

    foods: dict[str, NutrientProfile] = field(default_factory=sample_foods)
    fail: bool = False
    get_calls: list[str] = field(default_factory=list)
    list_calls: int = 0

    def get_food(self, food_id: str) -> NutrientProfile | None:
        self.get_calls.append(food_id)
        if self.fail:
            raise RuntimeError("food store down")
        return self.foods.get(food_id)

    def search_foods(self, query: str, limit: int) -> list[FoodSummary]:
        if self.fail:
            raise RuntimeError("food store down")
        matches = [
            FoodSummary(id=food_id, name=food_id, serving=profile.serving)
            for food_id, profile in sorted(self.foods.items())
            if query.lower() in food_id.lower()
        ]
        return matches[:limit]

    def list_foods(self) -> dict[str, NutrientProfile]:
        self.list_calls += 1
        if self.fail:
            raise RuntimeError("food store down")
        return dict(self.foods)


@dataclass
class InMemoryDayRepository(DayRepository):
    """In-memory day store for tests."""

    days: dict[tuple[UUID, str], DayRecord] = field(default_factory=dict)
    items: dict[UUID, list[DayItem]] = field(default_factory=dict)
    fail: bool = False
    fail_writes: bool = False
    replace_calls: list[tuple[UUID, list[DayItem]]] = field(default_factory=list)
    insert_calls: int = 0

    def get_or_create_day(self, user_id: UUID, day_date: str) -> DayRecord:
        if self.fail:
            raise RuntimeError("day store down")
        key = (user_id, day_date)
        if key not in self.days:
            self.days[key] = DayRecord(id=uuid4(), user_id=user_id, day_date=day_date)
        return self.days[key]

    def list_items(self, day_id: UUID) -> list[DayItem]:
        if self.fail:
            raise RuntimeError("day store down")
        return list(self.items.get(day_id, []))

    def replace_items(self, day_id: UUID, items: list[DayItem]) -> None:
        if self.fail_writes:
            raise RuntimeError("write rejected")
        self.replace_calls.append((day_id, list(items)))
        self.items[day_id] = list(items)

    def insert_item(self, day_id: UUID, item: DayItem) -> None:
        if self.fail_writes:
            raise RuntimeError("write rejected")
        self.insert_calls += 1
        self.items.setdefault(day_id, []).append(item)

    def list_days(self, user_id: UUID, limit: int) -> list[DayRecord]:
        if self.fail:
            raise RuntimeError("day store down")
        records = [record for key, record in self.days.items() if key[0] == user_id]
        records.sort(key=lambda record: record.day_date, reverse=True)
        return records[:limit]

    def list_items_for_days(self, day_ids: list[UUID]) -> dict[UUID, list[DayItem]]:
        return {day_id: list(self.items.get(day_id, [])) for day_id in day_ids}

    def seed(self, user_id: UUID, day_date: str, items: list[DayItem]) -> DayRecord:
        record = self.get_or_create_day(user_id, day_date)
        self.items[record.id] = list(items)
        return record


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory user settings repository for tests."""

    rows: dict[UUID, UserSettings] = field(default_factory=dict)
    missing_table: bool = False
    fail: bool = False

    def get_settings(self, user_id: UUID) -> UserSettings | None:
        self._check()
        return self.rows.get(user_id)

    def create_settings(self, user_id: UUID) -> UserSettings:
        self._check()
        self.rows[user_id] = UserSettings()
        return self.rows[user_id]

    def update_settings(
        self, user_id: UUID, updates: dict[str, object]
    ) -> UserSettings:
        self._check()
        current = self.rows.get(user_id, UserSettings())
        self.rows[user_id] = replace(current, **updates)  # type: ignore[arg-type]
        return self.rows[user_id]

    def _check(self) -> None:
        if self.missing_table:
            raise TableMissingError("user_settings")
        if self.fail:
            raise RuntimeError("settings store down")


@dataclass
class InMemoryFoodHistoryRepository(FoodHistoryRepository):
    """In-memory food history repository for tests."""

    entries: dict[tuple[UUID, str], RecentFood] = field(default_factory=dict)
    missing_table: bool = False
    fail: bool = False

    def list_recent(self, user_id: UUID, limit: int) -> list[RecentFood]:
        self._check()
        recent = [entry for key, entry in self.entries.items() if key[0] == user_id]
        recent.sort(
            key=lambda entry: entry.last_used_at or datetime.min.replace(tzinfo=UTC),
            reverse=True,
        )
        return recent[:limit]

    def record_use(self, user_id: UUID, food_id: str, used_at: datetime) -> None:
        self._check()
        previous = self.entries.get((user_id, food_id))
        count = previous.use_count + 1 if previous else 1
        self.entries[(user_id, food_id)] = RecentFood(
            food_id=food_id, last_used_at=used_at, use_count=count
        )

    def _check(self) -> None:
        if self.missing_table:
            raise TableMissingError("user_food_history")
        if self.fail:
            raise RuntimeError("history store down")


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider backed by a token table."""

    users: dict[str, UserRecord] = field(default_factory=dict)

    def get_user(self, access_token: str) -> UserRecord | None:
        return self.users.get(access_token)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def user() -> UserRecord:
    return UserRecord(id=uuid4(), email="cook@example.com")


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def day_repository() -> InMemoryDayRepository:
    return InMemoryDayRepository()


@pytest.fixture
def food_service(food_repository: InMemoryFoodRepository) -> FoodCatalogService:
    return FoodCatalogService(repository=food_repository, cache=InMemoryCache())


@pytest.fixture
def container(
    settings: Settings,
    user: UserRecord,
    food_service: FoodCatalogService,
    day_repository: InMemoryDayRepository,
) -> AppContainer:
    day_service = DayLogService(day_repository)
    settings_service = UserSettingsService(InMemoryUserSettingsRepository())
    history_service = FoodHistoryService(
        repository=InMemoryFoodHistoryRepository(), food_service=food_service
    )
    return AppContainer(
        settings=settings,
        auth_service=AuthService(FakeIdentityProvider({USER_TOKEN: user})),
        food_service=food_service,
        day_service=day_service,
        settings_service=settings_service,
        history_service=history_service,
        recommendation_service=RecommendationService(
            day_service=day_service,
            food_service=food_service,
            settings_service=settings_service,
        ),
    )
