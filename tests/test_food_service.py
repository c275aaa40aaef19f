"""Tests for the food catalog service."""

from datetime import UTC, datetime, timedelta

from nutrition_log.services.cache import InMemoryCache
from nutrition_log.services.foods import FoodCatalogService
from tests.conftest import InMemoryFoodRepository


def test_lookup_normalizes_id_and_caches() -> None:
    repository = InMemoryFoodRepository()
    service = FoodCatalogService(repository=repository, cache=InMemoryCache())

    first = service.lookup(" Eggs ")
    second = service.lookup("eggs")

    assert first is not None
    assert first == second
    assert repository.get_calls == ["eggs"]


def test_lookup_caches_missing_foods() -> None:
    repository = InMemoryFoodRepository()
    service = FoodCatalogService(repository=repository, cache=InMemoryCache())

    assert service.lookup("unicorn") is None
    assert service.lookup("unicorn") is None
    assert repository.get_calls == ["unicorn"]


def test_lookup_returns_none_on_store_error() -> None:
    repository = InMemoryFoodRepository(fail=True)
    service = FoodCatalogService(repository=repository, cache=InMemoryCache())

    assert service.lookup("eggs") is None
    assert service.lookup("") is None


def test_lookup_refetches_after_expiry() -> None:
    now = datetime(2025, 1, 1, tzinfo=UTC)
    clock = {"now": now}
    repository = InMemoryFoodRepository()
    service = FoodCatalogService(
        repository=repository,
        cache=InMemoryCache(clock=lambda: clock["now"]),
        food_ttl_seconds=60,
    )

    service.lookup("eggs")
    clock["now"] = now + timedelta(seconds=61)
    service.lookup("eggs")

    assert repository.get_calls == ["eggs", "eggs"]


def test_search_matches_and_limits() -> None:
    service = FoodCatalogService(
        repository=InMemoryFoodRepository(), cache=InMemoryCache()
    )

    results = service.search("E", limit=2)

    assert [food.id for food in results] == ["chicken_breast", "eggs"]


def test_search_blank_query_is_empty() -> None:
    service = FoodCatalogService(
        repository=InMemoryFoodRepository(), cache=InMemoryCache()
    )

    assert service.search("   ") == []


def test_search_returns_empty_on_store_error() -> None:
    service = FoodCatalogService(
        repository=InMemoryFoodRepository(fail=True), cache=InMemoryCache()
    )

    assert service.search("eggs") == []


def test_all_foods_is_cached() -> None:
    repository = InMemoryFoodRepository()
    service = FoodCatalogService(repository=repository, cache=InMemoryCache())

    service.all_foods()
    foods = service.all_foods()

    assert "eggs" in foods
    assert repository.list_calls == 1


def test_all_foods_empty_on_store_error() -> None:
    service = FoodCatalogService(
        repository=InMemoryFoodRepository(fail=True), cache=InMemoryCache()
    )

    assert service.all_foods() == {}


def test_profile_lookup_prefers_prefetched_catalog() -> None:
    repository = InMemoryFoodRepository()
    service = FoodCatalogService(repository=repository, cache=InMemoryCache())
    catalog = repository.list_foods()

    lookup = service.profile_lookup({"eggs", "unicorn"}, prefetched=catalog)

    assert lookup("eggs") == catalog["eggs"]
    assert lookup("unicorn") is None
    assert repository.get_calls == ["unicorn"]
