"""Tests for recently used foods."""

from uuid import uuid4

import pytest

from nutrition_log.errors import StoreUnavailableError
from nutrition_log.services.food_history import FoodHistoryService
from tests.conftest import InMemoryFoodHistoryRepository


def test_record_use_counts_and_lists_with_profiles(food_service) -> None:
    repository = InMemoryFoodHistoryRepository()
    service = FoodHistoryService(repository=repository, food_service=food_service)
    user_id = uuid4()

    assert service.record_use(user_id, "eggs")
    service.record_use(user_id, "eggs")
    service.record_use(user_id, "oatmeal")

    recent = {entry.food_id: entry for entry in service.list_recent(user_id)}

    assert set(recent) == {"eggs", "oatmeal"}
    assert recent["eggs"].use_count == 2
    assert recent["eggs"].profile is not None
    assert recent["eggs"].profile.serving == "1 large egg"


def test_missing_table_is_not_an_error(food_service) -> None:
    service = FoodHistoryService(
        repository=InMemoryFoodHistoryRepository(missing_table=True),
        food_service=food_service,
    )

    assert service.record_use(uuid4(), "eggs") is False
    assert service.list_recent(uuid4()) == []


def test_store_errors(food_service) -> None:
    service = FoodHistoryService(
        repository=InMemoryFoodHistoryRepository(fail=True),
        food_service=food_service,
    )

    with pytest.raises(StoreUnavailableError):
        service.record_use(uuid4(), "eggs")
    assert service.list_recent(uuid4()) == []
