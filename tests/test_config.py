"""Tests for configuration parsing."""

from nutrition_log.config import Settings, parse_goal_overrides


def test_parse_goal_overrides() -> None:
    overrides = parse_goal_overrides(
        "calories=1800, Protein=120,fat=abc,fiber=-1,vitamin_c=90,carbs"
    )

    assert overrides == {"calories": 1800.0, "protein": 120.0}


def test_parse_goal_overrides_empty() -> None:
    assert parse_goal_overrides(None) == {}
    assert parse_goal_overrides("") == {}


def test_settings_defaults(settings: Settings) -> None:
    assert settings.recommendation_limit == 6
    assert settings.search_limit == 8
    assert settings.local_cache_dir == "data/days"


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "header.payload.signature")
    monkeypatch.setenv("RECOMMENDATION_LIMIT", "3")

    assert Settings().recommendation_limit == 3
