"""Application configuration."""

import math
import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_log.domain.nutrition import DEFAULT_GOALS

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    environment: str = _ENVIRONMENT
    debug: bool = False
    recommendation_limit: int = 6
    search_limit: int = 8
    food_cache_ttl_seconds: int = 3600
    local_cache_dir: str = "data/days"
    default_goal_overrides: str | None = None

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_goal_overrides(raw: str | None) -> dict[str, float]:
    """Parse ``"calories=1800,protein=120"`` into goal overrides.

    Unknown nutrients and non-positive or malformed values are skipped.
    """
    if raw is None:
        return {}
    overrides: dict[str, float] = {}
    for chunk in raw.split(","):
        name, sep, value = chunk.partition("=")
        name = name.strip().lower()
        if not sep or name not in DEFAULT_GOALS:
            continue
        try:
            amount = float(value.strip())
        except ValueError:
            continue
        if math.isfinite(amount) and amount > 0:
            overrides[name] = amount
    return overrides
