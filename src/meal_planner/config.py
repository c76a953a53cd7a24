"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    usda_api_key: str
    usda_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    usda_data_types: str = "Foundation,SR Legacy"
    off_base_url: str = "https://world.openfoodfacts.org"
    off_api_url: str = "https://world.openfoodfacts.org/api/v2"
    off_user_id: str | None = None
    off_password: str | None = None
    user_agent: str = "MealPlannerApp/1.0"
    search_timeout_seconds: float = 10.0
    lookup_timeout_seconds: float = 8.0
    search_page_size: int = 20
    off_cache_ttl_seconds: int = 12 * 60 * 60
    usda_cache_ttl_seconds: int = 24 * 60 * 60
    min_primary_results: int = 5
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_data_types(raw: str | None) -> list[str]:
    """Parse the comma-separated USDA data types setting."""
    if raw is None:
        return []
    return [chunk.strip() for chunk in raw.split(",") if chunk.strip()]
