"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    photo_bucket: str = "location-photos"
    google_maps_api_key: str | None = None
    unsplash_access_key: str | None = None
    unsplash_requests_per_window: int = 50
    unsplash_window_seconds: int = 3600
    enable_media_wikimedia: bool = False
    pexels_api_key: str | None = None
    http_user_agent: str = "PlaceMedia/1.0 (travel photo resolver)"
    image_width: int = 1920
    provider_timeout_seconds: float = 15.0
    resolve_deadline_seconds: float = 45.0
    deduplicate_inflight: bool = True
    backfill_entity_types: str = "attraction"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_entity_types(raw: str | None) -> list[str]:
    """Parse a comma-separated list of entity types."""
    if raw is None:
        return []
    return [chunk.strip().lower() for chunk in raw.split(",") if chunk.strip()]
