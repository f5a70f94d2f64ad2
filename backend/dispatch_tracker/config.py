"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FEED_URL = (
    "https://services2.arcgis.com/HdTo6HJqh92wn4D8/arcgis/rest/services/"
    "Metro_Nashville_Police_Department_Active_Dispatch_Table_view/FeatureServer/0/query"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/dispatch"

    # Active dispatch feed (ArcGIS FeatureServer)
    feed_url: str = DEFAULT_FEED_URL
    feed_page_size: int = 100
    feed_timeout_seconds: float = 30.0
    feed_max_retries: int = 3

    # Polling
    poll_interval_seconds: int = 120
    output_mode: Literal["status", "changes"] = "status"
    first_poll_policy: Literal["baseline", "announce"] = "baseline"

    # Rendering
    site_name: str = "Nashville"
    local_timezone: str = "America/Chicago"
    message_char_limit: int = 2000
    truncation_reserve: int = 30

    # Weekly report
    report_days: int = 7
    report_day_of_week: str = "sun"
    report_hour: int = 9
    noise_types: list[str] = [
        "WIRES DOWN",
        "TREE DOWN",
        "SAFETY HAZARD-BOTH TREES AND WIRES",
    ]

    # Publishing (Discord-style webhooks; unset means log only)
    status_webhook_url: str | None = None
    status_message_id: str | None = None
    report_webhook_url: str | None = None
    report_message_id: str | None = None

    # API settings
    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = ["*"]  # Restrict in production
    rate_limit_per_minute: int = 60

    # Environment
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
