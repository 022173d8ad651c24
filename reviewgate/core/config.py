"""Application configuration management."""

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./reviewgate.db"

    # Short codes
    short_code_max_attempts: int = Field(default=5, ge=1, le=50)

    # Applicant notifications
    notify_webhook_url: str | None = Field(
        default=None,
        description="Webhook receiving applicant-facing messages; unset disables delivery",
    )
    notify_timeout_seconds: float = Field(default=15.0, gt=0)

    # Analytics
    analytics_default_window_days: int = Field(default=30, ge=1, le=365)
    review_history_limit: int = Field(default=4, ge=1, le=50)

    # Stale application monitor
    stale_monitor_enabled: bool = True
    stale_check_interval_minutes: int = Field(default=30, ge=1)
    stale_threshold_hours: int = Field(default=24, ge=1)
    stale_max_apps_per_alert: int = Field(default=10, ge=1, le=50)

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
