"""Application configuration using pydantic-settings."""

from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_path: Path = Path("finance_dashboard.db")

    # Store calls: total attempts (1 = no retry) and pause between them
    store_retry_attempts: int = 2
    store_retry_delay: float = 0.2

    # Display
    currency: str = "THB"
    timezone: str = "UTC"

    # Startup
    seed_demo_data: bool = False
    log_level: str = "INFO"

    # UI
    app_title: str = "Financial Dashboard"
    port: int = 8081
    native: bool = False
    window_width: int = 1400
    window_height: int = 900

    @property
    def database_url(self) -> str:
        """Get SQLite connection URL."""
        return f"sqlite:///{self.database_path}"

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone used for calendar windows and month buckets."""
        return ZoneInfo(self.timezone)


settings = Settings()
