"""Configuration management for ghstars."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="GHSTARS_",
        env_file=".env",
        extra="ignore",
    )

    fetch_api_key: str = ""
    fetch_base_path: str = "https://fetch-each.actionschema.com/ep"
    fetch_concurrency: int = Field(default=50, ge=1)
    fetch_timeout: float = 30.0

    day_hour_endpoint: str = "https://gharchive.uithub.com/api"
    week_hour_endpoint: str = "https://stars.uithub.com/api"
    month_day_endpoint: str = "https://stars.forgithub.com"
    # 30 days x ~800kb per call keeps the month fan-out under ~24mb
    month_day_limit: int = 25000

    data_dir: Path = Path("data")
    host: str = "127.0.0.1"
    port: int = 8787

    @property
    def cache_dir(self) -> Path:
        """Directory holding one file per cache entry."""
        return self.data_dir / "cache"


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings loaded from environment and .env file.
    """
    return Settings()
