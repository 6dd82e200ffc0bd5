"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    database_url: str = "sqlite+aiosqlite:///./chainstats.db"
    api_host: str = "0.0.0.0"
    api_port: int = 3080
    cors_origins: str = "*"
    environment: str = "development"

    # Provider capacity aggregate is a full scan of provider snapshots
    provider_stats_cache_ttl_seconds: int = 300

    # Dashboard comparison lookback
    comparison_window_hours: int = 24

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def validate_production(self) -> None:
        """Raise if running in production with a development-only setup."""
        if self.environment != "production":
            return
        if self.database_url.startswith("sqlite"):
            raise RuntimeError(
                "DATABASE_URL must point at the indexer database in production, "
                "not a local SQLite file."
            )
        if self.provider_stats_cache_ttl_seconds <= 0:
            raise RuntimeError("PROVIDER_STATS_CACHE_TTL_SECONDS must be positive in production.")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()
