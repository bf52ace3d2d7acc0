"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Football-Data.org API
    football_api_base_url: str = "https://api.football-data.org/v4"
    football_api_key: str = ""
    competition_code: str = "PL"  # Premier League

    # Storage
    storage_backend: Literal["file", "postgres"] = "file"
    data_dir: Path = Path("data")
    backup_dir: Path = Path("backups")
    predictions_path: Path | None = None  # Packaged dataset when unset
    database_url: str = ""

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Logging
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def db_connection_string(self) -> str:
        """Postgres DSN used by the asyncpg pool."""
        return self.database_url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
