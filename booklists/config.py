"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        app_name: Name of the application.
        debug: Enable debug mode (SQL echo, tables created on startup).
        database_url: Database connection URL.
        log_level: Root log level for the API and the CLI.
        import_min_version: Oldest list export format version accepted.
        import_max_version: Newest list export format version accepted.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "booklists"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./booklists.db"

    # CORS (for the preview UI)
    cors_origins: list[str] = ["http://localhost:8000", "http://127.0.0.1:8000"]

    # List import
    import_min_version: int = 2
    import_max_version: int = 3


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings.
    """
    return Settings()
