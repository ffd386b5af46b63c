"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_name: str = "Pocket"
    environment: str = "development"
    debug: bool = False

    # SQLite
    database_url: str = "sqlite+aiosqlite:///./pocket.db"
    sqlite_busy_timeout: float = 5.0  # seconds a writer waits on a locked database

    # Pagination
    default_list_limit: int = 50
    max_list_limit: int = 100
    default_search_limit: int = 20
    max_search_limit: int = 50

    # Search snippets
    snippet_tokens: int = 32

    # Ingestion
    excerpt_length: int = 200


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
