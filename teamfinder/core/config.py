"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Team Finder Match Completions"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./teamfinder.db"

    # Public success stories
    public_stories_default_limit: int = 12
    public_stories_max_limit: int = 50

    # Listing reconciliation job
    reconcile_enabled: bool = True
    reconcile_interval_minutes: int = 30


settings = Settings()
