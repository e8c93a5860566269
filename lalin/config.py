"""Application configuration loaded from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file).

    Variables are prefixed with ``LALIN_`` (e.g. ``LALIN_LOG_LEVEL=DEBUG``).
    """

    # --- App ---
    app_name: str = "Lalin API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Cycle engine ---
    cycle_config_path: Path | None = None  # overrides the bundled cycle_config.yaml

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:8081"]

    model_config = SettingsConfigDict(
        env_prefix="LALIN_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
