"""
Application configuration — Pydantic Settings.

Loads from .env with strict validation. Single source of truth
for all environment-dependent values.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────────
    APP_NAME: str = "PivotReport"
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_PORT: int = 8000

    # ── Remote pivot API ─────────────────────────────────────────
    PIVOT_API_BASE_URL: str = "http://127.0.0.1:8080/civicrm/ajax/api4"
    PIVOT_API_KEY_ENV_VAR: str = "PIVOT_API_KEY"
    PIVOT_API_TIMEOUT: int = 30
    REMOTE_API_CONFIG: str = ""

    # ── Initial load ─────────────────────────────────────────────
    # 0 disables the threshold: everything is loaded immediately.
    INITIAL_LOAD_LIMIT: int = 0
    INITIAL_LOAD_MESSAGE: str = (
        "The dataset is too large to load at once. "
        "Select a date range to load a subset."
    )
    DEFAULT_DATE_FORMAT: str = "%Y-%m-%d"

    # ── Logging ──────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/pivot_report.log"


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
