from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_NAME: str = "Intake Metrics"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # SQLite file in the working directory unless DB_URL/DATABASE_URL is set.
    DB_URL: str = Field(
        default="sqlite:///./intakedb.db",
        validation_alias=AliasChoices("DB_URL", "DATABASE_URL"),
    )

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Optional directory with the front-end HTML/CSS/JS, served at "/".
    STATIC_DIR: Path | None = None

    # Prometheus exposition lives outside "/metrics", which is a resource here.
    ENABLE_METRICS: bool = False
    METRICS_ENDPOINT: str = "/internal/metrics"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
