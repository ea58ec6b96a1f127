import datetime as dt
from pathlib import Path
from typing import Optional, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .datasources.kinds import PERIOD_LABELS

# =========================
# Configuration (ENV-DRIVEN via Pydantic)
# =========================


class Settings(BaseSettings):
    """Application settings read from environment and validated by Pydantic.

    Only a single `.env` file at the project root is read. Real environment
    variables always take precedence over `.env` values.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=str(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
    )

    # App/UI
    app_title: str = Field(default="Survey Insights", alias="APP_TITLE")
    port: int = Field(default=8050, ge=1, le=65535, alias="PORT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", alias="LOG_LEVEL")

    # Charts
    chart_width: int = Field(default=560, ge=1, alias="CHART_WIDTH")
    tooltip_offset: int = Field(default=12, ge=0, alias="TOOLTIP_OFFSET")
    anchor_date: dt.date = Field(default=dt.date(2025, 3, 31), alias="ANCHOR_DATE")
    default_period: str = Field(default="Last 30 days", alias="DEFAULT_PERIOD")

    # Cache
    cache_type: Literal["SimpleCache", "RedisCache"] = Field(default="SimpleCache", alias="CACHE_TYPE")
    cache_timeout_seconds: int = Field(default=24 * 60 * 60, ge=0, alias="CACHE_TIMEOUT_SECONDS")
    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("default_period")
    @classmethod
    def _known_period(cls, v):
        if v not in PERIOD_LABELS:
            raise ValueError(f"default_period must be one of {list(PERIOD_LABELS)}")
        return v


# Singleton accessor to avoid repeated disk reads/parsing
_settings_singleton: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the singleton Settings instance, initializing it on first call."""
    global _settings_singleton
    if _settings_singleton is None:
        _settings_singleton = Settings()
    return _settings_singleton


# Convenience module-level constants used by app.py when running as a script
PORT: int = get_settings().port
DEBUG: bool = get_settings().debug
