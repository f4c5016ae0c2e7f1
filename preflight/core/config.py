"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app and the command-line
runner share one configuration surface.
"""

from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


class SupabaseSettings(BaseSettings):
    """Connection details for the hosted Supabase (PostgREST) data store."""

    model_config = _ENV_CONFIG

    url: AnyHttpUrl = Field(..., validation_alias="SUPABASE_URL")
    key: str = Field(
        ...,
        validation_alias="SUPABASE_KEY",
        description="Anon or service-role key sent as both apikey and bearer token.",
    )
    timeout_seconds: float = Field(10.0, validation_alias="SUPABASE_TIMEOUT_SECONDS")
    retry_attempts: int = Field(3, ge=1, validation_alias="SUPABASE_RETRY_ATTEMPTS")
    retry_backoff_seconds: float = Field(
        0.5, ge=0, validation_alias="SUPABASE_RETRY_BACKOFF_SECONDS"
    )

    @property
    def rest_url(self) -> str:
        """Base URL of the PostgREST endpoint."""
        return str(self.url).rstrip("/") + "/rest/v1"


class AnalysisSettings(BaseSettings):
    """Tuning for the executive analysis cache and its persistence."""

    model_config = _ENV_CONFIG

    cache_ttl_hours: float = Field(1.0, gt=0, validation_alias="PREFLIGHT_CACHE_TTL_HOURS")
    timezone: str = Field(
        "UTC",
        validation_alias="PREFLIGHT_TIMEZONE",
        description="IANA zone used to decide which calendar date 'today' is.",
    )
    snapshot_table: str = Field(
        "ai_daily_snapshots", validation_alias="PREFLIGHT_SNAPSHOT_TABLE"
    )
    snapshot_backend: Literal["supabase", "sqlite"] = Field(
        "supabase", validation_alias="PREFLIGHT_SNAPSHOT_BACKEND"
    )
    sqlite_path: str = Field(
        "./data/preflight.db",
        validation_alias="PREFLIGHT_SQLITE_PATH",
        description="Snapshot database used when the sqlite backend is selected.",
    )
    currency: str = Field("LKR", validation_alias="PREFLIGHT_CURRENCY")

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            resolve_timezone(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone {value!r}") from exc
        return value

    def now(self) -> datetime:
        """Current time in the configured analysis timezone."""
        return datetime.now(resolve_timezone(self.timezone))


class AppSettings(BaseSettings):
    """Root settings object for the API and CLI."""

    model_config = _ENV_CONFIG

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)


def resolve_timezone(name: str) -> tzinfo:
    """Map a zone name to a tzinfo, short-circuiting UTC."""
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AnalysisSettings",
    "AppSettings",
    "SupabaseSettings",
    "get_settings",
    "resolve_timezone",
]
