"""
Configuration Management for Simple Finances

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Analytics constants (windows, tolerances) are NOT configuration; they live
in the engine.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SimpleFINSettings(BaseSettings):
    """SimpleFIN aggregator connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SIMPLEFIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    access_url: Optional[str] = Field(
        default=None,
        description="Pre-claimed access URL (overrides the stored session)"
    )
    lookback_days: int = Field(
        default=60,
        ge=31,
        le=365,
        description="How many days of transactions to request per refresh"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for a single aggregator request"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a request that fails at the transport level"
    )
    retry_backoff_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Base of the exponential backoff between attempts"
    )
    user_agent: str = Field(
        default="SimpleFinances/1.0",
        description="User-Agent header sent to the aggregator"
    )

    @field_validator('access_url')
    @classmethod
    def blank_access_url_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty env var as unset."""
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )

    # Session persistence
    session_file: Path = Field(
        default=Path.home() / ".simple_finances" / "session.json",
        description="Where the claimed access URL is stored between runs"
    )

    demo_mode: bool = Field(
        default=False,
        description="Serve the built-in demo snapshot instead of live data"
    )

    @field_validator('log_level', mode='before')
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def effective_log_level(self) -> str:
        """Level handed to the logging setup; debug mode forces DEBUG."""
        return "DEBUG" if self.debug_mode else self.log_level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def simplefin(self) -> SimpleFINSettings:
        return SimpleFINSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.simplefin
        results["simplefin"] = True
    except Exception as e:
        results["simplefin"] = False
        results["simplefin_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
