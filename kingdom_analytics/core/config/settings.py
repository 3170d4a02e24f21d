# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

Settings are loaded from environment variables with sensible defaults. The
Settings class is the main entry point and aggregates all subsettings. A
cached instance is provided via get_settings(); the container passes it
explicitly to the store and service it builds.

Example:
    >>> from kingdom_analytics.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.analytics.default_preset
    '30d'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration for the SQL-backed event store.

    Attributes:
        url: SQLAlchemy database URL.
        echo: Log every SQL statement.
        connect_timeout: Seconds a connection waits on a locked database
            before the driver gives up.
    """

    model_config = SettingsConfigDict(
        env_prefix="ANALYTICS_DB_",
        extra="ignore",
    )

    url: str = "sqlite:///kingdom_analytics.db"
    echo: bool = False
    connect_timeout: float = 2.0

    @property
    def is_sqlite(self) -> bool:
        """Check whether the configured URL targets SQLite."""
        return self.url.startswith("sqlite")


class AnalyticsSettings(BaseSettings):
    """Event store, insight and alert configuration.

    Attributes:
        store_backend: Which event store the container builds.
        store_capacity: Maximum events kept by the in-memory store
            (oldest dropped first). None keeps everything.
        query_timeout_seconds: Longest a query waits for a consistent
            snapshot before raising QueryTimeoutError.
        default_preset: Date preset used by the fallback filter.
        insight_deviation_threshold: Relative deviation above the average
            that makes a content type or hour stand out (0.2 = 20%).
        insight_min_samples: Minimum events behind any insight.
        error_alert_threshold: Error events in a window that raise an alert.
        revenue_drop_alert_percent: Revenue drop vs. trailing window that
            raises a warning.
        revenue_milestone: Window revenue that raises a success alert.
        response_time_alert_ms: Average response time that raises a warning.
        ai_failure_alert_rate: AI generation failure ratio that raises a warning.
    """

    model_config = SettingsConfigDict(
        env_prefix="ANALYTICS_",
        extra="ignore",
    )

    store_backend: Literal["memory", "sql"] = "memory"
    store_capacity: int | None = Field(default=100_000, ge=1)
    query_timeout_seconds: float = Field(default=2.0, gt=0)
    default_preset: Literal["7d", "30d", "90d", "1y"] = "30d"

    insight_deviation_threshold: float = Field(default=0.2, ge=0)
    insight_min_samples: int = Field(default=3, ge=1)

    error_alert_threshold: int = Field(default=5, ge=1)
    revenue_drop_alert_percent: float = Field(default=20.0, gt=0)
    revenue_milestone: float = Field(default=1000.0, gt=0)
    response_time_alert_ms: float = Field(default=1000.0, gt=0)
    ai_failure_alert_rate: float = Field(default=0.1, ge=0, le=1)


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        analytics: Event store, insight and alert settings.
        database: SQL event store settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with debug enabled.
        """
        if self.environment == "production" and self.debug:
            raise ValueError(
                "Debug mode must be disabled in production. Set DEBUG=false."
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
