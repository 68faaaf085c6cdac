# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for Registrar.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from registrar.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.enrollment.default_max_students
    30
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Registrar database configuration.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        dsn: Full async connection URL; overrides the components when set.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "registrar"
    password: SecretStr = SecretStr("registrar_password")
    host: str = "registrar-db"
    port: int = 5432
    database: str = "registrar"
    dsn: str | None = None
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.dsn:
            return self.dsn
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def sync_url(self) -> str:
        """Build the sync database URL for migrations."""
        if self.dsn:
            return self.dsn.replace("+asyncpg", "").replace("+aiosqlite", "")
        pwd = self.password.get_secret_value()
        return f"postgresql://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def is_sqlite(self) -> bool:
        """Check whether the configured backend is SQLite."""
        return self.url.startswith("sqlite")


class EnrollmentSettings(BaseSettings):
    """Enrollment engine policy configuration.

    Attributes:
        default_max_students: Capacity used for courses whose max_students
            is not set. A non-positive course capacity blocks enrollment.
        credit_limit_tiers: (minimum GPA, max credits) pairs, checked from the
            highest GPA down. Used for the non-blocking credit-load warning.
        probation_max_credits: Credit ceiling below the lowest tier.
        default_max_credits: Credit ceiling for students without a recorded GPA.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENROLLMENT_",
        extra="ignore",
    )

    default_max_students: int = 30
    credit_limit_tiers: list[tuple[Decimal, int]] = Field(
        default_factory=lambda: [
            (Decimal("3.5"), 21),
            (Decimal("3.0"), 18),
            (Decimal("2.0"), 15),
        ]
    )
    probation_max_credits: int = 12
    default_max_credits: int = 18

    def max_credits_for(self, gpa: Decimal | float | None) -> int:
        """Get the semester credit ceiling for a cumulative GPA.

        Args:
            gpa: Student's cumulative GPA, or None when not yet graded.

        Returns:
            Maximum credit load before a warning is raised.
        """
        if gpa is None:
            return self.default_max_credits
        gpa_value = Decimal(str(gpa))
        for min_gpa, max_credits in sorted(self.credit_limit_tiers, reverse=True):
            if gpa_value >= min_gpa:
                return max_credits
        return self.probation_max_credits


class NotificationSettings(BaseSettings):
    """Notification sink configuration.

    Attributes:
        enabled: Whether enrollment events are forwarded to channels at all.
        channels: Channel names to deliver through.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        extra="ignore",
    )

    enabled: bool = True
    channels: list[str] = Field(default_factory=lambda: ["log"])


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        workers: Number of worker processes.
        reload: Whether to enable auto-reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 34100
    workers: int = 2
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        db: Database settings.
        enrollment: Enrollment policy settings.
        notifications: Notification sink settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    enrollment: EnrollmentSettings = Field(default_factory=EnrollmentSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.db.is_sqlite:
                raise ValueError(
                    "SQLite cannot provide row-level locking and is not supported "
                    "in production. Set DB_DSN to a PostgreSQL URL."
                )
            if self.db.password.get_secret_value() == "registrar_password":
                raise ValueError(
                    "Database password must be changed from default in production. "
                    "Set DB_PASSWORD environment variable."
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

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
