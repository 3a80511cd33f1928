# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the expert
chat service. Settings are loaded from environment variables (and an
optional ``.env`` file) with explicit defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from expertchat.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.similarity.timeout)
    2.0
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DB_PASSWORD = "expertchat_password"
DEFAULT_BLOCKLIST_PATH = Path(__file__).parent / "blocklist.yaml"


class DatabaseSettings(BaseSettings):
    """Database configuration.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        name: Database name.
        url_override: Full async URL, takes precedence over the components.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        create_tables: Run metadata.create_all at startup.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "expertchat"
    password: SecretStr = SecretStr(DEFAULT_DB_PASSWORD)
    host: str = "localhost"
    port: int = 5432
    name: str = "expertchat"
    url_override: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
    )
    pool_size: int = 10
    max_overflow: int = 20
    create_tables: bool = False

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.name}"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured URL points at SQLite."""
        return self.url.startswith("sqlite")


class RedisSettings(BaseSettings):
    """Redis configuration for the task broker.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        password: Redis password.
        database: Redis database number.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 6379
    password: SecretStr | None = None
    database: int = 0

    @property
    def url(self) -> str:
        """Build the Redis connection URL."""
        if self.password is not None and self.password.get_secret_value():
            pwd = self.password.get_secret_value()
            return f"redis://:{pwd}@{self.host}:{self.port}/{self.database}"
        return f"redis://{self.host}:{self.port}/{self.database}"


class SimilaritySettings(BaseSettings):
    """External word-similarity service configuration.

    The service must answer ``GET {endpoint}?ml=<topic>&max=<n>`` with a JSON
    list of ``{"word": ...}`` objects (the Datamuse "means like" API).

    Attributes:
        endpoint: Lookup URL.
        timeout: Overall bound on one lookup, in seconds.
        max_results: Maximum related terms requested.
        enabled: Skip the lookup entirely when False.
    """

    model_config = SettingsConfigDict(
        env_prefix="SIMILARITY_",
        extra="ignore",
    )

    endpoint: str = "https://api.datamuse.com/words"
    timeout: float = 2.0
    max_results: int = 25
    enabled: bool = True


class ModerationSettings(BaseSettings):
    """Chat moderation configuration.

    Attributes:
        blocklist_path: YAML file with a ``words`` list.
        extra_words: Comma-separated words added on top of the file.
        mask_char: Character repeated over each masked token.
    """

    model_config = SettingsConfigDict(
        env_prefix="MODERATION_",
        extra="ignore",
    )

    blocklist_path: Path = DEFAULT_BLOCKLIST_PATH
    extra_words: str = "testfilter"
    mask_char: str = "#"

    @property
    def extra_words_list(self) -> list[str]:
        """Parse extra words string into a list."""
        return [word.strip() for word in self.extra_words.split(",") if word.strip()]


class AlertSettings(BaseSettings):
    """Moderation alert delivery configuration.

    Attributes:
        smtp_host: SMTP server hostname.
        smtp_port: SMTP server port.
        smtp_username: SMTP authentication username.
        smtp_password: SMTP authentication password.
        smtp_use_tls: Use STARTTLS.
        from_email: Sender email address.
        from_name: Sender display name.
        recipient_email: Admin inbox receiving moderation alerts.
        timeout: Bound on one SMTP delivery, in seconds.
        enqueue_timeout: Bound on handing an alert job to the broker.
    """

    model_config = SettingsConfigDict(
        env_prefix="ALERT_",
        extra="ignore",
    )

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True
    from_email: str | None = None
    from_name: str = "Expert Chat"
    recipient_email: str | None = None
    timeout: float = 10.0
    enqueue_timeout: float = 2.0

    @property
    def is_configured(self) -> bool:
        """Check that every value needed to send mail is present."""
        return all([
            self.smtp_host,
            self.smtp_username,
            self.smtp_password,
            self.from_email,
        ])


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    Attributes:
        enabled: Whether limits are enforced.
        requests_per_minute: Default limit per client address.
        signin_per_minute: Limit for the signin endpoint.
        storage_uri: slowapi storage backend URI.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore",
    )

    enabled: bool = True
    requests_per_minute: int = 60
    signin_per_minute: int = 5
    storage_uri: str = "memory://"


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
    """API server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 3000
    workers: int = 2
    reload: bool = False


class WorkerSettings(BaseSettings):
    """Background worker configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WORKER_",
        extra="ignore",
    )

    processes: int = 1
    threads: int = 4


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Database settings.
        redis: Redis settings.
        similarity: Word-similarity service settings.
        moderation: Chat moderation settings.
        alerts: Moderation alert delivery settings.
        rate_limit: Rate limiting settings.
        cors: CORS settings.
        api: API server settings.
        worker: Background worker settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "test", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    similarity: SimilaritySettings = Field(default_factory=SimilaritySettings)
    moderation: ModerationSettings = Field(default_factory=ModerationSettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if (
                self.database.url_override is None
                and self.database.password.get_secret_value() == DEFAULT_DB_PASSWORD
            ):
                raise ValueError(
                    "Database password must be changed from default in production. "
                    "Set DB_PASSWORD or DATABASE_URL environment variable."
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
