# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for Learning
Adventures. Settings are loaded from environment variables with sensible
defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from learning_adventures.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-in-production"
DEFAULT_CHILD_SESSION_SECRET = "change-this-child-secret-in-production"


class DatabaseSettings(BaseSettings):
    """PostgreSQL configuration.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "adventures"
    password: SecretStr = SecretStr("adventures_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "learning_adventures"
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def sync_url(self) -> str:
        """Build the sync database URL for migrations."""
        pwd = self.password.get_secret_value()
        return f"postgresql://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class JWTSettings(BaseSettings):
    """JWT authentication configuration for adult accounts.

    Attributes:
        secret_key: Secret key for signing tokens.
        algorithm: JWT signing algorithm.
        access_token_expire_minutes: Access token expiration time.
        refresh_token_expire_days: Refresh token expiration time.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
    )

    secret_key: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(
        default=30,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    refresh_token_expire_days: int = Field(
        default=7,
        validation_alias="REFRESH_TOKEN_EXPIRE_DAYS",
    )


class ChildSessionSettings(BaseSettings):
    """Child profile session configuration.

    Children sign in with a username and 4-digit PIN and receive a
    short-lived session cookie signed with a dedicated secret.

    Attributes:
        secret: Secret key for signing child session tokens.
        algorithm: JWT signing algorithm.
        expire_hours: Session lifetime in hours.
        cookie_name: Name of the session cookie.
        pin_rounds: bcrypt rounds used for PIN hashes.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHILD_SESSION_",
        extra="ignore",
    )

    secret: SecretStr = Field(
        default=SecretStr(DEFAULT_CHILD_SESSION_SECRET),
        validation_alias="CHILD_SESSION_SECRET",
    )
    algorithm: str = "HS256"
    expire_hours: int = 4
    cookie_name: str = "child_session"
    pin_rounds: int = 10


class LLMSettings(BaseSettings):
    """Gemini configuration used through LiteLLM.

    Attributes:
        google_api_key: Google AI Studio API key.
        gemini_model: Gemini model name (without provider prefix).
        request_timeout: Request timeout in seconds.
        max_retries: Maximum retry attempts.
        input_cost_per_million: USD per million prompt tokens.
        output_cost_per_million: USD per million completion tokens.
        max_output_tokens: Upper bound for generated game code.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    google_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="GEMINI_API_KEY",
    )
    gemini_model: str = Field(
        default="gemini-3-pro-preview",
        validation_alias="GEMINI_MODEL",
    )

    request_timeout: float = 120.0
    max_retries: int = 2
    input_cost_per_million: float = 1.25
    output_cost_per_million: float = 5.0
    max_output_tokens: int = 32768

    @property
    def litellm_model(self) -> str:
        """Model identifier in LiteLLM format."""
        return f"gemini/{self.gemini_model}"

    @property
    def is_configured(self) -> bool:
        """Whether a usable API key is present."""
        if self.google_api_key is None:
            return False
        key = self.google_api_key.get_secret_value()
        return bool(key) and key != "your_gemini_api_key_here"


class StorageSettings(BaseSettings):
    """File storage configuration for uploads and published games.

    Attributes:
        public_dir: Directory served as static content.
        local_max_size: Largest file (bytes) kept on local disk.
        blob_api_url: Base URL of the blob storage API.
        blob_token: Read/write token for blob storage.
        catalog_path: JSON file holding the adventure catalog.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore",
    )

    public_dir: str = "public"
    local_max_size: int = 10 * 1024 * 1024
    blob_api_url: str = "https://blob.vercel-storage.com"
    blob_token: SecretStr | None = Field(
        default=None,
        validation_alias="BLOB_READ_WRITE_TOKEN",
    )
    catalog_path: str = "data/catalog.json"


class PlatformSettings(BaseSettings):
    """Business rules that vary per deployment.

    Attributes:
        admin_email_domain: Email suffix that grants admin access.
        max_free_course_enrollments: Free-course enrollment cap for free users.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_",
        extra="ignore",
    )

    admin_email_domain: str = "@learningadventures.org"
    max_free_course_enrollments: int = 2


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    Attributes:
        requests_per_minute: Maximum requests per minute per client.
        storage_uri: slowapi storage backend.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore",
    )

    requests_per_minute: int = 60
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

    origins: str = "http://localhost:3000"
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
    port: int = 8000
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: PostgreSQL settings.
        jwt: Adult account JWT settings.
        child_session: Child session settings.
        llm: Gemini settings.
        storage: Upload and publishing settings.
        platform: Business rule settings.
        rate_limit: Rate limiting settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    child_session: ChildSessionSettings = Field(default_factory=ChildSessionSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    platform: PlatformSettings = Field(default_factory=PlatformSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.jwt.secret_key.get_secret_value() == DEFAULT_JWT_SECRET:
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET_KEY environment variable."
                )
            if self.child_session.secret.get_secret_value() == DEFAULT_CHILD_SESSION_SECRET:
                raise ValueError(
                    "Child session secret must be changed from default in production. "
                    "Set CHILD_SESSION_SECRET environment variable."
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
