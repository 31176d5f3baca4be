"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Supports multiple environments (production, staging, dev)
- Defaults to SQLite (file-based) for durable attribution storage
- Can be switched to the in-memory backend for ephemeral deployments
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tg_redirect.core.exceptions import ConfigurationError

__all__ = ["Settings", "settings", "StorageBackend", "DEV_SIGNING_SECRET", "DEV_IP_HASH_SALT"]

BASE_DIR = Path(__file__).resolve().parent.parent.parent

DEV_SIGNING_SECRET = "dev-secret-key-change-in-production-32"
DEV_IP_HASH_SALT = "default-ip-salt"
MIN_SECRET_LENGTH = 32


class EnvSettingsOptions(Enum):
    """Environment options for deployment."""
    production = "production"
    staging = "staging"
    development = "dev"


class StorageBackend(Enum):
    """Available attribution storage backends."""
    sqlite = "sqlite"
    memory = "memory"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Project Configuration
    ENV_SETTING: EnvSettingsOptions = Field(
        default=EnvSettingsOptions.development,
        description="Environment setting (production, staging, dev)"
    )
    HOST: str = Field(default="0.0.0.0", description="Interface the server binds to")
    PORT: int = Field(default=3000, description="Port the server listens on")
    BASE_URL: str = Field(
        default="http://localhost:3000",
        description="Public base URL of the redirect service"
    )
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    # Code signing / privacy
    CODE_SIGNING_SECRET: str = Field(
        default=DEV_SIGNING_SECRET,
        description="HMAC secret for attribution codes (at least 32 characters in production)"
    )
    IP_HASH_SALT: str = Field(
        default=DEV_IP_HASH_SALT,
        description="Salt mixed into client IPs before hashing"
    )

    # Storage Configuration
    # For SQLite: sqlite+aiosqlite:///./data/telegram-redirect.db (default)
    STORAGE_BACKEND: StorageBackend = Field(
        default=StorageBackend.sqlite,
        description="Attribution storage backend (sqlite or memory)"
    )
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./data/telegram-redirect.db",
        description="Database connection string for the sqlite backend"
    )
    MEMORY_MAX_CLICK_LOGS: int = Field(
        default=10000,
        description="Click log entries kept by the memory backend before the oldest are evicted"
    )

    # Resolution behaviour
    ONE_TIME_CODES: bool = Field(
        default=False,
        description="Delete a code mapping right after its first resolution"
    )
    CODE_CACHE_SIZE: int = Field(default=1000, description="Maximum cached code mappings")
    CODE_CACHE_TTL_SECONDS: int = Field(default=300, description="Lifetime of a cached code mapping")

    # Rate limits, format "count/period"
    RESOLVE_RATE_LIMIT: str = Field(default="60/minute", description="Rate limit for /r/* per IP")
    REDIRECT_RATE_LIMIT: str = Field(default="300/minute", description="Rate limit for /tg/* per IP")

    SLUGS_CONFIG_PATH: Optional[str] = Field(
        default=None,
        description="Path to slugs.json; searched in default locations when unset"
    )

    @property
    def is_production(self) -> bool:
        return self.ENV_SETTING is EnvSettingsOptions.production

    @property
    def is_development(self) -> bool:
        return self.ENV_SETTING is EnvSettingsOptions.development

    def validate_for_environment(self) -> None:
        """
        Reject insecure defaults when running in production.

        Raises:
            ConfigurationError: If the signing secret or IP salt are unsafe
        """
        if not self.is_production:
            return
        if self.CODE_SIGNING_SECRET == DEV_SIGNING_SECRET:
            raise ConfigurationError("CODE_SIGNING_SECRET must be set in production")
        if len(self.CODE_SIGNING_SECRET) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f"CODE_SIGNING_SECRET must be at least {MIN_SECRET_LENGTH} characters"
            )
        if self.IP_HASH_SALT == DEV_IP_HASH_SALT:
            raise ConfigurationError("IP_HASH_SALT must be set in production")


settings = Settings()
