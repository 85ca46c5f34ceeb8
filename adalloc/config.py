"""
Centralized configuration for AdAlloc.

This module provides a single source of truth for all configuration values.
Configuration is loaded from environment variables with sensible defaults.

Usage:
    from adalloc.config import config

    api_key = config.ai.api_key
    data_dir = config.storage.data_dir
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class AIConfig:
    """AI strategist (Anthropic Claude) configuration."""

    api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    model: str = field(
        default_factory=lambda: os.getenv("ADALLOC_AI_MODEL", "claude-sonnet-4-20250514")
    )
    max_tokens: int = 2000
    timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("ADALLOC_AI_TIMEOUT", "60"))
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class StorageConfig:
    """Local key-value storage configuration."""

    data_dir: str = field(
        default_factory=lambda: os.getenv(
            "ADALLOC_DATA_DIR", os.path.join(os.path.expanduser("~"), ".adalloc")
        )
    )

    # Document keys, one JSON document per collection
    customers_key: str = "adalloc-customers"
    settings_key: str = "adalloc-settings"
    goals_key: str = "adalloc-goals"


@dataclass(frozen=True)
class WebConfig:
    """HTTP API configuration."""

    host: str = field(default_factory=lambda: os.getenv("WEB_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("WEB_PORT", "8080")))

    # Rate limiting
    read_rate_limit: str = "120/minute"
    write_rate_limit: str = "60/minute"
    optimize_rate_limit: str = "10/minute"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    json_format: bool = field(
        default_factory=lambda: os.getenv("LOG_FORMAT", "text").lower() == "json"
    )


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    version: str = "1.0.0"
    ai: AIConfig = field(default_factory=AIConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global config instance
config = AppConfig()


VERSION = config.version


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_config(app_config: AppConfig = None, require_ai: bool = False) -> None:
    """
    Validate that all required configuration is present.

    Call this on application startup to fail fast with clear error messages.
    A missing AI key is not an error unless require_ai is set: the AI
    strategist simply runs disabled.

    Args:
        app_config: Config to check (defaults to the global instance)
        require_ai: If True, ANTHROPIC_API_KEY must be set

    Raises:
        ConfigurationError: If required configuration is missing
    """
    app_config = app_config or config
    errors = []

    if require_ai and not app_config.ai.api_key:
        errors.append("ANTHROPIC_API_KEY is required but not set")

    if app_config.ai.max_tokens <= 0:
        errors.append("AI max_tokens must be positive")

    if app_config.ai.timeout_seconds <= 0:
        errors.append("ADALLOC_AI_TIMEOUT must be positive")

    if not app_config.storage.data_dir:
        errors.append("ADALLOC_DATA_DIR must not be empty")

    if app_config.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        errors.append(f"LOG_LEVEL '{app_config.logging.level}' is not a valid level")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)
