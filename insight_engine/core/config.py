"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Vendor credentials are optional at startup. A provider whose settings are
missing simply reports an error marker in its result slot.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Request limits, rate limiting and cache configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    min_text_chars: int = Field(
        3,
        description="Minimum text length (after trimming) accepted for analysis",
        ge=1,
    )
    max_text_chars: int = Field(
        5000,
        description="Maximum text length (after trimming) accepted for analysis",
        ge=1,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting",
    )
    rate_limit_cooldown_seconds: int = Field(
        5,
        description="Minimum delay between two requests from the same client",
        ge=0,
    )
    rate_limit_hourly_max: int = Field(
        50,
        description="Maximum requests per client over a trailing hour",
        ge=1,
    )
    rate_limit_daily_max: int = Field(
        200,
        description="Maximum requests per client over a trailing 24 hours",
        ge=1,
    )
    rate_limit_session_max: int = Field(
        25,
        description="Maximum requests per session over a trailing hour",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include a Retry-After header when throttling",
    )

    cache_ttl_seconds: int = Field(
        300,
        description="Time-to-live of cached analysis results",
        ge=1,
    )
    cache_max_entries: int = Field(
        1024,
        description="Maximum number of cached analysis results",
        ge=1,
    )
    sweep_interval_seconds: float = Field(
        300.0,
        description="Interval of the background sweep of expired cache and rate-limit state",
        gt=0,
    )

    cors_allow_origins: str = Field(
        "*",
        description="Comma-separated list of allowed CORS origins",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10_485_760, description="Rotate log file after this many bytes (0 disables)")
    backup_count: int = Field(5, description="Number of rotated log files kept")
    request_id_header: str = Field("X-Request-ID", description="Header carrying the correlation id")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class ProviderSettings(BaseSettings):
    """Settings shared by all NLP provider adapters."""

    timeout_seconds: float = Field(
        10.0,
        description="Upper bound for a single vendor call in seconds",
        gt=0,
    )
    language_hint: str = Field(
        "en",
        description="Language hint sent to vendors that require one",
    )

    model_config = SettingsConfigDict(
        env_prefix="PROVIDERS_",
        case_sensitive=False,
    )


class AzureSettings(BaseSettings):
    """Azure AI Language configuration."""

    endpoint: str | None = Field(
        None,
        description="Azure Language resource endpoint",
    )
    key: str | None = Field(
        None,
        description="Azure Language resource key",
        validation_alias=AliasChoices(
            "AZURE_LANGUAGE_KEY",
            "AZURE_LANGUAGE_CREDIANTIAL_KEY",
        ),
    )
    classification_project: str | None = Field(
        None,
        description="Custom text classification project name",
    )
    classification_deployment: str | None = Field(
        None,
        description="Custom text classification deployment name",
    )

    model_config = SettingsConfigDict(
        env_prefix="AZURE_LANGUAGE_",
        case_sensitive=False,
    )


class AWSSettings(BaseSettings):
    """AWS Comprehend configuration.

    Credentials are resolved by boto3 (AWS_ACCESS_KEY_ID, profiles, roles).
    """

    region: str = Field(
        "us-east-1",
        description="AWS region hosting Comprehend",
    )
    comprehend_classifier_arn: str | None = Field(
        None,
        description="Endpoint ARN of a custom Comprehend document classifier",
    )

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        case_sensitive=False,
    )


class GoogleSettings(BaseSettings):
    """Google Cloud Natural Language configuration.

    Without a credentials file, Application Default Credentials are used.
    """

    credentials_file: str | None = Field(
        None,
        description="Path to a service account JSON key file",
    )

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    azure: AzureSettings = Field(default_factory=AzureSettings)
    aws: AWSSettings = Field(default_factory=AWSSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()


def settings_for(app: Any) -> Settings:
    """Return the settings an app was built with, falling back to the global ones."""

    return getattr(app.state, "settings", None) or settings
