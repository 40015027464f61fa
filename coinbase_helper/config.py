"""
Configuration management for the Coinbase helper client.

Loads settings from environment variables (optionally primed from a dotenv
file) with validation.
"""

import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

APP_NAME = "helper"

LogLevel = Literal["debug", "info", "warn", "error"]


def default_env_path() -> Path:
    """Default dotenv location: $XDG_CONFIG_HOME/helper/.env."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home) / APP_NAME / ".env"


def default_cache_dir() -> Path:
    """Default cache root: $XDG_CACHE_HOME/helper."""
    cache_home = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(cache_home) / APP_NAME


def resolve_env_path(explicit_path: Optional[str] = None) -> Path:
    """
    Resolve which dotenv file to load.

    Precedence: explicit argument, HELPER_ENV_FILE, XDG default.
    """
    if explicit_path:
        return Path(explicit_path)
    env_file = os.environ.get("HELPER_ENV_FILE")
    if env_file:
        return Path(env_file)
    return default_env_path()


class HelperSettings(BaseSettings):
    """
    Helper client settings.

    Loads from environment variables with HELPER_ prefix.
    """
    model_config = SettingsConfigDict(
        env_prefix="HELPER_",
        case_sensitive=False,
        extra="ignore"
    )

    # Credentials
    coinbase_credentials_path: str = Field(
        ...,
        min_length=1,
        description="Path to the Coinbase CDP key JSON file"
    )

    # Database (not used by the client, validated for the env checker)
    postgres_database: Optional[str] = Field(None, min_length=1)
    postgres_username: Optional[str] = Field(None, min_length=1)
    postgres_password: Optional[str] = Field(None, min_length=1, repr=False)

    # API
    api_host: str = Field(default="api.coinbase.com", description="Brokerage API host")
    api_prefix: str = Field(default="/api/v3/brokerage", description="Brokerage path prefix")

    # Timeouts and retries
    request_timeout: float = Field(default=30.0, ge=1.0, description="Request timeout (seconds)")
    connect_timeout: float = Field(default=10.0, ge=1.0, description="Connection timeout (seconds)")
    max_retries: int = Field(default=5, ge=1, le=20, description="Max attempts per request")
    retry_base_delay: float = Field(default=1.0, ge=0.0, description="Backoff step (seconds)")

    # Cache
    cache_dir: Path = Field(default_factory=default_cache_dir, description="Disk cache root")

    # Logging
    log_level: LogLevel = Field(default="info", description="Logging level")
    log_requests: bool = Field(default=False, description="Log all HTTP requests")

    # Metrics
    enable_metrics: bool = Field(default=False, description="Enable Prometheus metrics")
    metrics_port: int = Field(default=9090, ge=1024, le=65535, description="Metrics server port")

    @property
    def base_url(self) -> str:
        """Scheme + host, without the brokerage prefix."""
        return f"https://{self.api_host}"

    def __repr__(self) -> str:
        """Safe repr without sensitive data."""
        return (
            f"HelperSettings("
            f"api_host={self.api_host}, "
            f"log_level={self.log_level}, "
            f"max_retries={self.max_retries}"
            ")"
        )


def load_settings(env_file: Optional[str] = None) -> HelperSettings:
    """
    Prime the environment from a dotenv file and validate settings.

    Variables already present in the environment win over the file.

    Args:
        env_file: Explicit dotenv path (falls back to HELPER_ENV_FILE, then
            $XDG_CONFIG_HOME/helper/.env)

    Returns:
        Validated settings instance

    Raises:
        ConfigurationError: If required settings are missing or invalid
    """
    env_path = resolve_env_path(env_file)
    load_dotenv(dotenv_path=env_path, override=False)

    try:
        return HelperSettings()
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid environment configuration: {e}",
            {"env_file": str(env_path)}
        ) from e
