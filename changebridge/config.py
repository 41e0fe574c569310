"""Configuration loading for the changebridge adapter.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
- Build the adapter's immutable properties bundle
"""

from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from changebridge.core.models import (
    DEFAULT_TARGET_RESOURCE,
    AdapterProperties,
    Credentials,
    MissingBodyPolicy,
)


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Adapter identity
    adapter_id: str = Field(
        default="servicenow",
        description="Identifier used to tag events and log entries",
    )

    # ServiceNow connection
    servicenow_url: str = Field(
        default="http://localhost:8080",
        description="ServiceNow instance base URL",
    )
    servicenow_username: str = Field(
        default="",
        description="ServiceNow login username",
    )
    servicenow_password: SecretStr = Field(
        default=SecretStr(""),
        description="ServiceNow login password",
    )
    servicenow_table: str = Field(
        default=DEFAULT_TARGET_RESOURCE,
        description="Table holding change requests",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Per-request timeout for the connector",
    )

    # Record handling
    missing_body_policy: Literal["drop", "error"] = Field(
        default="drop",
        description="Drop body-less responses silently or report them as errors",
    )

    # Health check scheduling
    healthcheck_interval_seconds: int = Field(
        default=60,
        description="Interval between scheduled health checks in seconds",
    )
    offline_alert_threshold: int = Field(
        default=5,
        description="Consecutive OFFLINE results before a critical alert is logged",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["daemon", "once"] = Field(
        default="daemon",
        description="Run health checks forever or exactly once",
    )

    @field_validator("servicenow_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure the instance URL is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("servicenow_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("servicenow_table")
    @classmethod
    def validate_table(cls, v: str) -> str:
        """Ensure the table name is non-empty."""
        if not v.strip():
            raise ValueError("servicenow_table must not be empty")
        return v.strip()

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensure timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    @field_validator("healthcheck_interval_seconds")
    @classmethod
    def validate_interval(cls, v: int) -> int:
        """Ensure health check interval is positive."""
        if v <= 0:
            raise ValueError("healthcheck_interval_seconds must be positive")
        return v

    @field_validator("offline_alert_threshold")
    @classmethod
    def validate_alert_threshold(cls, v: int) -> int:
        """Ensure alert threshold is at least one."""
        if v < 1:
            raise ValueError("offline_alert_threshold must be at least 1")
        return v

    def adapter_properties(self) -> AdapterProperties:
        """Build the adapter properties bundle from these settings."""
        return AdapterProperties(
            url=self.servicenow_url,
            auth=Credentials(
                username=self.servicenow_username,
                password=self.servicenow_password.get_secret_value(),
            ),
            target_resource_name=self.servicenow_table,
        )

    def body_policy(self) -> MissingBodyPolicy:
        return MissingBodyPolicy(self.missing_body_policy)


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
