"""Application configuration using Pydantic Settings.

This project loads configuration from environment variables.

Optionally, you may point `ENV_FILE` at a local env file (for development).
"""

import os
from enum import Enum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class StoreBackend(str, Enum):
    """Column-family store implementations the service can be wired to."""

    MEMORY = "memory"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Every field has a default, so the service starts with no environment
    configured (in-memory store, structured logs at INFO).
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "gc-policy-service"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True

    # Metrics token for protecting /metrics endpoint
    metrics_token: str | None = None

    # Column-family store
    gc_store_backend: StoreBackend = StoreBackend.MEMORY

    # Upper bound for a single store call; the manager never retries
    gc_store_timeout_seconds: float = 30.0

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("app_log_level")
    @classmethod
    def validate_app_log_level(cls, v: str) -> str:
        """Normalize the log level and reject unknown names."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"app_log_level must be a standard logging level, got '{v}'")
        return level

    @field_validator("gc_store_timeout_seconds")
    @classmethod
    def validate_store_timeout(cls, v: float) -> float:
        """Timeouts must be positive."""
        if v <= 0:
            raise ValueError(f"gc_store_timeout_seconds must be > 0, got {v}")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate production-specific settings.

        Production must protect /metrics with a token.
        """
        if self.app_env == AppEnvironment.PROD and self.observability_enabled:
            if not self.metrics_token or len(self.metrics_token) < 16:
                raise ValueError(
                    "METRICS_TOKEN must be set and at least 16 characters in production"
                )
        return self


settings = Settings()
