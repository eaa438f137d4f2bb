"""
Unit tests for application settings.

Tests cover:
- Defaults with no environment configured
- Environment variable loading
- Field validation (environment, log level, store timeout)
- Production guard on the metrics token
"""

import pytest
from pydantic import ValidationError

from gc_policy.core.config import AppEnvironment, Settings, StoreBackend


class TestDefaults:
    """Settings start with usable defaults."""

    @pytest.mark.anyio
    async def test_defaults(self, monkeypatch):
        for name in ("APP_ENV", "APP_LOG_LEVEL", "METRICS_TOKEN", "GC_STORE_TIMEOUT_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        s = Settings()

        assert s.app_env == AppEnvironment.LOCAL
        assert s.app_log_level == "INFO"
        assert s.gc_store_backend == StoreBackend.MEMORY
        assert s.gc_store_timeout_seconds == 30.0

    @pytest.mark.anyio
    async def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "TEST")
        monkeypatch.setenv("GC_STORE_TIMEOUT_SECONDS", "2.5")

        s = Settings()

        assert s.app_env == AppEnvironment.TEST
        assert s.gc_store_timeout_seconds == 2.5


class TestFieldValidation:
    """Invalid values are rejected at startup."""

    @pytest.mark.anyio
    async def test_invalid_app_env(self):
        with pytest.raises(ValidationError):
            Settings(app_env="staging")

    @pytest.mark.anyio
    async def test_log_level_normalized(self):
        assert Settings(app_log_level=" debug ").app_log_level == "DEBUG"

    @pytest.mark.anyio
    async def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(app_log_level="verbose")

    @pytest.mark.anyio
    async def test_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            Settings(gc_store_timeout_seconds=0)

    @pytest.mark.anyio
    async def test_unknown_store_backend(self):
        with pytest.raises(ValidationError):
            Settings(gc_store_backend="cassandra")


class TestProductionSettings:
    """Production requires a metrics token."""

    @pytest.mark.anyio
    async def test_prod_without_metrics_token(self, monkeypatch):
        monkeypatch.delenv("METRICS_TOKEN", raising=False)

        with pytest.raises(ValidationError):
            Settings(app_env="prod")

    @pytest.mark.anyio
    async def test_prod_with_short_metrics_token(self):
        with pytest.raises(ValidationError):
            Settings(app_env="prod", metrics_token="short")

    @pytest.mark.anyio
    async def test_prod_with_metrics_token(self):
        s = Settings(app_env="prod", metrics_token="a" * 32)
        assert s.app_env == AppEnvironment.PROD

    @pytest.mark.anyio
    async def test_prod_with_observability_disabled(self, monkeypatch):
        monkeypatch.delenv("METRICS_TOKEN", raising=False)

        s = Settings(app_env="prod", observability_enabled=False)
        assert s.metrics_token is None
