"""Tests for application and database settings."""

import pytest

from config.database import DatabaseSettings
from config.settings import Settings, StartupSecurityError, validate_startup_security
from staffing.availability import AvailabilityMode
from staffing.capacity import CreatePolicy


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("CAPACITY_CREATE_POLICY", "AVAILABILITY_MODE", "SERIALIZE_WRITES"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()

        assert settings.capacity_create_policy is CreatePolicy.INTERVAL
        assert settings.availability_mode is AvailabilityMode.UPPER_BOUND
        assert settings.serialize_writes is True
        assert settings.jwt_expire_days == 7

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CAPACITY_CREATE_POLICY", "current")
        monkeypatch.setenv("AVAILABILITY_MODE", "exact")
        monkeypatch.setenv("SERIALIZE_WRITES", "false")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings()

        assert settings.capacity_create_policy is CreatePolicy.CURRENT
        assert settings.availability_mode is AvailabilityMode.EXACT
        assert settings.serialize_writes is False
        assert settings.log_level == "DEBUG"

    def test_unknown_policy_rejected(self, monkeypatch):
        monkeypatch.setenv("CAPACITY_CREATE_POLICY", "whenever")
        with pytest.raises(ValueError):
            Settings()


class TestStartupSecurity:

    def test_non_production_always_passes(self):
        settings = Settings(app_environment="development", jwt_secret=None)
        assert validate_startup_security(settings, exit_on_failure=False)

    def test_production_requires_secret(self):
        settings = Settings(app_environment="production", jwt_secret=None)

        assert any("JWT_SECRET" in e for e in settings.validate_production_security())
        with pytest.raises(StartupSecurityError):
            validate_startup_security(settings, exit_on_failure=False)

    def test_production_rejects_short_secret_and_wildcard_cors(self):
        settings = Settings(
            app_environment="production",
            jwt_secret="too-short",
            cors_allow_origins=["*"],
        )
        errors = settings.validate_production_security()
        assert len(errors) == 2

    def test_production_passes_when_configured(self):
        settings = Settings(app_environment="production", jwt_secret="s" * 32)
        assert validate_startup_security(settings, exit_on_failure=False)


class TestDatabaseSettings:

    def test_sqlite_url(self, tmp_path):
        settings = DatabaseSettings(driver="sqlite+aiosqlite", sqlite_path=tmp_path / "db" / "x.db")

        assert settings.is_sqlite
        assert not settings.is_postgres
        assert settings.async_url.startswith("sqlite+aiosqlite:///")
        assert (tmp_path / "db").is_dir()
        assert "check_same_thread" in settings.get_connect_args()

    def test_postgres_url(self):
        settings = DatabaseSettings(
            driver="postgresql+asyncpg", host="db", port=5433, name="staffing", user="app", password="pw",
        )

        assert settings.is_postgres
        assert settings.async_url == "postgresql+asyncpg://app:pw@db:5433/staffing"
        assert settings.get_connect_args() == {"command_timeout": settings.query_timeout}
