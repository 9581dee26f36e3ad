"""Application settings using Pydantic Settings.

Centralized configuration for the staffing service.

SECURITY: Production requires the following environment variable:
- JWT_SECRET: JWT signing key (min 32 chars)

Generate secrets with: python -c "import secrets; print(secrets.token_hex(32))"
"""

import sys
import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from staffing.availability import AvailabilityMode
from staffing.capacity import CreatePolicy

logger = logging.getLogger(__name__)

MIN_JWT_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    app_name: str = Field(default="Staffing Service", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    app_environment: str = Field(
        default="development",
        description="Environment name (development, test, production)"
    )

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=5000, description="API port")

    # Security
    # CRITICAL: Must be set via JWT_SECRET in production
    jwt_secret: Optional[str] = Field(
        default=None,
        description="JWT signing key - a development secret is generated if not set"
    )
    jwt_expire_days: int = Field(default=7, ge=1, description="Access token lifetime in days")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    # CORS
    cors_allow_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    # Capacity rules
    capacity_create_policy: CreatePolicy = Field(
        default=CreatePolicy.INTERVAL,
        description="Window a new assignment is checked against (interval or current)"
    )
    availability_mode: AvailabilityMode = Field(
        default=AvailabilityMode.UPPER_BOUND,
        description="Default next-available-date computation (upper_bound or exact)"
    )
    serialize_writes: bool = Field(
        default=True,
        description="Serialize capacity check and write per engineer"
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_environment in ("production", "prod", "staging")

    def validate_production_security(self) -> List[str]:
        """
        Validate all security requirements for production.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.is_production:
            return errors

        if not self.jwt_secret:
            errors.append(
                "JWT_SECRET: Required in production. "
                "Generate with: python -c \"import secrets; print(secrets.token_hex(32))\""
            )
        elif len(self.jwt_secret) < MIN_JWT_SECRET_LENGTH:
            errors.append(f"JWT_SECRET: Must be at least {MIN_JWT_SECRET_LENGTH} characters")

        if "*" in self.cors_allow_origins:
            errors.append("CORS_ALLOW_ORIGINS: Wildcard origin is not allowed in production")

        return errors


# =============================================================================
# STARTUP VALIDATION
# =============================================================================

class StartupSecurityError(Exception):
    """Raised when security validation fails at startup."""
    pass


def validate_startup_security(settings: Settings, exit_on_failure: bool = True) -> bool:
    """
    Validate security settings at application startup.

    In production, fails fast if critical security settings are missing.

    Args:
        settings: Application settings instance
        exit_on_failure: If True, exit the process on failure (default)

    Returns:
        True if validation passes

    Raises:
        StartupSecurityError: If validation fails and exit_on_failure is False
    """
    errors = settings.validate_production_security()

    if not errors:
        if settings.is_production:
            logger.info("Production security validation PASSED")
        return True

    error_msg = (
        "\n" + "=" * 60 + "\n"
        "CRITICAL SECURITY CONFIGURATION ERROR\n"
        "=" * 60 + "\n\n"
        "The following security settings are missing or invalid:\n\n"
    )
    for i, err in enumerate(errors, 1):
        error_msg += f"  {i}. {err}\n\n"

    error_msg += (
        "=" * 60 + "\n"
        "APPLICATION CANNOT START IN PRODUCTION WITHOUT THESE SETTINGS\n"
        "=" * 60 + "\n"
    )

    logger.critical(error_msg)

    if exit_on_failure:
        print(error_msg, file=sys.stderr)
        sys.exit(1)
    else:
        raise StartupSecurityError(error_msg)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Settings: Cached settings loaded from environment.
    """
    return Settings()
