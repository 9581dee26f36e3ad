"""Configuration module for the staffing service."""

from .database import DatabaseSettings, get_database_settings
from .settings import Settings, get_settings, validate_startup_security

__all__ = [
    "DatabaseSettings",
    "get_database_settings",
    "Settings",
    "get_settings",
    "validate_startup_security",
]
