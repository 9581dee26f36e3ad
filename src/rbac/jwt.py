"""
JWT Token Handling

HS256 access tokens for authenticated API calls.
"""

import logging
import secrets
import warnings
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from config.settings import MIN_JWT_SECRET_LENGTH, get_settings

from .roles import Role

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

JWT_ALGORITHM = "HS256"


def _get_jwt_secret() -> str:
    """
    Get JWT secret from settings.

    SECURITY: In production, JWT_SECRET must be set.
    In development, a per-process secret is generated with a warning.
    """
    settings = get_settings()
    secret = settings.jwt_secret

    if not secret:
        if settings.is_production:
            raise RuntimeError(
                "CRITICAL SECURITY ERROR: JWT_SECRET environment variable is required in production. "
                "Generate with: python -c \"import secrets; print(secrets.token_hex(32))\""
            )
        warnings.warn(
            "JWT_SECRET not set - using generated development secret. "
            "Set JWT_SECRET environment variable for production.",
            UserWarning
        )
        return f"DEV-ONLY-{secrets.token_hex(32)}"

    if len(secret) < MIN_JWT_SECRET_LENGTH:
        raise ValueError(f"JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters for security")

    return secret


# Lazy initialization to allow startup validation
_jwt_secret_cache: Optional[str] = None


def get_jwt_secret() -> str:
    """Get the JWT secret (cached after first call)."""
    global _jwt_secret_cache
    if _jwt_secret_cache is None:
        _jwt_secret_cache = _get_jwt_secret()
    return _jwt_secret_cache


# =============================================================================
# TOKEN CREATION
# =============================================================================

def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user: The authenticated user (staffing.models.User)
        expires_delta: Custom expiration time; defaults to JWT_EXPIRE_DAYS

    Returns:
        JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(days=get_settings().jwt_expire_days)

    issued_at = datetime.now(timezone.utc)

    payload = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": Role(user.role).value,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
        "type": "access",
    }

    return jwt.encode(payload, get_jwt_secret(), algorithm=JWT_ALGORITHM)


# =============================================================================
# TOKEN DECODING
# =============================================================================

def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        Token payload as dictionary

    Raises:
        jwt.InvalidTokenError: If token is invalid or expired
    """
    return jwt.decode(
        token,
        get_jwt_secret(),
        algorithms=[JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )


def validate_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Validate an access token.

    Returns payload if valid, None if invalid or not an access token.
    """
    try:
        payload = decode_token(token)
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected token: {e}")
        return None
    if payload.get("type") != "access":
        return None
    return payload
