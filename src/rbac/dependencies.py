"""
FastAPI Dependencies

Dependency injection helpers for route protection.

Usage:
    from rbac.dependencies import require_auth, require_manager

    # Require authentication
    @router.get("/profile")
    async def get_profile(ctx: AuthContext = Depends(require_auth)):
        return {"user": ctx.name}

    # Require the manager role
    @router.post("/projects")
    async def create_project(ctx: AuthContext = Depends(require_manager)):
        ...
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from database.unit_of_work import get_store
from services.logging_config import user_id_var
from staffing.errors import Forbidden, Unauthorized
from staffing.interfaces import IStaffingStore

from .context import AuthContext
from .jwt import validate_access_token
from .roles import Role, parse_role

logger = logging.getLogger(__name__)


# =============================================================================
# HTTP BEARER SECURITY
# =============================================================================

security = HTTPBearer(auto_error=False)


# =============================================================================
# CORE DEPENDENCIES
# =============================================================================

async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: IStaffingStore = Depends(get_store),
) -> Optional[AuthContext]:
    """
    Resolve the caller from the bearer token.

    Does NOT enforce authentication - use require_auth for that. The role is
    read from the stored user, never from the token claim.

    Returns:
        AuthContext for a valid token, None for a missing or invalid one.

    Raises:
        Unauthorized: If the token is valid but its user no longer exists
    """
    if credentials is None:
        return None

    payload = validate_access_token(credentials.credentials)
    if payload is None:
        return None

    try:
        user_id = UUID(str(payload["sub"]))
        parse_role(payload.get("role", ""))
    except ValueError as e:
        logger.debug(f"Malformed token payload: {e}")
        return None

    user = await store.users.get(user_id)
    if user is None:
        logger.warning(f"Token presented for unknown user {user_id}")
        raise Unauthorized("User not found.")

    user_id_var.set(str(user.id))
    return AuthContext(
        user_id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        token_exp=_token_expiry(payload),
    )


def _token_expiry(payload: dict) -> Optional[datetime]:
    exp = payload.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(exp, timezone.utc)


async def require_auth(
    ctx: Optional[AuthContext] = Depends(get_auth_context),
) -> AuthContext:
    """
    Require authentication.

    Raises Unauthorized (401) if no valid token was presented.
    """
    if ctx is None:
        raise Unauthorized("Not authorized, token missing or invalid.")
    return ctx


# =============================================================================
# ROLE-BASED DEPENDENCIES
# =============================================================================

def require_role(*roles: Role) -> Callable:
    """
    Require any of the given roles.

    Usage:
        @router.get("/engineers")
        async def list_engineers(ctx: AuthContext = Depends(require_role(Role.MANAGER))):
            ...
    """
    allowed = frozenset(roles)

    async def dependency(ctx: AuthContext = Depends(require_auth)) -> AuthContext:
        if ctx.role not in allowed:
            role_names = ", ".join(sorted(r.value for r in allowed))
            logger.info(f"User {ctx.user_id} ({ctx.role.value}) denied; required role: {role_names}")
            raise Forbidden(f"Required role: {role_names}")
        return ctx

    return dependency


require_manager = require_role(Role.MANAGER)


async def require_engineer_access(
    engineer_id: str,
    ctx: AuthContext = Depends(require_auth),
) -> AuthContext:
    """
    Allow managers, or the engineer named by the ``engineer_id`` path parameter.
    """
    if not ctx.can_view_engineer(engineer_id):
        raise Forbidden("Forbidden.")
    return ctx
