"""
Authentication Context

AuthContext is the object passed through routes describing the authenticated
user and what they may do.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from .roles import Role, get_role_info


@dataclass
class AuthContext:
    """
    Authentication context for the current request.

    Usage:
        @router.get("/assignments")
        async def list_assignments(ctx: AuthContext = Depends(require_auth)):
            if ctx.is_manager:
                return await engine.list_assignments()
            return await engine.list_assignments(ctx.user_id)
    """

    # =========================================================================
    # Identity
    # =========================================================================

    user_id: UUID
    """Unique identifier for the user."""

    email: str
    """User's email address."""

    name: str
    """User's display name."""

    role: Role
    """User's role, as stored (not as claimed by the token)."""

    is_authenticated: bool = True

    token_exp: Optional[datetime] = None
    """Token expiration time."""

    # =========================================================================
    # Role Checks
    # =========================================================================

    def has_role(self, role: Role) -> bool:
        return self.role == role

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER

    @property
    def is_engineer(self) -> bool:
        return self.role == Role.ENGINEER

    # =========================================================================
    # Access Checks
    # =========================================================================

    def can_manage(self) -> bool:
        """May create or update projects and assignments."""
        return get_role_info(self.role).can_manage

    def can_view_engineer(self, engineer_id: str) -> bool:
        """
        Check if the user may read an engineer's capacity or availability.

        Managers see every engineer; engineers see only themselves. The ID is
        compared as received so a malformed value is still rejected here.
        """
        if self.role == Role.MANAGER:
            return True
        if self.role == Role.ENGINEER:
            return str(self.user_id) == str(engineer_id)
        raise ValueError(f"Unhandled role: {self.role}")

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict:
        return {
            "user_id": str(self.user_id),
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "is_authenticated": self.is_authenticated,
        }
