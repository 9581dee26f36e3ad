"""
Role-Based Access Control (RBAC)

Two roles: manager and engineer.

    manager   - full read/write across engineers, projects and assignments
    engineer  - read-only, scoped to their own assignments, capacity and
                availability

FastAPI dependencies live in rbac.dependencies and token handling in rbac.jwt;
they are not re-exported here because they depend on the database and config
packages, which themselves import Role.

Usage:
    from rbac import Role, AuthContext
    from rbac.dependencies import require_auth, require_manager
"""

from .roles import Role, RoleInfo, ROLES, get_role_info, parse_role
from .context import AuthContext

__all__ = [
    # Roles
    "Role",
    "RoleInfo",
    "ROLES",
    "get_role_info",
    "parse_role",

    # Context
    "AuthContext",
]
