"""
Role Definitions

Two roles, closed:

    manager   - owns projects, staffs engineers, sees everyone
    engineer  - sees their own assignments, capacity and availability

Every access decision dispatches over Role exhaustively; a role string that is
not listed here is never accepted.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict


class Role(str, Enum):
    """
    All roles in the system.

    Naming convention: UPPER_SNAKE_CASE for enum, lower_snake_case for value.
    """

    ENGINEER = "engineer"
    """
    Assignable to projects. Carries skills, seniority and max capacity.
    """

    MANAGER = "manager"
    """
    Creates projects and assignments. Cannot be assigned.
    """


@dataclass(frozen=True)
class RoleInfo:
    """Complete information about a role."""
    role: Role
    name: str
    description: str
    can_manage: bool       # Create/update projects and assignments
    sees_all_engineers: bool


# =============================================================================
# ROLE REGISTRY
# =============================================================================

ROLES: Dict[Role, RoleInfo] = {
    Role.ENGINEER: RoleInfo(
        role=Role.ENGINEER,
        name="Engineer",
        description="Individual contributor staffed onto projects",
        can_manage=False,
        sees_all_engineers=False,
    ),
    Role.MANAGER: RoleInfo(
        role=Role.MANAGER,
        name="Manager",
        description="Owns projects and staffs engineers",
        can_manage=True,
        sees_all_engineers=True,
    ),
}


def get_role_info(role: Role) -> RoleInfo:
    """Get information about a role."""
    return ROLES[role]


def parse_role(value: str) -> Role:
    """
    Parse a role string from an untrusted source (e.g. a token claim).

    Raises:
        ValueError: If the value is not a known role
    """
    return Role(value)
