"""Repository implementations for the staffing store."""

from .user_repository import UserRepository
from .project_repository import ProjectRepository
from .assignment_repository import AssignmentRepository

__all__ = [
    "UserRepository",
    "ProjectRepository",
    "AssignmentRepository",
]
