"""
Repository Interfaces for the Staffing Domain.

The capacity engine and resolvers only talk to these contracts. The SQLAlchemy
implementation lives in database.repositories; tests use an in-memory one.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from rbac.roles import Role

from .models import Assignment, AssignmentDetail, Project, User


class IUserRepository(ABC):
    """Access to engineers and managers."""

    @abstractmethod
    async def get(self, user_id: UUID, for_update: bool = False) -> Optional[User]:
        """
        Retrieve a user by ID.

        Args:
            user_id: User identifier
            for_update: Lock the row until the current transaction ends

        Returns:
            The user if found, None otherwise
        """

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def add(self, user: User) -> None:
        pass

    @abstractmethod
    async def list_by_role(self, role: Role) -> List[User]:
        pass

    @abstractmethod
    async def get_many(self, user_ids: Sequence[UUID]) -> List[User]:
        """Fetch several users at once; unknown IDs are skipped."""


class IProjectRepository(ABC):
    """Access to projects."""

    @abstractmethod
    async def get(self, project_id: UUID) -> Optional[Project]:
        pass

    @abstractmethod
    async def add(self, project: Project) -> None:
        pass

    @abstractmethod
    async def update(self, project: Project) -> None:
        pass

    @abstractmethod
    async def list_all(self) -> List[Project]:
        pass


class IAssignmentRepository(ABC):
    """Access to assignments, including the interval queries."""

    @abstractmethod
    async def get(self, assignment_id: UUID) -> Optional[Assignment]:
        pass

    @abstractmethod
    async def get_detail(self, assignment_id: UUID) -> Optional[AssignmentDetail]:
        """Retrieve an assignment with engineer and project references populated."""

    @abstractmethod
    async def add(self, assignment: Assignment) -> None:
        pass

    @abstractmethod
    async def update(self, assignment: Assignment) -> None:
        pass

    @abstractmethod
    async def delete(self, assignment_id: UUID) -> bool:
        """
        Delete an assignment.

        Returns:
            True if deleted, False if not found
        """

    @abstractmethod
    async def list_for_engineer(
        self,
        engineer_id: UUID,
        overlapping: Optional[Tuple[date, date]] = None,
    ) -> List[Assignment]:
        """
        List an engineer's assignments.

        Args:
            engineer_id: Engineer identifier
            overlapping: Optional inclusive (start, end) window; only
                assignments with start <= end and end >= start are returned

        Returns:
            Matching assignments (unordered)
        """

    @abstractmethod
    async def list_for_project(self, project_id: UUID) -> List[Assignment]:
        pass

    @abstractmethod
    async def list_details(self, engineer_id: Optional[UUID] = None) -> List[AssignmentDetail]:
        """List populated assignments, optionally only one engineer's."""


class IStaffingStore(ABC):
    """
    Unit of work over the three repositories.

    Writes become visible to other stores only after commit().
    """

    @property
    @abstractmethod
    def users(self) -> IUserRepository:
        pass

    @property
    @abstractmethod
    def projects(self) -> IProjectRepository:
        pass

    @property
    @abstractmethod
    def assignments(self) -> IAssignmentRepository:
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass
