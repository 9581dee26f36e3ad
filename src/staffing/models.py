"""
Domain Models for the Engineering Staffing Platform.

Plain pydantic models shared by the capacity engine, the repositories and the
API layer. They carry no persistence concerns; the database package maps them
to and from ORM records.

Invariants:
- Engineers carry seniority and max_capacity; managers carry neither.
- Assignment allocation is an integer percentage in [0, 100].
- Assignment and project intervals are inclusive calendar dates.
"""

from datetime import date
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from rbac.roles import Role

from .errors import InvalidReference, ValidationError


ALLOWED_MAX_CAPACITIES = (50, 100)


class Seniority(str, Enum):
    """Engineer seniority level."""
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"


class ProjectStatus(str, Enum):
    """Project lifecycle status."""
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"


class AssignmentRole(str, Enum):
    """Role an engineer plays on a project."""
    DEVELOPER = "Developer"
    TECH_LEAD = "Tech Lead"
    QA = "QA"
    DESIGNER = "Designer"
    DEVOPS = "DevOps"
    OTHER = "Other"


def parse_entity_id(value, label: str) -> UUID:
    """
    Parse an opaque entity reference.

    Args:
        value: Raw identifier (UUID or string)
        label: Entity name used in the error message

    Returns:
        The identifier as a UUID

    Raises:
        InvalidReference: If the value is not a well-formed identifier
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise InvalidReference(f"Invalid {label} ID format.", reference=str(value))


def intervals_overlap(start: date, end: date, other_start: date, other_end: date) -> bool:
    """Closed-interval intersection test; touching endpoints overlap."""
    return start <= other_end and end >= other_start


def check_date_range(start: date, end: date) -> None:
    """Reject an inclusive interval whose end precedes its start."""
    if end < start:
        raise ValidationError(
            "end_date must be on or after start_date.",
            start_date=start.isoformat(),
            end_date=end.isoformat(),
        )


def unique_in_order(values) -> List[str]:
    """Collapse duplicates while keeping first-appearance order."""
    seen = set()
    ordered = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


# =============================================================================
# USER
# =============================================================================

class User(BaseModel):
    """
    A person known to the system: an engineer or a manager.

    Engineers are the only users that can be assigned to projects.
    """

    id: UUID = Field(default_factory=uuid4)
    email: str
    name: str
    department: str
    role: Role
    skills: List[str] = Field(default_factory=list)
    seniority: Optional[Seniority] = None
    max_capacity: Optional[int] = None
    password_hash: Optional[str] = Field(default=None, exclude=True, repr=False)

    @model_validator(mode="after")
    def _check_engineer_fields(self) -> "User":
        if self.role is Role.ENGINEER:
            if self.seniority is None or self.max_capacity is None:
                raise ValueError("Engineers require seniority and max_capacity")
            if self.max_capacity not in ALLOWED_MAX_CAPACITIES:
                raise ValueError(f"max_capacity must be one of {ALLOWED_MAX_CAPACITIES}")
        elif self.role is Role.MANAGER:
            if self.seniority is not None or self.max_capacity is not None:
                raise ValueError("Managers do not carry seniority or max_capacity")
        return self

    @property
    def is_engineer(self) -> bool:
        return self.role is Role.ENGINEER


class PersonRef(BaseModel):
    """Lightweight reference to a user for populated responses."""
    id: UUID
    name: str
    email: str


# =============================================================================
# PROJECT
# =============================================================================

class Project(BaseModel):
    """A project owned by a manager, with the skills it needs."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    description: str
    start_date: date
    end_date: date
    required_skills: List[str] = Field(default_factory=list)
    team_size: int = Field(gt=0)
    status: ProjectStatus
    manager_id: UUID

    @field_validator("required_skills")
    @classmethod
    def _collapse_skills(cls, value: List[str]) -> List[str]:
        return unique_in_order(value)


class ProjectRef(BaseModel):
    id: UUID
    name: str


# =============================================================================
# ASSIGNMENT
# =============================================================================

class Assignment(BaseModel):
    """
    Binds one engineer to one project for a fraction of their time.

    The interval [start_date, end_date] is inclusive on both ends.
    """

    id: UUID = Field(default_factory=uuid4)
    engineer_id: UUID
    project_id: UUID
    allocation_percentage: int = Field(ge=0, le=100)
    start_date: date
    end_date: date
    role: AssignmentRole = AssignmentRole.DEVELOPER

    def overlaps(self, start: date, end: date) -> bool:
        return intervals_overlap(self.start_date, self.end_date, start, end)

    def is_active_on(self, day: date) -> bool:
        return self.overlaps(day, day)


class AssignmentDetail(Assignment):
    """An assignment with its engineer and project references populated."""

    engineer: Optional[PersonRef] = None
    project: Optional[ProjectRef] = None
