"""
Request and response bodies for the HTTP surface that are not domain models.

Domain models (projects, assignments, capacity and skill-gap reports) are
returned as-is; only the identity endpoints and a few wrappers live here.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from rbac.roles import Role
from staffing.models import Seniority, User


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    id: UUID
    name: str
    email: str
    role: Role


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


class ProfileResponse(BaseModel):
    """Authenticated user's own record, without the password hash."""
    id: UUID
    name: str
    email: str
    role: Role
    department: str
    skills: List[str] = Field(default_factory=list)
    seniority: Optional[Seniority] = None
    max_capacity: Optional[int] = None

    @classmethod
    def from_user(cls, user: User) -> "ProfileResponse":
        return cls.model_validate(user.model_dump())


class EngineerResponse(ProfileResponse):
    pass


class AvailabilityResponse(BaseModel):
    engineer_id: UUID
    available_date: date
    mode: str

