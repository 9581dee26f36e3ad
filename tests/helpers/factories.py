"""Builders for users, projects and assignments used across the tests."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from rbac.roles import Role
from staffing.models import (
    Assignment,
    Project,
    ProjectStatus,
    Seniority,
    User,
)


def make_engineer(
    name: str = "Alice Engineer",
    max_capacity: int = 100,
    skills: Optional[List[str]] = None,
    email: Optional[str] = None,
    password_hash: Optional[str] = None,
) -> User:
    return User(
        email=email or f"{name.split()[0].lower()}@example.com",
        name=name,
        department="Engineering",
        role=Role.ENGINEER,
        skills=skills or [],
        seniority=Seniority.MID,
        max_capacity=max_capacity,
        password_hash=password_hash,
    )


def make_manager(
    name: str = "Manager One",
    email: Optional[str] = None,
    password_hash: Optional[str] = None,
) -> User:
    return User(
        email=email or f"{name.split()[-1].lower()}@example.com",
        name=name,
        department="Operations",
        role=Role.MANAGER,
        password_hash=password_hash,
    )


def make_project(
    manager_id: UUID,
    name: str = "Project Apollo",
    required_skills: Optional[List[str]] = None,
    start_date: date = date(2025, 1, 1),
    end_date: date = date(2025, 12, 31),
) -> Project:
    return Project(
        name=name,
        description=f"{name} description",
        start_date=start_date,
        end_date=end_date,
        required_skills=required_skills or [],
        team_size=3,
        status=ProjectStatus.ACTIVE,
        manager_id=manager_id,
    )


def make_assignment(
    engineer_id: UUID,
    project_id: UUID,
    allocation: int,
    start_date: date,
    end_date: date,
) -> Assignment:
    return Assignment(
        engineer_id=engineer_id,
        project_id=project_id,
        allocation_percentage=allocation,
        start_date=start_date,
        end_date=end_date,
    )
