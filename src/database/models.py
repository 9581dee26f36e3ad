"""
SQLAlchemy ORM Models for the Staffing Database.

Architecture:
- Primary Keys: UUID for all tables
- Skills: JSON arrays (JSONB on PostgreSQL)
- Dates: calendar dates; assignment intervals are inclusive on both ends
- Constraints: allocation range and date order are checked by the database
  as well as by the capacity engine
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Column, String, Integer, Date, DateTime, Text, Enum, ForeignKey, Index,
    CheckConstraint, JSON
)
from sqlalchemy.dialects.postgresql import UUID, JSONB as PG_JSONB
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.types import TypeDecorator

from rbac.roles import Role
from staffing.models import AssignmentRole, ProjectStatus, Seniority


# Cross-database compatible JSON type
# Uses JSONB on PostgreSQL, JSON on SQLite/others
class JSONB(TypeDecorator):
    """A portable JSONB type that works with both PostgreSQL and SQLite."""
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PG_JSONB())
        else:
            return dialect.type_descriptor(JSON())


Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# =============================================================================
# USERS
# =============================================================================

class UserRecord(Base):
    """Engineers and managers. Engineers carry seniority and max_capacity."""
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    department = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(Role, name="user_role", values_callable=_enum_values), nullable=False, index=True)
    skills = Column(JSONB, nullable=False, default=list)
    seniority = Column(Enum(Seniority, name="seniority", values_callable=_enum_values), nullable=True)
    max_capacity = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint(
            "max_capacity IS NULL OR max_capacity IN (50, 100)",
            name="ck_user_max_capacity",
        ),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


# =============================================================================
# PROJECTS
# =============================================================================

class ProjectRecord(Base):
    """A project owned by a manager."""
    __tablename__ = "projects"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    required_skills = Column(JSONB, nullable=False, default=list)
    team_size = Column(Integer, nullable=False)
    status = Column(Enum(ProjectStatus, name="project_status", values_callable=_enum_values), nullable=False)
    manager_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    manager = relationship("UserRecord", lazy="raise")

    __table_args__ = (
        CheckConstraint("team_size > 0", name="ck_project_team_size"),
    )

    def __repr__(self):
        return f"<Project(id={self.id}, name={self.name}, status={self.status})>"


# =============================================================================
# ASSIGNMENTS
# =============================================================================

class AssignmentRecord(Base):
    """One engineer on one project for a fraction of their time."""
    __tablename__ = "assignments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    engineer_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    allocation_percentage = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    role = Column(
        Enum(AssignmentRole, name="assignment_role", values_callable=_enum_values),
        nullable=False,
        default=AssignmentRole.DEVELOPER,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    engineer = relationship("UserRecord", lazy="raise")
    project = relationship("ProjectRecord", lazy="raise")

    __table_args__ = (
        CheckConstraint(
            "allocation_percentage >= 0 AND allocation_percentage <= 100",
            name="ck_assignment_allocation",
        ),
        CheckConstraint("end_date >= start_date", name="ck_assignment_dates"),
        Index("ix_assignment_engineer_interval", "engineer_id", "start_date", "end_date"),
        Index("ix_assignment_project", "project_id"),
    )

    def __repr__(self):
        return (
            f"<Assignment(id={self.id}, engineer={self.engineer_id}, "
            f"project={self.project_id}, allocation={self.allocation_percentage})>"
        )
