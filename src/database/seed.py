"""
Staffing Database Seeding

Wipes the configured database and loads sample managers, engineers,
projects and assignments. Assignments go through the capacity engine, so the
sample data always respects every engineer's max capacity.

Usage:
    python -m database.seed
"""

import asyncio
import logging
from datetime import date
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncEngine

from config.database import get_database_settings
from rbac.password import hash_password
from rbac.roles import Role
from staffing.capacity import CapacityRuleEngine, NewAssignment
from staffing.models import AssignmentRole, Project, ProjectStatus, Seniority, User

from .async_engine import close_database, create_engine, get_session_factory, init_database
from .models import AssignmentRecord, ProjectRecord, UserRecord
from .unit_of_work import SqlStaffingStore

logger = logging.getLogger(__name__)


# =============================================================================
# SAMPLE DATA
# =============================================================================

SAMPLE_USERS = [
    # Managers
    dict(email="mgr1@example.com", name="Manager One", role=Role.MANAGER,
         department="Operations", password="mgrpass1"),
    dict(email="mgr2@example.com", name="Manager Two", role=Role.MANAGER,
         department="Engineering", password="mgrpass2"),

    # Engineers (full-time)
    dict(email="eng1@example.com", name="Alice Engineer", role=Role.ENGINEER,
         department="Frontend", skills=["React", "Node.js"],
         seniority=Seniority.MID, max_capacity=100, password="engpass1"),
    dict(email="eng2@example.com", name="Bob Engineer", role=Role.ENGINEER,
         department="Backend", skills=["Node.js", "Python"],
         seniority=Seniority.SENIOR, max_capacity=100, password="engpass2"),

    # Engineer (part-time)
    dict(email="eng3@example.com", name="Charlie Engineer", role=Role.ENGINEER,
         department="DevOps", skills=["DevOps", "Docker", "AWS"],
         seniority=Seniority.JUNIOR, max_capacity=50, password="engpass3"),
]

# (manager email, project fields)
SAMPLE_PROJECTS = [
    ("mgr1@example.com", dict(
        name="Project Apollo",
        description="Frontend redesign using React + TypeScript",
        start_date=date(2025, 6, 1), end_date=date(2025, 9, 30),
        required_skills=["React", "TypeScript"], team_size=3,
        status=ProjectStatus.ACTIVE,
    )),
    ("mgr2@example.com", dict(
        name="Project Zeus",
        description="Backend APIs with Node.js and MongoDB",
        start_date=date(2025, 7, 15), end_date=date(2025, 11, 15),
        required_skills=["Node.js", "MongoDB"], team_size=2,
        status=ProjectStatus.PLANNING,
    )),
    ("mgr1@example.com", dict(
        name="Project Hermes",
        description="DevOps pipeline and AWS infra setup",
        start_date=date(2025, 5, 1), end_date=date(2025, 8, 1),
        required_skills=["DevOps", "AWS"], team_size=2,
        status=ProjectStatus.ACTIVE,
    )),
]

# (engineer email, project name, allocation, start, end, role)
SAMPLE_ASSIGNMENTS = [
    ("eng1@example.com", "Project Apollo", 50, date(2025, 6, 1), date(2025, 9, 30), AssignmentRole.DEVELOPER),
    ("eng2@example.com", "Project Zeus", 50, date(2025, 7, 15), date(2025, 11, 15), AssignmentRole.TECH_LEAD),
    ("eng3@example.com", "Project Hermes", 50, date(2025, 5, 1), date(2025, 8, 1), AssignmentRole.DEVOPS),
    ("eng1@example.com", "Project Zeus", 50, date(2025, 6, 15), date(2025, 9, 15), AssignmentRole.DEVELOPER),
    ("eng2@example.com", "Project Apollo", 50, date(2025, 6, 1), date(2025, 9, 30), AssignmentRole.DEVELOPER),
]


# =============================================================================
# SEEDING
# =============================================================================

async def clear_all(store: SqlStaffingStore) -> None:
    """Delete every assignment, project and user."""
    for record in (AssignmentRecord, ProjectRecord, UserRecord):
        await store.session.execute(delete(record))
    await store.commit()
    logger.info("Cleared existing tables")


async def seed_store(store: SqlStaffingStore) -> dict:
    """
    Load the sample data into an empty store.

    Returns:
        Counts of inserted users, projects and assignments
    """
    users = {}
    for data in SAMPLE_USERS:
        fields = dict(data)
        password = fields.pop("password")
        user = User(password_hash=hash_password(password), **fields)
        await store.users.add(user)
        users[user.email] = user
    await store.commit()
    logger.info(f"Inserted {len(users)} users")

    projects = {}
    for manager_email, fields in SAMPLE_PROJECTS:
        project = Project(manager_id=users[manager_email].id, **fields)
        await store.projects.add(project)
        projects[project.name] = project
    await store.commit()
    logger.info(f"Inserted {len(projects)} projects")

    capacity = CapacityRuleEngine(store)
    for engineer_email, project_name, allocation, start, end, role in SAMPLE_ASSIGNMENTS:
        await capacity.create_assignment(NewAssignment(
            engineer_id=str(users[engineer_email].id),
            project_id=str(projects[project_name].id),
            allocation_percentage=allocation,
            start_date=start,
            end_date=end,
            role=role,
        ))
    logger.info(f"Inserted {len(SAMPLE_ASSIGNMENTS)} assignments")

    return {
        "users": len(users),
        "projects": len(projects),
        "assignments": len(SAMPLE_ASSIGNMENTS),
    }


async def seed_all(engine: Optional[AsyncEngine] = None) -> dict:
    """Create tables if needed, wipe them and load the sample data."""
    settings = get_database_settings()
    owns_engine = engine is None
    engine = engine or create_engine(settings)

    try:
        await init_database(engine, settings)
        async with SqlStaffingStore(session_factory=get_session_factory(engine)) as store:
            await clear_all(store)
            counts = await seed_store(store)
    finally:
        if owns_engine:
            await close_database(engine)

    return counts


def main() -> None:
    from config.settings import get_settings
    from services.logging_config import configure_logging

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    counts = asyncio.run(seed_all())

    print()
    print("=" * 60)
    print("STAFFING SEEDING COMPLETE")
    print("=" * 60)
    print()
    for name, count in counts.items():
        print(f"  {name.capitalize():<12} {count}")
    print()


if __name__ == "__main__":
    main()
