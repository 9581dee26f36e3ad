"""
Database Layer for the Staffing Service.

This module provides:
- SQLAlchemy ORM models for users, projects and assignments
- Async engine and request-scoped sessions
- Repository implementations of the staffing store contracts
- A unit of work (SqlStaffingStore) over one session
"""

from .models import (
    Base,
    UserRecord,
    ProjectRecord,
    AssignmentRecord,
)
from .async_engine import (
    create_engine,
    get_session_factory,
    get_async_session,
    check_database_connection,
    init_database,
    close_database,
    DatabaseHealth,
)
from .unit_of_work import SqlStaffingStore, get_store

__all__ = [
    # Models
    "Base",
    "UserRecord",
    "ProjectRecord",
    "AssignmentRecord",

    # Engine
    "create_engine",
    "get_session_factory",
    "get_async_session",
    "check_database_connection",
    "init_database",
    "close_database",
    "DatabaseHealth",

    # Unit of work
    "SqlStaffingStore",
    "get_store",
]
