"""
Engineering Staffing Domain.

Engineers, projects and time-boxed fractional assignments, plus the rules
that keep every engineer within their maximum capacity.

Usage:
    from staffing import CapacityRuleEngine, NewAssignment

    engine = CapacityRuleEngine(store, locks)
    detail = await engine.create_assignment(NewAssignment(
        engineer_id=str(engineer.id),
        project_id=str(project.id),
        allocation_percentage=50,
        start_date=date(2025, 7, 1),
        end_date=date(2025, 9, 30),
    ))
"""

from .errors import (
    StaffingError,
    InvalidReference,
    NotFound,
    ValidationError,
    CapacityExceeded,
    Unauthorized,
    Forbidden,
    StoreFailure,
)
from .models import (
    ALLOWED_MAX_CAPACITIES,
    Seniority,
    ProjectStatus,
    AssignmentRole,
    User,
    PersonRef,
    Project,
    ProjectRef,
    Assignment,
    AssignmentDetail,
    intervals_overlap,
    parse_entity_id,
)
from .interfaces import (
    IUserRepository,
    IProjectRepository,
    IAssignmentRepository,
    IStaffingStore,
)
from .overlap import OverlapCalculator
from .locks import EngineerLocks
from .capacity import (
    CapacityRuleEngine,
    CapacityReport,
    CreatePolicy,
    NewAssignment,
    AssignmentChanges,
)
from .availability import AvailabilityResolver, AvailabilityMode
from .skill_gap import SkillGapResolver, SkillGapReport
from .projects import ProjectService, NewProject, ProjectChanges, ProjectDetail

__all__ = [
    # Errors
    "StaffingError",
    "InvalidReference",
    "NotFound",
    "ValidationError",
    "CapacityExceeded",
    "Unauthorized",
    "Forbidden",
    "StoreFailure",

    # Models
    "ALLOWED_MAX_CAPACITIES",
    "Seniority",
    "ProjectStatus",
    "AssignmentRole",
    "User",
    "PersonRef",
    "Project",
    "ProjectRef",
    "Assignment",
    "AssignmentDetail",
    "intervals_overlap",
    "parse_entity_id",

    # Store contracts
    "IUserRepository",
    "IProjectRepository",
    "IAssignmentRepository",
    "IStaffingStore",

    # Capacity
    "OverlapCalculator",
    "EngineerLocks",
    "CapacityRuleEngine",
    "CapacityReport",
    "CreatePolicy",
    "NewAssignment",
    "AssignmentChanges",

    # Resolvers and services
    "AvailabilityResolver",
    "AvailabilityMode",
    "SkillGapResolver",
    "SkillGapReport",
    "ProjectService",
    "NewProject",
    "ProjectChanges",
    "ProjectDetail",
]
