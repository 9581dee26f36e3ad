"""
FastAPI Dependency Injection for the Staffing Services.

Provides dependency injection for:
- CapacityRuleEngine (with the process-wide engineer lock registry)
- AvailabilityResolver
- SkillGapResolver
- ProjectService

Every service receives the request-scoped store from database.get_store, so
one request sees one session.

Usage in endpoints:
    @router.post("/api/assignments")
    async def create_assignment(
        engine: CapacityRuleEngine = Depends(get_capacity_engine)
    ):
        ...
"""

from fastapi import Depends, Request

from config.settings import Settings
from database.unit_of_work import get_store
from staffing.availability import AvailabilityResolver
from staffing.capacity import CapacityRuleEngine
from staffing.interfaces import IStaffingStore
from staffing.locks import EngineerLocks
from staffing.projects import ProjectService
from staffing.skill_gap import SkillGapResolver


def get_app_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def get_engineer_locks(request: Request) -> EngineerLocks:
    """Lock registry created in the application lifespan."""
    return request.app.state.locks


def get_capacity_engine(
    store: IStaffingStore = Depends(get_store),
    locks: EngineerLocks = Depends(get_engineer_locks),
    settings: Settings = Depends(get_app_settings),
) -> CapacityRuleEngine:
    return CapacityRuleEngine(
        store,
        locks=locks,
        create_policy=settings.capacity_create_policy,
    )


def get_availability_resolver(
    store: IStaffingStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> AvailabilityResolver:
    return AvailabilityResolver(store, mode=settings.availability_mode)


def get_skill_gap_resolver(store: IStaffingStore = Depends(get_store)) -> SkillGapResolver:
    return SkillGapResolver(store)


def get_project_service(store: IStaffingStore = Depends(get_store)) -> ProjectService:
    return ProjectService(store)
