"""
Engineer Routes

Routes:
- GET /api/engineers - List engineers (manager only)
- GET /api/engineers/{engineer_id}/capacity - Capacity as of today
- GET /api/engineers/{engineer_id}/availability - Next available date

Capacity and availability are visible to managers and to the engineer
themself. Path IDs are taken as strings so a malformed ID reaches the domain
layer and comes back as a 400.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from database.unit_of_work import get_store
from rbac.context import AuthContext
from rbac.dependencies import require_engineer_access, require_manager
from rbac.roles import Role
from staffing.availability import AvailabilityMode, AvailabilityResolver
from staffing.capacity import CapacityReport, CapacityRuleEngine
from staffing.interfaces import IStaffingStore
from staffing.models import parse_entity_id

from ..dependencies import get_availability_resolver, get_capacity_engine
from ..schemas import AvailabilityResponse, EngineerResponse

router = APIRouter(prefix="/api/engineers", tags=["Engineers"])


@router.get("", response_model=List[EngineerResponse])
async def list_engineers(
    ctx: AuthContext = Depends(require_manager),
    store: IStaffingStore = Depends(get_store),
):
    engineers = await store.users.list_by_role(Role.ENGINEER)
    return [EngineerResponse.from_user(e) for e in engineers]


@router.get("/{engineer_id}/capacity", response_model=CapacityReport)
async def engineer_capacity(
    engineer_id: str,
    ctx: AuthContext = Depends(require_engineer_access),
    engine: CapacityRuleEngine = Depends(get_capacity_engine),
):
    return await engine.engineer_capacity(engineer_id)


@router.get("/{engineer_id}/availability", response_model=AvailabilityResponse)
async def engineer_availability(
    engineer_id: str,
    mode: Optional[AvailabilityMode] = Query(None, description="upper_bound or exact"),
    ctx: AuthContext = Depends(require_engineer_access),
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
):
    available = await resolver.next_available_date(engineer_id, mode)
    return AvailabilityResponse(
        engineer_id=parse_entity_id(engineer_id, "engineer"),
        available_date=available,
        mode=(mode or resolver.default_mode).value,
    )
