"""
Assignment Routes

Routes:
- GET /api/assignments - Managers see all; engineers see only their own
- POST /api/assignments - Create assignment (manager only)
- PUT /api/assignments/{assignment_id} - Update assignment (manager only)
- DELETE /api/assignments/{assignment_id} - Delete assignment (manager only)

All writes go through the capacity engine.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from rbac.context import AuthContext
from rbac.dependencies import require_auth, require_manager
from rbac.roles import Role
from staffing.capacity import AssignmentChanges, CapacityRuleEngine, NewAssignment
from staffing.models import AssignmentDetail

from ..dependencies import get_capacity_engine

router = APIRouter(prefix="/api/assignments", tags=["Assignments"])


@router.get("", response_model=List[AssignmentDetail])
async def list_assignments(
    ctx: AuthContext = Depends(require_auth),
    engine: CapacityRuleEngine = Depends(get_capacity_engine),
):
    if ctx.role is Role.MANAGER:
        return await engine.list_assignments()
    if ctx.role is Role.ENGINEER:
        return await engine.list_assignments(ctx.user_id)
    raise ValueError(f"Unhandled role: {ctx.role}")


@router.post("", response_model=AssignmentDetail, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    body: NewAssignment,
    ctx: AuthContext = Depends(require_manager),
    engine: CapacityRuleEngine = Depends(get_capacity_engine),
):
    return await engine.create_assignment(body)


@router.put("/{assignment_id}", response_model=AssignmentDetail)
async def update_assignment(
    assignment_id: str,
    body: AssignmentChanges,
    ctx: AuthContext = Depends(require_manager),
    engine: CapacityRuleEngine = Depends(get_capacity_engine),
):
    return await engine.update_assignment(assignment_id, body)


@router.delete("/{assignment_id}")
async def delete_assignment(
    assignment_id: str,
    ctx: AuthContext = Depends(require_manager),
    engine: CapacityRuleEngine = Depends(get_capacity_engine),
):
    await engine.delete_assignment(assignment_id)
    return {"message": "Assignment deleted."}
