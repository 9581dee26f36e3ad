"""
Project Routes

Routes:
- GET /api/projects - List projects
- GET /api/projects/{project_id} - Get project
- POST /api/projects - Create project (manager only)
- PUT /api/projects/{project_id} - Update project (manager only)
- GET /api/projects/{project_id}/skill-gap - Skills the assigned team lacks (manager only)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from rbac.context import AuthContext
from rbac.dependencies import require_auth, require_manager
from staffing.projects import NewProject, ProjectChanges, ProjectDetail, ProjectService
from staffing.skill_gap import SkillGapReport, SkillGapResolver

from ..dependencies import get_project_service, get_skill_gap_resolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.get("", response_model=List[ProjectDetail])
async def list_projects(
    ctx: AuthContext = Depends(require_auth),
    service: ProjectService = Depends(get_project_service),
):
    return await service.list_projects()


@router.post("", response_model=ProjectDetail, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: NewProject,
    ctx: AuthContext = Depends(require_manager),
    service: ProjectService = Depends(get_project_service),
):
    return await service.create_project(body, manager_id=ctx.user_id)


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(
    project_id: str,
    ctx: AuthContext = Depends(require_auth),
    service: ProjectService = Depends(get_project_service),
):
    return await service.get_project(project_id)


@router.put("/{project_id}", response_model=ProjectDetail)
async def update_project(
    project_id: str,
    body: ProjectChanges,
    ctx: AuthContext = Depends(require_manager),
    service: ProjectService = Depends(get_project_service),
):
    return await service.update_project(project_id, body)


@router.get("/{project_id}/skill-gap", response_model=SkillGapReport)
async def project_skill_gap(
    project_id: str,
    ctx: AuthContext = Depends(require_manager),
    resolver: SkillGapResolver = Depends(get_skill_gap_resolver),
):
    return await resolver.skill_gap(project_id)
