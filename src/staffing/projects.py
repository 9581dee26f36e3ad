"""
Project Service.

Create, update and read projects. Projects carry no capacity rules; the only
checks here are required fields and a sane date range.
"""

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .errors import NotFound, ValidationError
from .interfaces import IStaffingStore
from .models import PersonRef, Project, ProjectStatus, check_date_range, parse_entity_id

logger = logging.getLogger(__name__)

REQUIRED_PROJECT_FIELDS = ("name", "description", "start_date", "end_date", "team_size", "status")


class NewProject(BaseModel):
    """Project creation request. The owning manager comes from the caller."""
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    required_skills: List[str] = Field(default_factory=list)
    team_size: Optional[int] = Field(default=None, gt=0)
    status: Optional[ProjectStatus] = None


class ProjectChanges(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    required_skills: Optional[List[str]] = None
    team_size: Optional[int] = Field(default=None, gt=0)
    status: Optional[ProjectStatus] = None


class ProjectDetail(Project):
    """A project with its manager reference populated."""
    manager: Optional[PersonRef] = None


class ProjectService:

    def __init__(self, store: IStaffingStore):
        self._store = store

    async def list_projects(self) -> List[ProjectDetail]:
        projects = await self._store.projects.list_all()
        return await self._with_managers(projects)

    async def get_project(self, project_id) -> ProjectDetail:
        project = await self._require(project_id)
        return (await self._with_managers([project]))[0]

    async def create_project(self, draft: NewProject, manager_id: UUID) -> ProjectDetail:
        """
        Create a project owned by the given manager.

        Raises:
            ValidationError: A required field is missing or the dates are reversed
        """
        missing = [f for f in REQUIRED_PROJECT_FIELDS if not getattr(draft, f)]
        if missing:
            raise ValidationError("Missing required project fields.", missing=missing)
        check_date_range(draft.start_date, draft.end_date)

        project = Project(manager_id=manager_id, **draft.model_dump())
        await self._store.projects.add(project)
        await self._store.commit()

        logger.info(f"Project {project.id} '{project.name}' created by manager {manager_id}")
        return await self.get_project(project.id)

    async def update_project(self, project_id, changes: ProjectChanges) -> ProjectDetail:
        """
        Apply a partial update; omitted fields keep their stored values.

        Raises:
            InvalidReference: Malformed project ID
            NotFound: Unknown project
            ValidationError: Resulting dates are reversed
        """
        project = await self._require(project_id)
        updated = Project.model_validate({
            **project.model_dump(),
            **changes.model_dump(exclude_none=True),
        })
        check_date_range(updated.start_date, updated.end_date)

        await self._store.projects.update(updated)
        await self._store.commit()

        logger.info(f"Project {updated.id} updated")
        return await self.get_project(updated.id)

    async def _require(self, project_id) -> Project:
        project_id = parse_entity_id(project_id, "project")
        project = await self._store.projects.get(project_id)
        if project is None:
            raise NotFound("Project not found.", project_id=str(project_id))
        return project

    async def _with_managers(self, projects: List[Project]) -> List[ProjectDetail]:
        managers = await self._store.users.get_many(list({p.manager_id for p in projects}))
        refs = {
            m.id: PersonRef(id=m.id, name=m.name, email=m.email)
            for m in managers
        }
        return [
            ProjectDetail(**p.model_dump(), manager=refs.get(p.manager_id))
            for p in projects
        ]

