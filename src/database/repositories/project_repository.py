"""Async Project Repository Implementation."""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffing.interfaces import IProjectRepository
from staffing.models import Project

from ..models import ProjectRecord

logger = logging.getLogger(__name__)


def project_from_record(record: ProjectRecord) -> Project:
    return Project(
        id=record.id,
        name=record.name,
        description=record.description,
        start_date=record.start_date,
        end_date=record.end_date,
        required_skills=list(record.required_skills or []),
        team_size=record.team_size,
        status=record.status,
        manager_id=record.manager_id,
    )


class ProjectRepository(IProjectRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, project_id: UUID) -> Optional[Project]:
        record = await self._session.get(ProjectRecord, project_id, populate_existing=True)
        return project_from_record(record) if record is not None else None

    async def add(self, project: Project) -> None:
        self._session.add(ProjectRecord(
            id=project.id,
            name=project.name,
            description=project.description,
            start_date=project.start_date,
            end_date=project.end_date,
            required_skills=list(project.required_skills),
            team_size=project.team_size,
            status=project.status,
            manager_id=project.manager_id,
        ))
        await self._session.flush()

    async def update(self, project: Project) -> None:
        """
        Overwrite the stored fields of an existing project.

        Raises:
            LookupError: If the project does not exist
        """
        record = await self._session.get(ProjectRecord, project.id, populate_existing=True)
        if record is None:
            raise LookupError(f"Project {project.id} does not exist")

        record.name = project.name
        record.description = project.description
        record.start_date = project.start_date
        record.end_date = project.end_date
        record.required_skills = list(project.required_skills)
        record.team_size = project.team_size
        record.status = project.status
        await self._session.flush()

    async def list_all(self) -> List[Project]:
        result = await self._session.execute(
            select(ProjectRecord).order_by(ProjectRecord.start_date, ProjectRecord.name)
        )
        return [project_from_record(r) for r in result.scalars()]
