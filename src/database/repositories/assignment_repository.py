"""Async Assignment Repository Implementation.

Interval queries use the inclusive overlap predicate
start_date <= window_end AND end_date >= window_start, served by the
(engineer_id, start_date, end_date) index.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from staffing.interfaces import IAssignmentRepository
from staffing.models import Assignment, AssignmentDetail, PersonRef, ProjectRef

from ..models import AssignmentRecord

logger = logging.getLogger(__name__)


def assignment_from_record(record: AssignmentRecord) -> Assignment:
    return Assignment(
        id=record.id,
        engineer_id=record.engineer_id,
        project_id=record.project_id,
        allocation_percentage=record.allocation_percentage,
        start_date=record.start_date,
        end_date=record.end_date,
        role=record.role,
    )


def detail_from_record(record: AssignmentRecord) -> AssignmentDetail:
    engineer = record.engineer
    project = record.project
    return AssignmentDetail(
        **assignment_from_record(record).model_dump(),
        engineer=PersonRef(id=engineer.id, name=engineer.name, email=engineer.email) if engineer else None,
        project=ProjectRef(id=project.id, name=project.name) if project else None,
    )


class AssignmentRepository(IAssignmentRepository):
    """Async implementation of IAssignmentRepository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _detail_query(self):
        return select(AssignmentRecord).options(
            joinedload(AssignmentRecord.engineer),
            joinedload(AssignmentRecord.project),
        ).execution_options(populate_existing=True)

    async def get(self, assignment_id: UUID) -> Optional[Assignment]:
        record = await self._session.get(AssignmentRecord, assignment_id, populate_existing=True)
        return assignment_from_record(record) if record is not None else None

    async def get_detail(self, assignment_id: UUID) -> Optional[AssignmentDetail]:
        result = await self._session.execute(
            self._detail_query().where(AssignmentRecord.id == assignment_id)
        )
        record = result.scalar_one_or_none()
        return detail_from_record(record) if record is not None else None

    async def add(self, assignment: Assignment) -> None:
        self._session.add(AssignmentRecord(
            id=assignment.id,
            engineer_id=assignment.engineer_id,
            project_id=assignment.project_id,
            allocation_percentage=assignment.allocation_percentage,
            start_date=assignment.start_date,
            end_date=assignment.end_date,
            role=assignment.role,
        ))
        await self._session.flush()

    async def update(self, assignment: Assignment) -> None:
        """
        Overwrite the stored fields of an existing assignment.

        Raises:
            LookupError: If the assignment does not exist
        """
        record = await self._session.get(AssignmentRecord, assignment.id, populate_existing=True)
        if record is None:
            raise LookupError(f"Assignment {assignment.id} does not exist")

        record.engineer_id = assignment.engineer_id
        record.project_id = assignment.project_id
        record.allocation_percentage = assignment.allocation_percentage
        record.start_date = assignment.start_date
        record.end_date = assignment.end_date
        record.role = assignment.role
        await self._session.flush()

    async def delete(self, assignment_id: UUID) -> bool:
        result = await self._session.execute(
            delete(AssignmentRecord).where(AssignmentRecord.id == assignment_id)
        )
        return result.rowcount > 0

    async def list_for_engineer(
        self,
        engineer_id: UUID,
        overlapping: Optional[Tuple[date, date]] = None,
    ) -> List[Assignment]:
        stmt = (
            select(AssignmentRecord)
            .where(AssignmentRecord.engineer_id == engineer_id)
            .execution_options(populate_existing=True)
        )
        if overlapping is not None:
            window_start, window_end = overlapping
            stmt = stmt.where(
                AssignmentRecord.start_date <= window_end,
                AssignmentRecord.end_date >= window_start,
            )
        result = await self._session.execute(stmt)
        return [assignment_from_record(r) for r in result.scalars()]

    async def list_for_project(self, project_id: UUID) -> List[Assignment]:
        result = await self._session.execute(
            select(AssignmentRecord).where(AssignmentRecord.project_id == project_id)
        )
        return [assignment_from_record(r) for r in result.scalars()]

    async def list_details(self, engineer_id: Optional[UUID] = None) -> List[AssignmentDetail]:
        stmt = self._detail_query().order_by(AssignmentRecord.start_date)
        if engineer_id is not None:
            stmt = stmt.where(AssignmentRecord.engineer_id == engineer_id)
        result = await self._session.execute(stmt)
        return [detail_from_record(r) for r in result.scalars()]
