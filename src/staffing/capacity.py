"""
Capacity Rule Engine.

Accepts or rejects assignment writes so that, for every engineer and every
day, the allocations active on that day never sum past the engineer's
max_capacity.

Checks and writes for one engineer are serialized (see staffing.locks) and
run in a fresh store transaction, so two concurrent writers cannot both pass
a check against the same stale read.

Create policies:
- interval: count everything overlapping the new assignment's own interval
  (same rule as updates).
- current: count only what is active today, regardless of the new
  assignment's dates.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .errors import CapacityExceeded, NotFound
from .interfaces import IStaffingStore
from .locks import EngineerLocks
from .models import (
    Assignment,
    AssignmentDetail,
    AssignmentRole,
    Project,
    User,
    check_date_range,
    parse_entity_id,
)
from .overlap import OverlapCalculator, total_allocation

logger = logging.getLogger(__name__)


class CreatePolicy(str, Enum):
    """Which window a new assignment is checked against."""
    INTERVAL = "interval"
    CURRENT = "current"


class NewAssignment(BaseModel):
    """Request to create an assignment. References are raw, unparsed IDs."""
    engineer_id: str
    project_id: str
    allocation_percentage: int = Field(ge=0, le=100)
    start_date: date
    end_date: date
    role: AssignmentRole = AssignmentRole.DEVELOPER


class AssignmentChanges(BaseModel):
    """Partial update; omitted fields keep their stored values."""
    engineer_id: Optional[str] = None
    project_id: Optional[str] = None
    allocation_percentage: Optional[int] = Field(default=None, ge=0, le=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    role: Optional[AssignmentRole] = None


class CapacityReport(BaseModel):
    """Engineer capacity as of today."""
    engineer_id: UUID
    name: str
    max_capacity: int
    total_allocated: int
    available_capacity: int
    active_assignments_count: int


class CapacityRuleEngine:
    """
    Assignment writes guarded by the capacity invariant.

    Usage:
        engine = CapacityRuleEngine(store, locks)
        detail = await engine.create_assignment(NewAssignment(...))
    """

    def __init__(
        self,
        store: IStaffingStore,
        locks: Optional[EngineerLocks] = None,
        create_policy: CreatePolicy = CreatePolicy.INTERVAL,
        today: Callable[[], date] = date.today,
    ):
        self._store = store
        self._locks = locks or EngineerLocks()
        self._overlap = OverlapCalculator(store.assignments)
        self._create_policy = create_policy
        self._today = today

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create_assignment(self, draft: NewAssignment) -> AssignmentDetail:
        """
        Create an assignment if the engineer has room for it.

        Validation order:
            1. engineer/project ID format
            2. end_date >= start_date
            3. engineer exists and is an engineer
            4. project exists
            5. capacity check (per create policy)
            6. persist, then re-read the populated record

        Raises:
            InvalidReference, ValidationError, NotFound, CapacityExceeded
        """
        engineer_id = parse_entity_id(draft.engineer_id, "engineer")
        project_id = parse_entity_id(draft.project_id, "project")
        check_date_range(draft.start_date, draft.end_date)

        assignment = Assignment(
            engineer_id=engineer_id,
            project_id=project_id,
            allocation_percentage=draft.allocation_percentage,
            start_date=draft.start_date,
            end_date=draft.end_date,
            role=draft.role,
        )

        async with self._serialized_write(engineer_id):
            engineer = await self._require_engineer(engineer_id, for_update=True)
            await self._require_project(project_id)

            if self._create_policy is CreatePolicy.INTERVAL:
                existing = await self._overlap.overlapping_allocation(
                    engineer_id, assignment.start_date, assignment.end_date
                )
            else:
                existing = await self._overlap.allocation_on(engineer_id, self._today())

            self._check_capacity(engineer, existing, assignment.allocation_percentage)
            await self._store.assignments.add(assignment)

        logger.info(
            f"Assignment {assignment.id} created: engineer {engineer_id} at "
            f"{assignment.allocation_percentage}% [{assignment.start_date}, {assignment.end_date}]"
        )
        return await self._reload(assignment.id)

    async def update_assignment(self, assignment_id, changes: AssignmentChanges) -> AssignmentDetail:
        """
        Apply a partial update if the result still fits the engineer's capacity.

        Validation order:
            1. assignment exists
            2. end_date >= start_date (after merging with stored values)
            3. engineer/project ID format
            4. engineer exists and is an engineer
            5. project exists
            6. overlap over the new interval, excluding this assignment
            7. persist, then re-read the populated record

        The stored assignment is re-read and merged while the write locks are
        held, so concurrent updates of one assignment apply one after another
        instead of overwriting each other.

        Raises:
            InvalidReference, NotFound, ValidationError, CapacityExceeded
        """
        assignment_id = parse_entity_id(assignment_id, "assignment")
        snapshot = await self._require_assignment(assignment_id)
        self._merge(snapshot, changes)

        engineer_id = parse_entity_id(changes.engineer_id, "engineer") if changes.engineer_id else None
        project_id = parse_entity_id(changes.project_id, "project") if changes.project_id else None

        while True:
            target_engineer = engineer_id or snapshot.engineer_id
            async with self._serialized_write(snapshot.engineer_id, target_engineer):
                current = await self._require_assignment(assignment_id)
                if current.engineer_id not in (snapshot.engineer_id, target_engineer):
                    # Moved to another engineer since the first read; lock that one instead.
                    snapshot = current
                    continue

                updated = self._merge(current, changes, engineer_id, project_id)
                engineer = await self._require_engineer(updated.engineer_id, for_update=True)
                await self._require_project(updated.project_id)

                committed = await self._overlap.overlapping_allocation(
                    updated.engineer_id,
                    updated.start_date,
                    updated.end_date,
                    exclude_assignment_id=assignment_id,
                )
                self._check_capacity(engineer, committed, updated.allocation_percentage)
                await self._store.assignments.update(updated)
            break

        logger.info(f"Assignment {assignment_id} updated")
        return await self._reload(assignment_id)

    async def delete_assignment(self, assignment_id) -> None:
        """
        Delete an assignment.

        Raises:
            InvalidReference: Malformed ID
            NotFound: No such assignment
        """
        assignment_id = parse_entity_id(assignment_id, "assignment")
        deleted = await self._store.assignments.delete(assignment_id)
        if not deleted:
            raise NotFound("Assignment not found.", assignment_id=str(assignment_id))
        await self._store.commit()
        logger.info(f"Assignment {assignment_id} deleted")

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def engineer_capacity(self, engineer_id) -> CapacityReport:
        """Allocation and free capacity of an engineer as of today."""
        engineer_id = parse_entity_id(engineer_id, "engineer")
        engineer = await self._require_engineer(engineer_id)

        today = self._today()
        active = await self._store.assignments.list_for_engineer(
            engineer_id, overlapping=(today, today)
        )
        allocated = total_allocation(active)

        return CapacityReport(
            engineer_id=engineer.id,
            name=engineer.name,
            max_capacity=engineer.max_capacity,
            total_allocated=allocated,
            available_capacity=max(0, engineer.max_capacity - allocated),
            active_assignments_count=len(active),
        )

    async def list_assignments(self, engineer_id: Optional[UUID] = None) -> List[AssignmentDetail]:
        return await self._store.assignments.list_details(engineer_id)

    # =========================================================================
    # HELPERS
    # =========================================================================

    @asynccontextmanager
    async def _serialized_write(self, *engineer_ids: UUID) -> AsyncIterator[None]:
        async with self._locks.hold(*engineer_ids):
            # The re-check must not read from a snapshot older than the
            # previous lock holder's commit.
            await self._store.commit()
            try:
                yield
            except BaseException:
                await self._store.rollback()
                raise
            await self._store.commit()

    async def _require_engineer(self, engineer_id: UUID, for_update: bool = False) -> User:
        engineer = await self._store.users.get(engineer_id, for_update=for_update)
        if engineer is None or not engineer.is_engineer:
            raise NotFound("Engineer not found.", engineer_id=str(engineer_id))
        return engineer

    async def _require_assignment(self, assignment_id: UUID) -> Assignment:
        assignment = await self._store.assignments.get(assignment_id)
        if assignment is None:
            raise NotFound("Assignment not found.", assignment_id=str(assignment_id))
        return assignment

    @staticmethod
    def _merge(
        stored: Assignment,
        changes: AssignmentChanges,
        engineer_id: Optional[UUID] = None,
        project_id: Optional[UUID] = None,
    ) -> Assignment:
        """Stored assignment with the supplied changes applied; checks the date range."""
        merged = stored.model_copy(update={
            "engineer_id": engineer_id or stored.engineer_id,
            "project_id": project_id or stored.project_id,
            "allocation_percentage": (
                changes.allocation_percentage
                if changes.allocation_percentage is not None
                else stored.allocation_percentage
            ),
            "start_date": changes.start_date or stored.start_date,
            "end_date": changes.end_date or stored.end_date,
            "role": changes.role or stored.role,
        })
        check_date_range(merged.start_date, merged.end_date)
        return merged

    async def _require_project(self, project_id: UUID) -> Project:
        project = await self._store.projects.get(project_id)
        if project is None:
            raise NotFound("Project not found.", project_id=str(project_id))
        return project

    def _check_capacity(self, engineer: User, existing: int, attempted: int) -> None:
        if existing + attempted > engineer.max_capacity:
            logger.warning(
                f"Capacity exceeded for engineer {engineer.id}: "
                f"{attempted}% + {existing}% > {engineer.max_capacity}%"
            )
            raise CapacityExceeded(
                attempted=attempted,
                existing=existing,
                max_capacity=engineer.max_capacity,
            )

    async def _reload(self, assignment_id: UUID) -> AssignmentDetail:
        detail = await self._store.assignments.get_detail(assignment_id)
        if detail is None:
            raise NotFound("Assignment not found.", assignment_id=str(assignment_id))
        return detail

