"""
Overlap Calculator.

Date-range arithmetic behind every capacity decision. Intervals are inclusive
calendar dates: [s, e] and [S, E] overlap when s <= E and e >= S, so an
assignment ending on the day another starts counts against it.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, Optional
from uuid import UUID

from .interfaces import IAssignmentRepository
from .models import Assignment

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def total_allocation(assignments: Iterable[Assignment]) -> int:
    return sum(a.allocation_percentage for a in assignments)


def allocation_deltas(assignments: Iterable[Assignment], since: date) -> Dict[date, int]:
    """
    Build the step function of cumulative allocation from `since` onwards.

    Each assignment contributes +allocation on its first day (clipped to
    `since`) and -allocation on the day after it ends. Assignments that ended
    before `since` are ignored. `since` is always a key.
    """
    deltas: Dict[date, int] = defaultdict(int, {since: 0})
    for assignment in assignments:
        if assignment.end_date < since:
            continue
        deltas[max(assignment.start_date, since)] += assignment.allocation_percentage
        deltas[assignment.end_date + ONE_DAY] -= assignment.allocation_percentage
    return deltas


class OverlapCalculator:
    """Sums an engineer's committed allocation over a date window."""

    def __init__(self, assignments: IAssignmentRepository):
        self._assignments = assignments

    async def overlapping_allocation(
        self,
        engineer_id: UUID,
        start: date,
        end: date,
        exclude_assignment_id: Optional[UUID] = None,
    ) -> int:
        """
        Total allocation of the engineer's assignments that overlap [start, end].

        Args:
            engineer_id: Engineer whose commitments are summed
            start: First day of the window (inclusive)
            end: Last day of the window (inclusive)
            exclude_assignment_id: Assignment to leave out, so an update does
                not count against itself

        Returns:
            Sum of allocation percentages; 0 when nothing overlaps
        """
        found = await self._assignments.list_for_engineer(
            engineer_id, overlapping=(start, end)
        )
        total = total_allocation(
            a for a in found if a.id != exclude_assignment_id
        )
        logger.debug(
            f"Overlapping allocation for {engineer_id} in [{start}, {end}]: {total}%"
        )
        return total

    async def allocation_on(self, engineer_id: UUID, day: date) -> int:
        """Allocation of assignments whose interval contains `day`."""
        return await self.overlapping_allocation(engineer_id, day, day)
