"""
Availability Resolver.

Answers "from which date can this engineer take more work?".

Two modes:
- upper_bound: if the engineer is full today, report the last end date across
  all of their assignments. Cheap, but may be later than the real answer.
- exact: sweep forward over interval boundaries and report the first day on
  which cumulative allocation drops below max_capacity.
"""

import logging
from datetime import date
from enum import Enum
from typing import Callable, Optional

from .errors import NotFound
from .interfaces import IStaffingStore
from .models import User, parse_entity_id
from .overlap import allocation_deltas, total_allocation

logger = logging.getLogger(__name__)


class AvailabilityMode(str, Enum):
    UPPER_BOUND = "upper_bound"
    EXACT = "exact"


class AvailabilityResolver:
    """Computes an engineer's next available date."""

    def __init__(
        self,
        store: IStaffingStore,
        mode: AvailabilityMode = AvailabilityMode.UPPER_BOUND,
        today: Callable[[], date] = date.today,
    ):
        self._store = store
        self._mode = mode
        self._today = today

    @property
    def default_mode(self) -> AvailabilityMode:
        return self._mode

    async def next_available_date(self, engineer_id, mode: Optional[AvailabilityMode] = None) -> date:
        """
        Earliest date on which the engineer has spare capacity.

        Args:
            engineer_id: Engineer identifier (UUID or string)
            mode: Override the resolver's default mode

        Returns:
            Today when the engineer is below capacity now, otherwise a future
            date computed per mode

        Raises:
            InvalidReference: Malformed engineer ID
            NotFound: Unknown engineer
        """
        engineer_id = parse_entity_id(engineer_id, "engineer")
        engineer = await self._store.users.get(engineer_id)
        if engineer is None or not engineer.is_engineer:
            raise NotFound("Engineer not found.", engineer_id=str(engineer_id))

        mode = AvailabilityMode(mode or self._mode)
        today = self._today()
        assignments = await self._store.assignments.list_for_engineer(engineer_id)

        allocated_now = total_allocation(a for a in assignments if a.is_active_on(today))
        if allocated_now < engineer.max_capacity:
            return today

        if mode is AvailabilityMode.UPPER_BOUND:
            available = max([today] + [a.end_date for a in assignments])
        elif mode is AvailabilityMode.EXACT:
            available = self._sweep(engineer, assignments, today)
        else:
            raise ValueError(f"Unhandled availability mode: {mode}")

        logger.debug(f"Engineer {engineer_id} fully allocated today; available from {available} ({mode.value})")
        return available

    @staticmethod
    def _sweep(engineer: User, assignments, today: date) -> date:
        deltas = allocation_deltas(assignments, today)
        running = 0
        for day in sorted(deltas):
            running += deltas[day]
            if running < engineer.max_capacity:
                return day
        # Unreachable: every assignment contributes a closing delta.
        return max(deltas)
