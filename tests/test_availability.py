"""Tests for the availability resolver."""

from datetime import date
from uuid import uuid4

import pytest

from staffing.availability import AvailabilityMode, AvailabilityResolver
from staffing.errors import InvalidReference, NotFound
from tests.helpers.factories import make_assignment


def _seed(store, engineer, project, allocation, start, end):
    assignment = make_assignment(engineer.id, project.id, allocation, start, end)
    store.db.assignments[assignment.id] = assignment
    return assignment


def _resolver(store, today, mode=AvailabilityMode.UPPER_BOUND):
    return AvailabilityResolver(store, mode=mode, today=lambda: today)


class TestNextAvailableDate:

    @pytest.mark.asyncio
    async def test_free_engineer_available_today(self, store, engineer, today):
        assert await _resolver(store, today).next_available_date(engineer.id) == today

    @pytest.mark.asyncio
    async def test_partially_allocated_available_today(self, store, engineer, project, today):
        _seed(store, engineer, project, 90, date(2025, 1, 1), date(2025, 12, 31))
        assert await _resolver(store, today).next_available_date(str(engineer.id)) == today

    @pytest.mark.asyncio
    async def test_last_day_still_counts_as_allocated(self, store, part_time_engineer, project):
        # Fully booked part-timer whose only assignment ends today.
        _seed(store, part_time_engineer, project, 50, date(2025, 1, 1), date(2025, 3, 31))
        march_31 = date(2025, 3, 31)

        upper = await _resolver(store, march_31).next_available_date(part_time_engineer.id)
        exact = await _resolver(store, march_31).next_available_date(
            part_time_engineer.id, AvailabilityMode.EXACT
        )

        assert upper == date(2025, 3, 31)
        assert exact == date(2025, 4, 1)

    @pytest.mark.asyncio
    async def test_upper_bound_uses_latest_end_of_all_assignments(self, store, engineer, project, today):
        _seed(store, engineer, project, 60, date(2025, 7, 1), date(2025, 7, 31))
        _seed(store, engineer, project, 40, date(2025, 7, 1), date(2025, 12, 31))
        _seed(store, engineer, project, 10, date(2026, 2, 1), date(2026, 2, 28))

        result = await _resolver(store, today).next_available_date(engineer.id)

        assert result == date(2026, 2, 28)

    @pytest.mark.asyncio
    async def test_exact_finds_first_free_day(self, store, engineer, project, today):
        _seed(store, engineer, project, 60, date(2025, 7, 1), date(2025, 7, 31))
        _seed(store, engineer, project, 40, date(2025, 7, 1), date(2025, 12, 31))
        _seed(store, engineer, project, 10, date(2026, 2, 1), date(2026, 2, 28))

        result = await _resolver(store, today).next_available_date(engineer.id, AvailabilityMode.EXACT)

        assert result == date(2025, 8, 1)

    @pytest.mark.asyncio
    async def test_exact_skips_back_to_back_bookings(self, store, engineer, project, today):
        _seed(store, engineer, project, 100, date(2025, 7, 1), date(2025, 7, 31))
        _seed(store, engineer, project, 100, date(2025, 8, 1), date(2025, 8, 31))

        result = await _resolver(store, today, AvailabilityMode.EXACT).next_available_date(engineer.id)

        assert result == date(2025, 9, 1)

    @pytest.mark.asyncio
    async def test_string_mode_accepted(self, store, part_time_engineer, project):
        _seed(store, part_time_engineer, project, 50, date(2025, 1, 1), date(2025, 3, 31))

        result = await _resolver(store, date(2025, 3, 1)).next_available_date(part_time_engineer.id, "exact")

        assert result == date(2025, 4, 1)

    @pytest.mark.asyncio
    async def test_unknown_engineer(self, store, today):
        with pytest.raises(NotFound):
            await _resolver(store, today).next_available_date(uuid4())

    @pytest.mark.asyncio
    async def test_manager_is_not_found(self, store, manager, today):
        with pytest.raises(NotFound):
            await _resolver(store, today).next_available_date(manager.id)

    @pytest.mark.asyncio
    async def test_malformed_id(self, store, today):
        with pytest.raises(InvalidReference):
            await _resolver(store, today).next_available_date("xyz")
