"""Capacity invariant checks used by the engine tests."""

from datetime import date
from typing import Iterable

from staffing.models import Assignment
from staffing.overlap import allocation_deltas


def peak_allocation(assignments: Iterable[Assignment], start: date, end: date) -> int:
    """
    Highest cumulative allocation on any single day inside [start, end].

    Allocation only changes at interval boundaries, so it is enough to look at
    the running total at each boundary that falls inside the window.
    """
    deltas = allocation_deltas((a for a in assignments if a.overlaps(start, end)), start)
    running = 0
    peak = 0
    for day in sorted(deltas):
        if day > end:
            break
        running += deltas[day]
        peak = max(peak, running)
    return peak
