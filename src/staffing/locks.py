"""
Per-engineer write serialization.

Capacity checks read an engineer's assignments and then write a new one. Two
writers for the same engineer must not interleave between those steps, so
each engineer gets one asyncio.Lock. Locks are always taken in sorted ID
order, which keeps a move between two engineers deadlock-free.

A lock only lives while someone holds or waits for it, so the registry does
not grow with every engineer ever written.

The registry is process-local; it should be created once per running
application (see web.app lifespan).
"""

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Dict, List
from uuid import UUID

logger = logging.getLogger(__name__)


class EngineerLocks:
    """Registry of one asyncio.Lock per engineer ID."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._locks: Dict[UUID, asyncio.Lock] = {}
        self._users: Dict[UUID, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _acquire_ref(self, engineer_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(engineer_id)
        if lock is None:
            lock = self._locks[engineer_id] = asyncio.Lock()
        self._users[engineer_id] = self._users.get(engineer_id, 0) + 1
        return lock

    def _release_ref(self, engineer_id: UUID) -> None:
        remaining = self._users[engineer_id] - 1
        if remaining:
            self._users[engineer_id] = remaining
        else:
            del self._users[engineer_id]
            del self._locks[engineer_id]

    @asynccontextmanager
    async def hold(self, *engineer_ids: UUID) -> AsyncIterator[None]:
        """
        Hold the locks of every given engineer for the duration of the block.

        With serialization disabled this is a no-op, which reproduces the
        plain check-then-act behaviour.
        """
        if not self.enabled:
            yield
            return

        ordered: List[UUID] = sorted(set(engineer_ids), key=str)
        locks = [self._acquire_ref(engineer_id) for engineer_id in ordered]
        try:
            async with AsyncExitStack() as stack:
                for lock in locks:
                    await stack.enter_async_context(lock)
                logger.debug(f"Holding write locks for {len(ordered)} engineer(s)")
                yield
        finally:
            for engineer_id in ordered:
                self._release_ref(engineer_id)
