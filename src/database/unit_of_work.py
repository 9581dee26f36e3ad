"""Unit of Work Pattern Implementation.

SqlStaffingStore bundles the user, project and assignment repositories over
one AsyncSession. Database errors raised while committing surface as
StoreFailure.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from staffing.errors import StoreFailure
from staffing.interfaces import IStaffingStore

from .async_engine import get_async_session
from .repositories import AssignmentRepository, ProjectRepository, UserRepository

logger = logging.getLogger(__name__)


class SqlStaffingStore(IStaffingStore):
    """
    Unit of Work implementation using SQLAlchemy async sessions.

    Usage with an existing session (request scope):
        store = SqlStaffingStore(session)
        await store.assignments.add(assignment)
        await store.commit()

    Usage as a context manager (scripts):
        async with SqlStaffingStore(session_factory=factory) as store:
            await store.users.add(user)
            # Auto-commits on clean exit, rolls back on exception
    """

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ):
        """
        Initialize the unit of work.

        Args:
            session: Existing session to use.
            session_factory: Factory used to open a session on __aenter__
                when no session is given.
        """
        if session is None and session_factory is None:
            raise ValueError("SqlStaffingStore needs a session or a session factory")

        self._session: Optional[AsyncSession] = session
        self._session_factory = session_factory
        self._owns_session: bool = session is None

        self._users: Optional[UserRepository] = None
        self._projects: Optional[ProjectRepository] = None
        self._assignments: Optional[AssignmentRepository] = None

    @property
    def session(self) -> AsyncSession:
        """Get the underlying session."""
        if self._session is None:
            raise RuntimeError("SqlStaffingStore not initialized. Use 'async with' context.")
        return self._session

    @property
    def users(self) -> UserRepository:
        if self._users is None:
            self._users = UserRepository(self.session)
        return self._users

    @property
    def projects(self) -> ProjectRepository:
        if self._projects is None:
            self._projects = ProjectRepository(self.session)
        return self._projects

    @property
    def assignments(self) -> AssignmentRepository:
        if self._assignments is None:
            self._assignments = AssignmentRepository(self.session)
        return self._assignments

    async def commit(self) -> None:
        """
        Commit all pending changes.

        Raises:
            StoreFailure: If the database rejects the commit
        """
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed: {type(e).__name__}: {e}")
            await self.session.rollback()
            raise StoreFailure("The database rejected the write.") from e
        logger.debug("SqlStaffingStore committed")

    async def rollback(self) -> None:
        if self._session is None:
            return
        await self._session.rollback()
        logger.debug("SqlStaffingStore rolled back")

    async def __aenter__(self) -> "SqlStaffingStore":
        if self._session is None:
            self._session = self._session_factory()
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """
        Exit the async context.

        Commits if no exception, rolls back otherwise.
        Always closes the session if we own it.
        """
        try:
            if exc_type is not None:
                await self.rollback()
                logger.debug(f"SqlStaffingStore rolled back due to: {exc_type.__name__}")
            else:
                await self.commit()
        finally:
            if self._owns_session and self._session is not None:
                await self._session.close()
                self._session = None


# FastAPI dependency
async def get_store(
    session: AsyncSession = Depends(get_async_session),
) -> AsyncGenerator[SqlStaffingStore, None]:
    """
    FastAPI dependency for a request-scoped staffing store.

    Usage in endpoints:
        @router.get("/api/projects")
        async def list_projects(store: IStaffingStore = Depends(get_store)):
            ...
    """
    yield SqlStaffingStore(session)
