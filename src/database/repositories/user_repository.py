"""Async User Repository Implementation.

Implements IUserRepository using SQLAlchemy async sessions.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac.roles import Role
from staffing.interfaces import IUserRepository
from staffing.models import User

from ..models import UserRecord

logger = logging.getLogger(__name__)


def user_from_record(record: UserRecord) -> User:
    return User(
        id=record.id,
        email=record.email,
        name=record.name,
        department=record.department,
        role=record.role,
        skills=list(record.skills or []),
        seniority=record.seniority,
        max_capacity=record.max_capacity,
        password_hash=record.password_hash,
    )


class UserRepository(IUserRepository):
    """
    Async implementation of IUserRepository.

    get(..., for_update=True) issues SELECT ... FOR UPDATE so that concurrent
    capacity checks for the same engineer queue on the row (PostgreSQL).
    SQLite has no row locks and ignores the clause.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with a session.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    async def get(self, user_id: UUID, for_update: bool = False) -> Optional[User]:
        stmt = (
            select(UserRecord)
            .where(UserRecord.id == user_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        record = result.scalar_one_or_none()
        return user_from_record(record) if record is not None else None

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(UserRecord).where(UserRecord.email == email)
        )
        record = result.scalar_one_or_none()
        return user_from_record(record) if record is not None else None

    async def add(self, user: User) -> None:
        """
        Stage a new user.

        Raises:
            ValueError: If the user has no password hash
        """
        if not user.password_hash:
            raise ValueError("User requires a password hash")

        self._session.add(UserRecord(
            id=user.id,
            email=user.email,
            name=user.name,
            department=user.department,
            password_hash=user.password_hash,
            role=user.role,
            skills=list(user.skills),
            seniority=user.seniority,
            max_capacity=user.max_capacity,
        ))
        await self._session.flush()
        logger.debug(f"Added user {user.id} ({user.role.value})")

    async def list_by_role(self, role: Role) -> List[User]:
        result = await self._session.execute(
            select(UserRecord).where(UserRecord.role == role).order_by(UserRecord.name)
        )
        return [user_from_record(r) for r in result.scalars()]

    async def get_many(self, user_ids: Sequence[UUID]) -> List[User]:
        if not user_ids:
            return []
        result = await self._session.execute(
            select(UserRecord).where(UserRecord.id.in_(list(user_ids)))
        )
        return [user_from_record(r) for r in result.scalars()]
