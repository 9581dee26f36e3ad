"""Tests for the SQLAlchemy store against a temporary SQLite database."""

import asyncio
from datetime import date
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError

from config.database import DatabaseSettings
from database.models import AssignmentRecord
from database.async_engine import close_database, create_engine, get_session_factory, init_database
from database.seed import SAMPLE_ASSIGNMENTS, SAMPLE_USERS, seed_store
from database.unit_of_work import SqlStaffingStore
from rbac.roles import Role
from staffing.capacity import CapacityRuleEngine, NewAssignment
from staffing.errors import CapacityExceeded, StoreFailure
from staffing.locks import EngineerLocks
from staffing.models import AssignmentDetail, AssignmentRole
from tests.helpers.factories import make_assignment, make_engineer, make_manager, make_project


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    settings = DatabaseSettings(driver="sqlite+aiosqlite", sqlite_path=tmp_path / "store.db")
    engine = create_engine(settings)
    await init_database(engine, settings)
    try:
        yield get_session_factory(engine)
    finally:
        await close_database(engine)


async def _people(factory):
    manager = make_manager(password_hash="x")
    engineer = make_engineer(skills=["Python", "SQL"], password_hash="x")
    project = make_project(manager.id, required_skills=["Python"])
    async with SqlStaffingStore(session_factory=factory) as store:
        await store.users.add(manager)
        await store.users.add(engineer)
        await store.projects.add(project)
    return manager, engineer, project


class TestRepositories:

    @pytest.mark.asyncio
    async def test_user_round_trip(self, session_factory):
        manager, engineer, _ = await _people(session_factory)

        async with SqlStaffingStore(session_factory=session_factory) as store:
            loaded = await store.users.get(engineer.id)
            by_email = await store.users.get_by_email(manager.email)
            engineers = await store.users.list_by_role(Role.ENGINEER)

        assert loaded.skills == ["Python", "SQL"]
        assert loaded.max_capacity == 100
        assert by_email.id == manager.id
        assert [e.id for e in engineers] == [engineer.id]

    @pytest.mark.asyncio
    async def test_add_user_without_hash_rejected(self, session_factory):
        async with SqlStaffingStore(session_factory=session_factory) as store:
            with pytest.raises(ValueError):
                await store.users.add(make_engineer())

    @pytest.mark.asyncio
    async def test_interval_query_is_inclusive(self, session_factory):
        _, engineer, project = await _people(session_factory)
        assignment = make_assignment(engineer.id, project.id, 40, date(2025, 6, 1), date(2025, 8, 31))

        async with SqlStaffingStore(session_factory=session_factory) as store:
            await store.assignments.add(assignment)

        async with SqlStaffingStore(session_factory=session_factory) as store:
            touching = await store.assignments.list_for_engineer(
                engineer.id, overlapping=(date(2025, 8, 31), date(2025, 9, 30))
            )
            after = await store.assignments.list_for_engineer(
                engineer.id, overlapping=(date(2025, 9, 1), date(2025, 9, 30))
            )
            detail = await store.assignments.get_detail(assignment.id)

        assert [a.id for a in touching] == [assignment.id]
        assert after == []
        assert detail.engineer.email == engineer.email
        assert detail.project.name == project.name

    @pytest.mark.asyncio
    async def test_delete(self, session_factory):
        _, engineer, project = await _people(session_factory)
        assignment = make_assignment(engineer.id, project.id, 40, date(2025, 6, 1), date(2025, 8, 31))

        async with SqlStaffingStore(session_factory=session_factory) as store:
            await store.assignments.add(assignment)
            assert await store.assignments.delete(assignment.id)
            assert not await store.assignments.delete(assignment.id)


class TestUnitOfWork:

    @pytest.mark.asyncio
    async def test_rollback_on_exception(self, session_factory):
        manager = make_manager(password_hash="x")

        with pytest.raises(RuntimeError):
            async with SqlStaffingStore(session_factory=session_factory) as store:
                await store.users.add(manager)
                raise RuntimeError("abort")

        async with SqlStaffingStore(session_factory=session_factory) as store:
            assert await store.users.get(manager.id) is None

    @pytest.mark.asyncio
    async def test_flush_errors_propagate_unchanged(self, session_factory):
        _, engineer, _ = await _people(session_factory)
        orphan = make_assignment(engineer.id, uuid4(), 10, date(2025, 1, 1), date(2025, 1, 2))

        async with SqlStaffingStore(session_factory=session_factory) as store:
            with pytest.raises(IntegrityError):
                await store.assignments.add(orphan)
            await store.rollback()

    @pytest.mark.asyncio
    async def test_commit_errors_become_store_failure(self, session_factory):
        _, engineer, _ = await _people(session_factory)

        async with SqlStaffingStore(session_factory=session_factory) as store:
            store.session.add(AssignmentRecord(
                id=uuid4(),
                engineer_id=engineer.id,
                project_id=uuid4(),
                allocation_percentage=10,
                start_date=date(2025, 1, 1),
                end_date=date(2025, 1, 2),
                role=AssignmentRole.DEVELOPER,
            ))
            with pytest.raises(StoreFailure):
                await store.commit()

    def test_requires_session_or_factory(self):
        with pytest.raises(ValueError):
            SqlStaffingStore()


class TestSerializedWrites:
    """Per-engineer serialization against the SQL store."""

    @pytest.mark.asyncio
    async def test_concurrent_creates_admit_exactly_one(self, session_factory):
        _, engineer, project = await _people(session_factory)
        locks = EngineerLocks()
        draft = NewAssignment(
            engineer_id=str(engineer.id),
            project_id=str(project.id),
            allocation_percentage=60,
            start_date=date(2025, 7, 1),
            end_date=date(2025, 7, 31),
        )

        async def create():
            async with SqlStaffingStore(session_factory=session_factory) as store:
                engine = CapacityRuleEngine(store, locks=locks, today=lambda: date(2025, 7, 15))
                return await engine.create_assignment(draft)

        results = await asyncio.gather(create(), create(), return_exceptions=True)

        assert any(isinstance(r, AssignmentDetail) for r in results)
        assert any(isinstance(r, CapacityExceeded) for r in results)

        async with SqlStaffingStore(session_factory=session_factory) as store:
            stored = await store.assignments.list_for_engineer(engineer.id)
        assert [a.allocation_percentage for a in stored] == [60]


class TestSeed:

    @pytest.mark.asyncio
    async def test_seed_respects_capacity(self, session_factory):
        async with SqlStaffingStore(session_factory=session_factory) as store:
            counts = await seed_store(store)

        assert counts == {
            "users": len(SAMPLE_USERS),
            "projects": 3,
            "assignments": len(SAMPLE_ASSIGNMENTS),
        }

        async with SqlStaffingStore(session_factory=session_factory) as store:
            engineers = await store.users.list_by_role(Role.ENGINEER)
            engine = CapacityRuleEngine(store, today=lambda: date(2025, 7, 20))
            reports = {e.email: await engine.engineer_capacity(e.id) for e in engineers}

        assert reports["eng1@example.com"].total_allocated == 100
        assert reports["eng3@example.com"].available_capacity == 0
