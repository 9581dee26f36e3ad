"""Tests for the skill gap resolver."""

from datetime import date
from uuid import uuid4

import pytest

from staffing.errors import InvalidReference, NotFound
from staffing.skill_gap import SkillGapResolver
from tests.helpers.factories import make_assignment, make_engineer, make_project


def _assign(store, engineer, project, start=date(2025, 1, 1), end=date(2025, 1, 31)):
    assignment = make_assignment(engineer.id, project.id, 10, start, end)
    store.db.assignments[assignment.id] = assignment


class TestSkillGap:

    @pytest.mark.asyncio
    async def test_missing_skills_in_required_order(self, store, manager):
        project = make_project(manager.id, required_skills=["A", "B", "C"])
        store.db.projects[project.id] = project
        alice = make_engineer("Alice Engineer", skills=["A"])
        bob = make_engineer("Bob Engineer", skills=["B", "A"])
        for e in (alice, bob):
            store.db.users[e.id] = e
            _assign(store, e, project)

        report = await SkillGapResolver(store).skill_gap(str(project.id))

        assert report.required_skills == ["A", "B", "C"]
        assert report.assigned_skills == ["A", "B"]
        assert report.missing_skills == ["C"]

    @pytest.mark.asyncio
    async def test_no_assignments_means_everything_missing(self, store, project):
        report = await SkillGapResolver(store).skill_gap(project.id)

        assert report.assigned_skills == []
        assert report.missing_skills == project.required_skills

    @pytest.mark.asyncio
    async def test_past_assignments_count(self, store, engineer, manager):
        project = make_project(manager.id, required_skills=["React"])
        store.db.projects[project.id] = project
        _assign(store, engineer, project, date(2020, 1, 1), date(2020, 1, 31))

        report = await SkillGapResolver(store).skill_gap(project.id)

        assert report.missing_skills == []

    @pytest.mark.asyncio
    async def test_engineer_assigned_twice_counted_once(self, store, engineer, project):
        _assign(store, engineer, project)
        _assign(store, engineer, project, date(2025, 2, 1), date(2025, 2, 28))

        report = await SkillGapResolver(store).skill_gap(project.id)

        assert report.assigned_skills == ["React", "Node.js"]
        assert report.missing_skills == ["TypeScript"]

    @pytest.mark.asyncio
    async def test_duplicate_required_skills_collapsed(self, store, manager):
        project = make_project(manager.id, required_skills=["Go", "Go", "Rust"])
        store.db.projects[project.id] = project

        report = await SkillGapResolver(store).skill_gap(project.id)

        assert report.required_skills == ["Go", "Rust"]

    @pytest.mark.asyncio
    async def test_unknown_project(self, store):
        with pytest.raises(NotFound):
            await SkillGapResolver(store).skill_gap(uuid4())

    @pytest.mark.asyncio
    async def test_malformed_project_id(self, store):
        with pytest.raises(InvalidReference):
            await SkillGapResolver(store).skill_gap("abc")
