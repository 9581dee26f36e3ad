"""
Skill Gap Resolver.

Compares what a project requires against the skills of every engineer ever
assigned to it (assignment dates are not considered).
"""

from typing import List
from uuid import UUID

from pydantic import BaseModel

from .errors import NotFound
from .interfaces import IStaffingStore
from .models import parse_entity_id, unique_in_order


class SkillGapReport(BaseModel):
    project_id: UUID
    required_skills: List[str]
    assigned_skills: List[str]
    missing_skills: List[str]


class SkillGapResolver:

    def __init__(self, store: IStaffingStore):
        self._store = store

    async def skill_gap(self, project_id) -> SkillGapReport:
        """
        Required skills that no assigned engineer has.

        Raises:
            InvalidReference: Malformed project ID
            NotFound: Unknown project
        """
        project_id = parse_entity_id(project_id, "project")
        project = await self._store.projects.get(project_id)
        if project is None:
            raise NotFound("Project not found.", project_id=str(project_id))

        assignments = await self._store.assignments.list_for_project(project_id)
        engineer_ids = unique_in_order(a.engineer_id for a in assignments)
        users = await self._store.users.get_many(engineer_ids)
        by_id = {u.id: u for u in users if u.is_engineer}

        assigned = unique_in_order(
            skill
            for engineer_id in engineer_ids
            if engineer_id in by_id
            for skill in by_id[engineer_id].skills
        )
        have = set(assigned)
        missing = [skill for skill in project.required_skills if skill not in have]

        return SkillGapReport(
            project_id=project.id,
            required_skills=list(project.required_skills),
            assigned_skills=assigned,
            missing_skills=missing,
        )
