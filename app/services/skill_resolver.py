"""
Skill resolver - maps a loose identifier to one Skill record.

Identifiers arrive as raw names, id strings, UUIDs, embedded skill objects
({"name": ..., "proficiency": ...}) or Skill instances.
"""
from collections.abc import Mapping
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.skill import Skill
from app.repositories.skill_repository import SkillRepository
from app.services.skill_normalizer import name_key, parse_uuid


class SkillResolver:
    """Resolves identifiers to skills. Returns None instead of raising."""

    def __init__(self, skill_repo: Optional[SkillRepository] = None):
        self.skill_repo = skill_repo or SkillRepository()

    async def resolve(
        self,
        db: AsyncSession,
        identifier: Any,
    ) -> Optional[Skill]:
        """
        Resolve an identifier to a Skill.

        Mappings are looked up by name first and by their id only if the
        name lookup fails. Id-shaped strings try the id first, then fall
        back to a name match.
        """
        if identifier is None:
            return None

        if isinstance(identifier, Skill):
            return await self.skill_repo.get_by_id(db, identifier.id)

        if isinstance(identifier, Mapping):
            name = identifier.get("name")
            if isinstance(name, str):
                skill = await self.get_by_name(db, name)
                if skill is not None:
                    return skill
            raw_id = identifier.get("id", identifier.get("_id"))
            skill_id = parse_uuid(str(raw_id)) if raw_id is not None else None
            if skill_id is not None:
                return await self.skill_repo.get_by_id(db, skill_id)
            return None

        skill_id = parse_uuid(identifier)
        if skill_id is not None:
            skill = await self.skill_repo.get_by_id(db, skill_id)
            if skill is not None:
                return skill

        if isinstance(identifier, str):
            return await self.get_by_name(db, identifier)
        return None

    async def get_by_name(
        self,
        db: AsyncSession,
        name: str,
    ) -> Optional[Skill]:
        """Case-insensitive exact match on the cleaned name."""
        key = name_key(name)
        if not key:
            return None
        return await self.skill_repo.get_by_name_key(db, key)
