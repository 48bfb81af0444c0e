"""
Skill repository - data access for Skill entity.
"""
from typing import List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.skill import Skill
from app.repositories.base import BaseRepository


class SkillRepository(BaseRepository[Skill]):
    def __init__(self):
        super().__init__(Skill)

    async def get_by_name(
        self,
        db: AsyncSession,
        name: str,
    ) -> Optional[Skill]:
        """Find a skill by exact (case-sensitive) name."""
        result = await db.execute(
            select(Skill).where(Skill.name == name)
        )
        return result.scalars().first()

    async def get_by_name_key(
        self,
        db: AsyncSession,
        name_key: str,
    ) -> Optional[Skill]:
        """Find a skill by its normalized, lower-cased name."""
        result = await db.execute(
            select(Skill).where(Skill.name_key == name_key)
        )
        return result.scalar_one_or_none()

    async def list_filtered(
        self,
        db: AsyncSession,
        *,
        category: Optional[str] = None,
        include_inactive: bool = False,
    ) -> List[Skill]:
        """List skills ordered the way the public site renders them."""
        query = select(Skill)
        if not include_inactive:
            query = query.where(Skill.is_active == True)
        if category:
            query = query.where(Skill.category == category)

        query = query.order_by(Skill.category, Skill.order, Skill.name)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_active_categories(
        self,
        db: AsyncSession,
    ) -> List[str]:
        """Distinct categories among active skills."""
        result = await db.execute(
            select(Skill.category)
            .where(Skill.is_active == True)
            .distinct()
            .order_by(Skill.category)
        )
        return [c for c in result.scalars().all() if c]

    async def get_identity_sets(
        self,
        db: AsyncSession,
    ) -> Tuple[Set[str], Set[str]]:
        """
        Return (ids, name_keys) of every stored skill.

        Ids are stringified so they compare directly against the id strings
        kept in entity skill lists.
        """
        result = await db.execute(select(Skill.id, Skill.name_key))
        ids: Set[str] = set()
        keys: Set[str] = set()
        for skill_id, name_key in result.all():
            ids.add(str(skill_id))
            keys.add(name_key)
        return ids, keys

    async def name_key_taken(
        self,
        db: AsyncSession,
        name_key: str,
        *,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        """Check whether another skill already owns this normalized name."""
        query = select(Skill.id).where(Skill.name_key == name_key)
        if exclude_id is not None:
            query = query.where(Skill.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None
