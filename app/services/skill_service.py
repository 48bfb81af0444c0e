"""
Skill service - admin CRUD and the public skill listing.

Anything that touches entity references lives in SkillSyncService; this
service covers the skill record itself.
"""
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from app.core.exceptions import SkillExistsException, SkillNotFoundException
from app.core.logging import get_logger
from app.models.skill import Skill, SkillSourceType
from app.repositories.skill_repository import SkillRepository
from app.schemas.skill import (
    CleanupNamesResult,
    SkillCreate,
    SkillOrderItem,
    SkillResponse,
    SkillUpdate,
)
from app.services.skill_normalizer import clean_name
from app.services.skill_sync_service import SkillSyncService

logger = get_logger(__name__)


class SkillService:
    """Handles skill listing and admin management."""

    def __init__(self, sync_service: Optional[SkillSyncService] = None):
        self.skill_repo = SkillRepository()
        self.sync_service = sync_service or SkillSyncService()

    async def list_skills(
        self,
        db: AsyncSession,
        *,
        category: Optional[str] = None,
        include_inactive: bool = False,
    ) -> List[SkillResponse]:
        skills = await self.skill_repo.list_filtered(
            db,
            category=category,
            include_inactive=include_inactive,
        )
        return [SkillResponse.model_validate(s) for s in skills]

    async def get_public_skill(
        self,
        db: AsyncSession,
        skill_id: UUID,
    ) -> SkillResponse:
        """
        Get one visible skill.

        Raises:
            SkillNotFoundException: If the skill is missing or hidden.
        """
        skill = await self.skill_repo.get_by_id(db, skill_id)
        if not skill or not skill.is_active:
            raise SkillNotFoundException(skill_id)
        return SkillResponse.model_validate(skill)

    async def list_categories(self, db: AsyncSession) -> List[str]:
        return await self.skill_repo.list_active_categories(db)

    async def create_skill(
        self,
        db: AsyncSession,
        data: SkillCreate,
    ) -> SkillResponse:
        """
        Create a skill by hand. Manual skills stay visible regardless of references.

        Raises:
            SkillExistsException: If a skill with the same cleaned name exists.
        """
        name = clean_name(data.name)
        key = name.lower()
        if not name or await self.skill_repo.name_key_taken(db, key):
            raise SkillExistsException(data.name)

        skill = await self.skill_repo.create(
            db,
            name=name,
            name_key=key,
            category=data.category,
            proficiency=data.proficiency,
            level=data.level,
            description=data.description,
            order=data.order,
            is_active=True,
            sources=[{"type": SkillSourceType.MANUAL.value, "reference_id": None}],
        )
        await db.commit()

        logger.info("skill_created", skill_id=str(skill.id), name=name, source="manual")
        return SkillResponse.model_validate(skill)

    async def update_skill(
        self,
        db: AsyncSession,
        skill_id: UUID,
        data: SkillUpdate,
    ) -> SkillResponse:
        """
        Partial update. Renames are checked against every other skill's name.

        Raises:
            SkillNotFoundException: If the skill doesn't exist.
            SkillExistsException: If the new name collides with another skill.
        """
        skill = await self._get_or_404(db, skill_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "name" in changes:
            name = clean_name(changes["name"])
            key = name.lower()
            if not name or await self.skill_repo.name_key_taken(db, key, exclude_id=skill.id):
                raise SkillExistsException(changes["name"])
            changes["name"] = name
            changes["name_key"] = key

        skill = await self.skill_repo.update(db, skill, **changes)
        await db.commit()
        return SkillResponse.model_validate(skill)

    async def toggle_active(
        self,
        db: AsyncSession,
        skill_id: UUID,
    ) -> SkillResponse:
        skill = await self._get_or_404(db, skill_id)
        skill = await self.skill_repo.update(db, skill, is_active=not skill.is_active)
        await db.commit()
        return SkillResponse.model_validate(skill)

    async def reorder(
        self,
        db: AsyncSession,
        items: List[SkillOrderItem],
    ) -> int:
        """Apply display order. Unknown ids are ignored; returns how many were updated."""
        updated = 0
        for item in items:
            skill = await self.skill_repo.get_by_id(db, item.id)
            if skill is None:
                continue
            skill.order = item.order
            updated += 1
        await db.flush()
        await db.commit()
        return updated

    async def cleanup_names(self, db: AsyncSession) -> CleanupNamesResult:
        """
        Re-clean every stored name and merge records that collapse together.

        The oldest record of each group survives. Duplicates hand over their
        sources and entity references, then get deleted. Surviving records
        get their visibility recomputed from the merged references.
        """
        groups: Dict[str, List[Skill]] = {}
        for skill in await self.skill_repo.list_all(db):
            cleaned = clean_name(skill.name) or skill.name
            groups.setdefault(cleaned.lower(), []).append(skill)

        result = CleanupNamesResult()
        renames: List[tuple] = []
        merged_targets: List[Skill] = []
        for key, skills in groups.items():
            target, duplicates = skills[0], skills[1:]
            if duplicates:
                merged_targets.append(target)

            for duplicate in duplicates:
                await self.sync_service.repoint_references(db, duplicate, target)
                sources = list(target.sources or [])
                for source in duplicate.sources or []:
                    if source not in sources:
                        sources.append(source)
                target.sources = sources
                flag_modified(target, "sources")
                await self.skill_repo.delete(db, duplicate)
                result.merged += 1
                logger.info(
                    "skill_merged",
                    duplicate_id=str(duplicate.id),
                    target_id=str(target.id),
                )

            cleaned = clean_name(target.name) or target.name
            if cleaned != target.name or key != target.name_key:
                renames.append((target, cleaned, key))
            await self.skill_repo.save(db, target)

        # Two passes so a stale key held by one row can move to another
        for target, _, _ in renames:
            target.name_key = f"~{target.id}"
        await db.flush()
        for target, cleaned, key in renames:
            target.name = cleaned
            target.name_key = key
            result.cleaned += 1
        await db.flush()
        await self.sync_service.reconcile_visibility(db, merged_targets)

        await db.commit()
        logger.info("skill_names_cleaned", cleaned=result.cleaned, merged=result.merged)
        return result

    async def _get_or_404(self, db: AsyncSession, skill_id: UUID) -> Skill:
        skill = await self.skill_repo.get_by_id(db, skill_id)
        if not skill:
            raise SkillNotFoundException(skill_id)
        return skill
