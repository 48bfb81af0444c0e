"""
Skill sync service - keeps skills and the entities that list them consistent.

Every Project / Certification / Education that lists a skill must be
recorded in that skill's `sources`, and every entity-typed source must point
at an entity that still lists the skill. This service owns:

- sync_skills: find-or-create skills for a list of identifiers and record
  the (source_type, reference_id) link
- cascades: remove_skill_source, delete_skill, link/unlink
- visibility: one rule, used everywhere a reference changes:
      active  <=>  any ACTIVE entity lists the skill  OR  a manual source exists
- cleanup_orphaned_references: the self-healing sweep for drift from direct
  database edits

Public methods commit once at the end, so a failing call rolls back as a
whole. Internal helpers (prefixed with `_`) only flush.
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from app.core.config import settings
from app.core.exceptions import (
    APIException,
    EntityNotFoundException,
    SkillAlreadyLinkedException,
    SkillInUseException,
    SkillNotFoundException,
)
from app.core.logging import get_logger
from app.models.skill import ENTITY_SOURCE_TYPES, Skill
from app.repositories.skill_repository import SkillRepository
from app.schemas.skill import (
    BulkLinkItem,
    CleanupResult,
    DeleteCheck,
    EntitySkillsResponse,
    EntitySyncCount,
    LinkResult,
    SkillReference,
    SkillReferences,
    SkillResponse,
    SkillUsageStats,
    SyncAllResult,
    VisibilityResult,
)
from app.services.entity_adapters import ENTITY_ADAPTERS, EntityAdapter, get_adapter
from app.services.skill_normalizer import clean_name, guess_category, name_key, parse_uuid
from app.services.skill_resolver import SkillResolver

logger = get_logger(__name__)

# entity_type -> every entity of that type, loaded once per operation
EntitySnapshot = Dict[str, List[Any]]


def _source_entry(source_type: Any, reference_id: Any) -> Dict[str, Optional[str]]:
    type_value = getattr(source_type, "value", source_type)
    return {
        "type": str(type_value),
        "reference_id": None if reference_id is None else str(reference_id),
    }


class SkillSyncService:
    """Maintains the skill graph across projects, certifications and education."""

    def __init__(self):
        self.skill_repo = SkillRepository()
        self.resolver = SkillResolver(self.skill_repo)
        self.adapters: Dict[str, EntityAdapter] = ENTITY_ADAPTERS

    # ─── Sync ──────────────────────────────────────────────────

    async def sync_skills(
        self,
        db: AsyncSession,
        identifiers: Iterable[Any],
        source_type: Any,
        reference_id: Any,
    ) -> List[Skill]:
        """
        Find or create a skill for every identifier and record the source link.

        Malformed or unresolvable entries are skipped. Calling this twice
        with the same arguments leaves exactly one source entry per skill.
        Skills that gained a source get the visibility rule re-applied, so a
        skill known only from a non-entity import (github) stays hidden.
        """
        synced = await self._sync(db, identifiers, source_type, reference_id)
        await self.reconcile_visibility(db, [skill for skill, added in synced if added])
        await db.commit()
        return [skill for skill, _ in synced]

    async def _sync(
        self,
        db: AsyncSession,
        identifiers: Iterable[Any],
        source_type: Any,
        reference_id: Any,
    ) -> List[Tuple[Skill, bool]]:
        """Returns (skill, source_added) pairs in input order."""
        names = await self._canonical_names(db, identifiers)
        entry = _source_entry(source_type, reference_id)

        synced: List[Tuple[Skill, bool]] = []
        for name in names:
            skill = await self.skill_repo.get_by_name(db, name)
            if skill is None:
                skill = await self.skill_repo.get_by_name_key(db, name_key(name))

            if skill is None:
                skill, added = await self._create_for_source(db, name, entry)
            else:
                added = self._add_source(skill, entry)
                if added:
                    await self.skill_repo.save(db, skill)
            synced.append((skill, added))
        return synced

    async def _canonical_names(
        self,
        db: AsyncSession,
        identifiers: Iterable[Any],
    ) -> List[str]:
        """Deduplicate identifiers into canonical names, first-seen casing wins."""
        seen = set()
        names: List[str] = []
        for item in identifiers or []:
            name = await self._canonical_name(db, item)
            if not name:
                continue
            key = name.lower()
            if key in seen:
                continue
            seen.add(key)
            names.append(name)
        return names

    async def _canonical_name(self, db: AsyncSession, item: Any) -> Optional[str]:
        if item is None or isinstance(item, bool):
            return None

        if isinstance(item, (Mapping, Skill)) or parse_uuid(item) is not None:
            skill = await self.resolver.resolve(db, item)
            if skill is not None:
                return skill.name
            if isinstance(item, Mapping) and isinstance(item.get("name"), str):
                return clean_name(item["name"]) or None
            # id-shaped but pointing at nothing
            return None

        if isinstance(item, str):
            return clean_name(item) or None
        return None

    async def _create_for_source(
        self,
        db: AsyncSession,
        name: str,
        entry: Dict[str, Optional[str]],
    ) -> Tuple[Skill, bool]:
        """
        Create a skill inside a savepoint.

        A concurrent request may create the same name first; the unique
        name_key constraint turns that into an IntegrityError, and the
        existing row is used instead.
        """
        cleaned = clean_name(name)
        key = cleaned.lower()
        try:
            async with db.begin_nested():
                skill = Skill(
                    name=cleaned,
                    name_key=key,
                    category=guess_category(cleaned),
                    proficiency=settings.skill_default_proficiency,
                    level=50,
                    order=0,
                    is_active=True,
                    sources=[entry],
                )
                db.add(skill)
                await db.flush()
        except IntegrityError:
            logger.info("skill_create_conflict", name=cleaned)
            skill = await self.skill_repo.get_by_name_key(db, key)
            if skill is None:
                raise
            added = self._add_source(skill, entry)
            if added:
                await self.skill_repo.save(db, skill)
            return skill, added

        logger.info("skill_created", skill_id=str(skill.id), name=cleaned, source=entry["type"])
        return skill, True

    def _add_source(self, skill: Skill, entry: Dict[str, Optional[str]]) -> bool:
        if skill.has_source(entry["type"], entry["reference_id"]):
            return False
        skill.sources = [*(skill.sources or []), dict(entry)]
        flag_modified(skill, "sources")
        return True

    def _drop_source(self, skill: Skill, source_type: Any, reference_id: Any) -> bool:
        entry = _source_entry(source_type, reference_id)
        kept = [
            s for s in (skill.sources or [])
            if not (s.get("type") == entry["type"] and s.get("reference_id") == entry["reference_id"])
        ]
        if len(kept) == len(skill.sources or []):
            return False
        skill.sources = kept
        flag_modified(skill, "sources")
        return True

    # ─── References ────────────────────────────────────────────

    async def _load_entities(self, db: AsyncSession) -> EntitySnapshot:
        return {
            entity_type: await adapter.list_all(db)
            for entity_type, adapter in self.adapters.items()
        }

    def _references_from(self, skill: Skill, entities: EntitySnapshot) -> SkillReferences:
        found: Dict[str, List[SkillReference]] = {}
        for entity_type, adapter in self.adapters.items():
            found[adapter.collection] = [
                SkillReference(**adapter.describe(entity))
                for entity in entities.get(entity_type, [])
                if adapter.contains_skill(entity, skill)
            ]
        return SkillReferences(**found)

    async def get_skill_references(
        self,
        db: AsyncSession,
        identifier: Any,
    ) -> SkillReferences:
        """Every entity listing the skill, by id or by name. Empty for unknown skills."""
        skill = await self.resolver.resolve(db, identifier)
        if skill is None:
            return SkillReferences()
        return self._references_from(skill, await self._load_entities(db))

    async def get_skill_usage_stats(
        self,
        db: AsyncSession,
        identifier: Any,
    ) -> SkillUsageStats:
        refs = await self.get_skill_references(db, identifier)
        stats = {}
        for collection, items in (
            ("projects", refs.projects),
            ("certifications", refs.certifications),
            ("education", refs.education),
        ):
            stats[f"total_{collection}"] = len(items)
            stats[f"active_{collection}"] = sum(1 for r in items if r.is_active)
        everything = refs.all()
        stats["total_references"] = len(everything)
        stats["active_references"] = sum(1 for r in everything if r.is_active)
        return SkillUsageStats(**stats)

    async def can_delete_skill(
        self,
        db: AsyncSession,
        skill_id: Any,
    ) -> DeleteCheck:
        """A skill can be deleted when no ACTIVE entity lists it."""
        refs = await self.get_skill_references(db, skill_id)
        everything = refs.all()
        active = [r for r in everything if r.is_active]
        return DeleteCheck(
            can_delete=not active,
            active_references=active,
            total_references=len(everything),
        )

    # ─── Visibility ────────────────────────────────────────────

    def _should_be_active(self, skill: Skill, entities: EntitySnapshot) -> bool:
        if skill.is_manual:
            return True
        for entity_type, adapter in self.adapters.items():
            for entity in entities.get(entity_type, []):
                if entity.is_active and adapter.contains_skill(entity, skill):
                    return True
        return False

    async def _reconcile_visibility(
        self,
        db: AsyncSession,
        skill: Skill,
        entities: Optional[EntitySnapshot] = None,
    ) -> bool:
        """Apply the visibility rule. Returns True if is_active changed."""
        if entities is None:
            entities = await self._load_entities(db)
        should_be_active = self._should_be_active(skill, entities)
        if skill.is_active == should_be_active:
            return False
        skill.is_active = should_be_active
        await self.skill_repo.save(db, skill)
        logger.info(
            "skill_visibility_changed",
            skill_id=str(skill.id),
            is_active=should_be_active,
        )
        return True

    async def reconcile_visibility(self, db: AsyncSession, skills: Iterable[Skill]) -> int:
        """Apply the visibility rule to several skills against one entity snapshot. Flushes only."""
        skills = list(skills)
        if not skills:
            return 0
        entities = await self._load_entities(db)
        changed = 0
        for skill in skills:
            if await self._reconcile_visibility(db, skill, entities):
                changed += 1
        return changed

    async def recalculate_skill_visibility(
        self,
        db: AsyncSession,
        skill_id: Any,
    ) -> VisibilityResult:
        skill = await self._require_skill(db, skill_id)
        updated = await self._reconcile_visibility(db, skill)
        await db.commit()
        return VisibilityResult(updated=updated, skill=SkillResponse.model_validate(skill))

    async def hide_skill(self, db: AsyncSession, skill_id: Any) -> SkillResponse:
        """Admin override; sources are left alone."""
        return await self._set_active(db, skill_id, False)

    async def show_skill(self, db: AsyncSession, skill_id: Any) -> SkillResponse:
        """Admin override; sources are left alone."""
        return await self._set_active(db, skill_id, True)

    async def _set_active(self, db: AsyncSession, skill_id: Any, active: bool) -> SkillResponse:
        skill = await self._require_skill(db, skill_id)
        skill = await self.skill_repo.update(db, skill, is_active=active)
        await db.commit()
        return SkillResponse.model_validate(skill)

    # ─── Cascades ──────────────────────────────────────────────

    async def remove_skill_source(
        self,
        db: AsyncSession,
        identifier: Any,
        source_type: Any,
        reference_id: Any,
    ) -> Optional[Skill]:
        """
        Drop one (source_type, reference_id) link and re-apply the visibility rule.

        Idempotent; unknown skills are ignored.
        """
        skill = await self.resolver.resolve(db, identifier)
        if skill is None:
            return None
        if self._drop_source(skill, source_type, reference_id):
            await self.skill_repo.save(db, skill)
        await self._reconcile_visibility(db, skill)
        await db.commit()
        return skill

    async def delete_skill(
        self,
        db: AsyncSession,
        skill_id: Any,
        force: bool = False,
    ) -> SkillResponse:
        """
        Delete a skill and strip it from every entity that lists it.

        Without `force`, refuses while any active entity references the skill.

        Raises:
            SkillNotFoundException: unknown skill
            SkillInUseException: active references exist and force is False
        """
        skill = await self._require_skill(db, skill_id)
        entities = await self._load_entities(db)

        if not force:
            refs = self._references_from(skill, entities)
            active = [r for r in refs.all() if r.is_active]
            if active:
                logger.warning(
                    "skill_delete_blocked",
                    skill_id=str(skill.id),
                    active_references=len(active),
                )
                raise SkillInUseException([r.model_dump(mode="json") for r in active])

        detached = 0
        for entity_type, adapter in self.adapters.items():
            for entity in entities.get(entity_type, []):
                if adapter.detach_skill(entity, skill):
                    await adapter.save(db, entity)
                    detached += 1

        snapshot = SkillResponse.model_validate(skill)
        await self.skill_repo.delete(db, skill)
        await db.commit()

        logger.info(
            "skill_deleted",
            skill_id=str(snapshot.id),
            name=snapshot.name,
            force=force,
            entities_updated=detached,
        )
        return snapshot

    async def link_skill_to_entity(
        self,
        db: AsyncSession,
        skill_identifier: Any,
        entity_type: str,
        entity_id: Any,
    ) -> LinkResult:
        """
        Attach one skill to one entity and record the source.

        Unlike sync_skills, linking an already-linked pair is an error.
        """
        adapter = get_adapter(entity_type)
        skill = await self._require_skill(db, skill_identifier)
        entity = await self._require_entity(db, adapter, entity_id)

        if adapter.contains_skill(entity, skill):
            raise SkillAlreadyLinkedException(adapter.entity_type, entity.id)

        adapter.attach_skill(entity, skill)
        await adapter.save(db, entity)

        if self._add_source(skill, _source_entry(adapter.entity_type, entity.id)):
            await self.skill_repo.save(db, skill)
        await self._reconcile_visibility(db, skill)
        await db.commit()

        logger.info(
            "skill_linked",
            skill_id=str(skill.id),
            entity_type=adapter.entity_type,
            entity_id=str(entity.id),
        )
        return LinkResult(
            skill=SkillResponse.model_validate(skill),
            entity_type=adapter.entity_type,
            entity_id=entity.id,
            linked=True,
        )

    async def unlink_skill_from_entity(
        self,
        db: AsyncSession,
        skill_identifier: Any,
        entity_type: str,
        entity_id: Any,
    ) -> LinkResult:
        """Detach one skill from one entity and drop the source."""
        adapter = get_adapter(entity_type)
        skill = await self._require_skill(db, skill_identifier)
        entity = await self._require_entity(db, adapter, entity_id)

        if adapter.detach_skill(entity, skill):
            await adapter.save(db, entity)
        if self._drop_source(skill, adapter.entity_type, entity.id):
            await self.skill_repo.save(db, skill)
        await self._reconcile_visibility(db, skill)
        await db.commit()

        logger.info(
            "skill_unlinked",
            skill_id=str(skill.id),
            entity_type=adapter.entity_type,
            entity_id=str(entity.id),
        )
        return LinkResult(
            skill=SkillResponse.model_validate(skill),
            entity_type=adapter.entity_type,
            entity_id=entity.id,
            linked=False,
        )

    async def bulk_link_skills_to_entity(
        self,
        db: AsyncSession,
        skill_ids: List[str],
        entity_type: str,
        entity_id: Any,
    ) -> List[BulkLinkItem]:
        """Link each skill independently; per-item errors are reported, not raised."""
        get_adapter(entity_type)
        results = []
        for skill_id in skill_ids:
            try:
                result = await self.link_skill_to_entity(db, skill_id, entity_type, entity_id)
                results.append(BulkLinkItem(skill_id=skill_id, status="success", result=result))
            except APIException as exc:
                results.append(BulkLinkItem(skill_id=skill_id, status="error", error=exc.message))
        return results

    async def bulk_unlink_skills_from_entity(
        self,
        db: AsyncSession,
        skill_ids: List[str],
        entity_type: str,
        entity_id: Any,
    ) -> List[BulkLinkItem]:
        get_adapter(entity_type)
        results = []
        for skill_id in skill_ids:
            try:
                result = await self.unlink_skill_from_entity(db, skill_id, entity_type, entity_id)
                results.append(BulkLinkItem(skill_id=skill_id, status="success", result=result))
            except APIException as exc:
                results.append(BulkLinkItem(skill_id=skill_id, status="error", error=exc.message))
        return results

    async def repoint_references(
        self,
        db: AsyncSession,
        duplicate: Skill,
        target: Skill,
    ) -> int:
        """Move every entity reference from `duplicate` to `target` (used when merging)."""
        moved = 0
        entities = await self._load_entities(db)
        for entity_type, adapter in self.adapters.items():
            for entity in entities.get(entity_type, []):
                if adapter.detach_skill(entity, duplicate):
                    adapter.attach_skill(entity, target)
                    await adapter.save(db, entity)
                    moved += 1
        return moved

    # ─── Orphan cleanup ────────────────────────────────────────

    async def cleanup_orphaned_references(self, db: AsyncSession) -> CleanupResult:
        """
        Self-healing sweep over every entity and skill.

        1. strip entity entries that resolve to no existing skill
        2. drop entity-typed sources whose entity is gone or no longer lists the skill
        3. re-apply the visibility rule to every skill

        Malformed entries are dropped rather than raised on.
        """
        skill_ids, skill_keys = await self.skill_repo.get_identity_sets(db)
        entities = await self._load_entities(db)
        result = CleanupResult()

        for entity_type, adapter in self.adapters.items():
            cleaned = 0
            for entity in entities.get(entity_type, []):
                if adapter.prune_orphans(entity, skill_ids, skill_keys):
                    await adapter.save(db, entity)
                    cleaned += 1
            setattr(result, f"cleaned_{adapter.collection}", cleaned)

        index = {
            (entity_type, str(entity.id)): entity
            for entity_type, items in entities.items()
            for entity in items
        }
        for skill in await self.skill_repo.list_all(db):
            result.pruned_sources += await self._prune_stale_sources(db, skill, index)
            was_active = skill.is_active
            if await self._reconcile_visibility(db, skill, entities):
                if was_active:
                    result.deactivated_skills += 1
                else:
                    result.activated_skills += 1

        await db.commit()
        logger.info("orphan_cleanup_finished", **result.model_dump())
        return result

    async def _prune_stale_sources(
        self,
        db: AsyncSession,
        skill: Skill,
        index: Dict[Tuple[str, str], Any],
    ) -> int:
        kept = []
        for source in skill.sources or []:
            source_type = source.get("type") if isinstance(source, Mapping) else None
            if source_type is None:
                continue
            if source_type in ENTITY_SOURCE_TYPES:
                ref = parse_uuid(source.get("reference_id"))
                # Non-id references (bulk sentinels) are not tied to one entity
                if ref is not None:
                    entity = index.get((source_type, str(ref)))
                    if entity is None or not self.adapters[source_type].contains_skill(entity, skill):
                        continue
            kept.append(source)

        pruned = len(skill.sources or []) - len(kept)
        if pruned:
            skill.sources = kept
            flag_modified(skill, "sources")
            await self.skill_repo.save(db, skill)
        return pruned

    # ─── Entity lifecycle ──────────────────────────────────────

    async def reconcile_entity_skills(
        self,
        db: AsyncSession,
        entity_type: str,
        entity: Any,
        previous_identifiers: Optional[Iterable[Any]] = None,
    ) -> List[Skill]:
        """
        Call after an entity's skill list was created or changed.

        Syncs the current list, rewrites the project id mirror, drops the
        sources of skills that are no longer listed, and re-applies the
        visibility rule to every skill whose links changed.
        """
        adapter = get_adapter(entity_type)
        await adapter.save(db, entity)

        synced = await self._sync(db, adapter.sync_identifiers(entity), adapter.entity_type, entity.id)
        skills = [skill for skill, _ in synced]
        if adapter.refresh_mirror(entity, skills):
            await adapter.save(db, entity)

        touched: Dict[UUID, Skill] = {skill.id: skill for skill, added in synced if added}
        for identifier in previous_identifiers or []:
            skill = await self.resolver.resolve(db, identifier)
            if skill is None or adapter.contains_skill(entity, skill):
                continue
            if self._drop_source(skill, adapter.entity_type, entity.id):
                await self.skill_repo.save(db, skill)
            touched[skill.id] = skill

        if touched:
            entities = await self._load_entities(db)
            for skill in touched.values():
                await self._reconcile_visibility(db, skill, entities)

        await db.commit()
        return skills

    async def update_entity_skills(
        self,
        db: AsyncSession,
        entity_type: str,
        entity_id: Any,
        identifiers: List[Any],
    ) -> EntitySkillsResponse:
        """Replace an entity's skill list and reconcile the affected skills."""
        adapter = get_adapter(entity_type)
        entity = await self._require_entity(db, adapter, entity_id)
        previous = adapter.list_skill_identifiers(entity)

        adapter.replace_skills(entity, [i for i in identifiers if i is not None])
        skills = await self.reconcile_entity_skills(db, adapter.entity_type, entity, previous)
        return EntitySkillsResponse(
            entity=SkillReference(**adapter.describe(entity)),
            skills=[SkillResponse.model_validate(s) for s in skills],
        )

    async def delete_entity(
        self,
        db: AsyncSession,
        entity_type: str,
        entity_id: Any,
    ) -> None:
        """Delete an entity and release the sources it held on its skills."""
        adapter = get_adapter(entity_type)
        entity = await self._require_entity(db, adapter, entity_id)
        held: Dict[UUID, Skill] = {}
        for identifier in adapter.list_skill_identifiers(entity):
            skill = await self.resolver.resolve(db, identifier)
            if skill is not None:
                held[skill.id] = skill

        reference_id = entity.id
        await adapter.delete(db, entity)

        entities = await self._load_entities(db)
        for skill in held.values():
            if self._drop_source(skill, adapter.entity_type, reference_id):
                await self.skill_repo.save(db, skill)
            await self._reconcile_visibility(db, skill, entities)

        await db.commit()
        logger.info(
            "entity_deleted",
            entity_type=adapter.entity_type,
            entity_id=str(reference_id),
            skills_released=len(held),
        )

    async def sync_all_entities(self, db: AsyncSession) -> SyncAllResult:
        """Rebuild every source link from the current contents of every entity."""
        counts: Dict[str, EntitySyncCount] = {}
        for entity_type, adapter in self.adapters.items():
            count = EntitySyncCount()
            for entity in await adapter.list_all(db):
                identifiers = adapter.sync_identifiers(entity)
                if not identifiers:
                    continue
                synced = await self._sync(db, identifiers, adapter.entity_type, entity.id)
                if adapter.refresh_mirror(entity, [skill for skill, _ in synced]):
                    await adapter.save(db, entity)
                count.processed += 1
                count.skills_synced += len(identifiers)
            counts[adapter.collection] = count

        total = await self.skill_repo.count(db)
        await db.commit()
        logger.info("sync_all_finished", total_skills=total)
        return SyncAllResult(**counts, total_skills=total)

    # ─── Lookups ───────────────────────────────────────────────

    async def _require_skill(self, db: AsyncSession, identifier: Any) -> Skill:
        skill = await self.resolver.resolve(db, identifier)
        if skill is None:
            raise SkillNotFoundException(identifier)
        return skill

    async def _require_entity(
        self,
        db: AsyncSession,
        adapter: EntityAdapter,
        entity_id: Any,
    ) -> Any:
        parsed = parse_uuid(entity_id if isinstance(entity_id, UUID) else str(entity_id))
        entity = await adapter.get(db, parsed) if parsed is not None else None
        if entity is None:
            raise EntityNotFoundException(adapter.entity_type, entity_id)
        return entity
