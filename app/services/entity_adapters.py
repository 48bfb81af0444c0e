"""
Entity adapters - one per content type that references skills.

Projects, certifications and education entries each store their skills in
a different shape:

    Project.technologies   ["React", "Node.js"]              (ground truth)
    Project.skills         ["<skill uuid>", ...]             (resolved mirror)
    Certification.skills   [{"name", "proficiency", "verified"}, ...]
    Education.skills       any mix of names, id strings and objects

Each adapter hides its shape behind the same small interface so the
synchronizer never branches on entity type.
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Set
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from app.core.config import settings
from app.core.exceptions import InvalidEntityTypeException
from app.models.skill import Skill, SkillSourceType
from app.repositories.base import BaseRepository
from app.repositories.content_repository import (
    CertificationRepository,
    EducationRepository,
    ProjectRepository,
)
from app.services.skill_normalizer import clean_name, name_key, parse_uuid


def _entry_id(entry: Any) -> Optional[UUID]:
    if isinstance(entry, Mapping):
        raw = entry.get("id", entry.get("_id"))
        return parse_uuid(str(raw)) if raw is not None else None
    return parse_uuid(entry)


def _entry_name_key(entry: Any) -> str:
    if isinstance(entry, Mapping):
        name = entry.get("name")
        return name_key(name) if isinstance(name, str) else ""
    if isinstance(entry, str) and parse_uuid(entry) is None:
        return name_key(entry)
    return ""


def entry_matches(entry: Any, skill: Skill) -> bool:
    """True if a stored entry of any shape points at `skill`, by id or by name."""
    if entry is None:
        return False
    entry_id = _entry_id(entry)
    if entry_id is not None and entry_id == skill.id:
        return True
    key = _entry_name_key(entry)
    return bool(key) and key == skill.name_key


def entry_resolves(entry: Any, skill_ids: Set[str], skill_keys: Set[str]) -> bool:
    """True if an entry still points at some existing skill."""
    entry_id = _entry_id(entry)
    if entry_id is not None and str(entry_id) in skill_ids:
        return True
    key = _entry_name_key(entry)
    return bool(key) and key in skill_keys


class EntityAdapter:
    """
    Shape-agnostic access to one entity type's skill associations.

    Subclasses set `entity_type`, `collection`, `fields` and the repository,
    and override the attach/read hooks that depend on the storage shape.
    """

    entity_type: str = ""
    collection: str = ""
    fields: tuple = ("skills",)

    def __init__(self, repository: BaseRepository):
        self.repository = repository

    # ── storage access ─────────────────────────────────────────

    def _read(self, entity: Any, field: str) -> List[Any]:
        value = getattr(entity, field, None)
        return list(value) if isinstance(value, list) else []

    def _write(self, entity: Any, field: str, values: Iterable[Any]) -> None:
        setattr(entity, field, list(values))
        flag_modified(entity, field)

    # ── adapter interface ──────────────────────────────────────

    def list_skill_identifiers(self, entity: Any) -> List[Any]:
        """Everything the entity stores, unresolved."""
        identifiers: List[Any] = []
        for field in self.fields:
            identifiers.extend(self._read(entity, field))
        return identifiers

    def sync_identifiers(self, entity: Any) -> List[Any]:
        """The identifiers that define the entity's skill set when syncing."""
        return self.list_skill_identifiers(entity)

    def contains_skill(self, entity: Any, skill: Skill) -> bool:
        return any(
            entry_matches(entry, skill)
            for entry in self.list_skill_identifiers(entity)
        )

    def attach_skill(self, entity: Any, skill: Skill) -> bool:
        """Append the skill in native shape. Returns False if already present."""
        field = self.fields[0]
        entries = self._read(entity, field)
        if any(entry_matches(entry, skill) for entry in entries):
            return False
        self._write(entity, field, [*entries, self._native_entry(skill)])
        return True

    def detach_skill(self, entity: Any, skill: Skill) -> bool:
        """Remove every entry matching the skill. Returns True if anything changed."""
        changed = False
        for field in self.fields:
            entries = self._read(entity, field)
            kept = [e for e in entries if not entry_matches(e, skill)]
            if len(kept) != len(entries):
                self._write(entity, field, kept)
                changed = True
        return changed

    def prune_orphans(
        self,
        entity: Any,
        skill_ids: Set[str],
        skill_keys: Set[str],
    ) -> bool:
        """Drop entries that no longer resolve to any skill. Malformed entries go too."""
        changed = False
        for field in self.fields:
            raw = getattr(entity, field, None)
            entries = self._read(entity, field)
            kept = [e for e in entries if entry_resolves(e, skill_ids, skill_keys)]
            if len(kept) != len(entries) or (raw is not None and not isinstance(raw, list)):
                self._write(entity, field, kept)
                changed = True
        return changed

    def replace_skills(self, entity: Any, identifiers: List[Any]) -> None:
        """Overwrite the entity's primary skill list with caller-supplied entries."""
        self._write(entity, self.fields[0], identifiers)

    def refresh_mirror(self, entity: Any, skills: List[Skill]) -> bool:
        """Rewrite an id-linked mirror field after sync. No-op unless the shape has one."""
        return False

    def describe(self, entity: Any) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "entity_type": self.entity_type,
            "title": self.title(entity),
            "is_active": bool(entity.is_active),
        }

    def title(self, entity: Any) -> str:
        return entity.title

    def _native_entry(self, skill: Skill) -> Any:
        raise NotImplementedError

    # ── persistence ────────────────────────────────────────────

    async def get(self, db: AsyncSession, entity_id: UUID) -> Optional[Any]:
        return await self.repository.get_by_id(db, entity_id)

    async def list_all(self, db: AsyncSession) -> List[Any]:
        return await self.repository.list_all(db)

    async def save(self, db: AsyncSession, entity: Any) -> Any:
        return await self.repository.save(db, entity)

    async def delete(self, db: AsyncSession, entity: Any) -> None:
        await self.repository.delete(db, entity)


class ProjectAdapter(EntityAdapter):
    """Names in `technologies`, resolved ids mirrored in `skills`."""

    entity_type = SkillSourceType.PROJECT.value
    collection = "projects"
    fields = ("technologies", "skills")

    def __init__(self):
        super().__init__(ProjectRepository())

    def sync_identifiers(self, entity: Any) -> List[Any]:
        return self._read(entity, "technologies")

    def attach_skill(self, entity: Any, skill: Skill) -> bool:
        changed = False
        technologies = self._read(entity, "technologies")
        if not any(entry_matches(t, skill) for t in technologies):
            self._write(entity, "technologies", [*technologies, skill.name])
            changed = True
        mirror = self._read(entity, "skills")
        if not any(entry_matches(s, skill) for s in mirror):
            self._write(entity, "skills", [*mirror, str(skill.id)])
            changed = True
        return changed

    def refresh_mirror(self, entity: Any, skills: List[Skill]) -> bool:
        linked = [str(s.id) for s in skills]
        if self._read(entity, "skills") == linked:
            return False
        self._write(entity, "skills", linked)
        return True


class EmbeddedSkillAdapter(EntityAdapter):
    """Skills embedded as {"name", "proficiency", "verified"} objects."""

    fields = ("skills",)

    def sync_identifiers(self, entity: Any) -> List[Any]:
        identifiers = []
        for entry in self._read(entity, "skills"):
            if isinstance(entry, Mapping):
                if isinstance(entry.get("name"), str) and clean_name(entry["name"]):
                    identifiers.append(entry["name"])
                elif _entry_id(entry) is not None:
                    identifiers.append(str(_entry_id(entry)))
            elif isinstance(entry, str):
                identifiers.append(entry)
        return identifiers

    def _native_entry(self, skill: Skill) -> Dict[str, Any]:
        return {
            "name": skill.name,
            "proficiency": skill.proficiency or settings.skill_link_proficiency,
            "verified": True,
        }


class CertificationAdapter(EmbeddedSkillAdapter):
    entity_type = SkillSourceType.CERTIFICATION.value
    collection = "certifications"

    def __init__(self):
        super().__init__(CertificationRepository())


class EducationAdapter(EmbeddedSkillAdapter):
    """Mixed legacy shapes are read as-is; new links are written as objects."""

    entity_type = SkillSourceType.EDUCATION.value
    collection = "education"

    def __init__(self):
        super().__init__(EducationRepository())

    def title(self, entity: Any) -> str:
        if entity.field:
            return f"{entity.degree} - {entity.field}"
        return entity.degree


ENTITY_ADAPTERS: Dict[str, EntityAdapter] = {
    adapter.entity_type: adapter
    for adapter in (ProjectAdapter(), CertificationAdapter(), EducationAdapter())
}


def get_adapter(entity_type: str) -> EntityAdapter:
    """Look up the adapter for an entity type, rejecting unknown types."""
    key = entity_type.value if isinstance(entity_type, SkillSourceType) else str(entity_type)
    adapter = ENTITY_ADAPTERS.get(key)
    if adapter is None:
        raise InvalidEntityTypeException(key)
    return adapter
