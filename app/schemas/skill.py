"""
Skill graph schemas.
"""
from typing import Any, List, Optional
from uuid import UUID
from pydantic import Field, field_validator, model_validator

from app.core.config import settings
from app.models.skill import PROFICIENCY_LEVELS, SKILL_CATEGORIES, SkillSourceType
from app.schemas.base import BaseSchema, IDSchema, TimestampSchema


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in SKILL_CATEGORIES:
        raise ValueError(f"category must be one of {SKILL_CATEGORIES}")
    return value


def _check_proficiency(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in PROFICIENCY_LEVELS:
        raise ValueError(f"proficiency must be one of {PROFICIENCY_LEVELS}")
    return value


class SkillSource(BaseSchema):
    """One reason a skill exists: a linked entity, an admin, or an import."""

    type: str
    reference_id: Optional[str] = None


class SkillCreate(BaseSchema):
    """Manual skill creation (admin)."""

    name: str = Field(..., min_length=1, max_length=255)
    category: str = "Other"
    proficiency: str = "Beginner"
    level: int = Field(50, ge=1, le=100)
    description: Optional[str] = None
    order: int = Field(0, ge=0)

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: Optional[str]) -> Optional[str]:
        return _check_category(value)

    @field_validator("proficiency")
    @classmethod
    def validate_proficiency(cls, value: Optional[str]) -> Optional[str]:
        return _check_proficiency(value)


class SkillUpdate(BaseSchema):
    """Partial skill update (admin)."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = None
    proficiency: Optional[str] = None
    level: Optional[int] = Field(None, ge=1, le=100)
    description: Optional[str] = None
    order: Optional[int] = Field(None, ge=0)

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: Optional[str]) -> Optional[str]:
        return _check_category(value)

    @field_validator("proficiency")
    @classmethod
    def validate_proficiency(cls, value: Optional[str]) -> Optional[str]:
        return _check_proficiency(value)


class SkillResponse(IDSchema, TimestampSchema):
    """Skill as returned by the API."""

    name: str
    category: str
    proficiency: str
    level: int
    description: Optional[str] = None
    order: int
    is_active: bool
    sources: List[SkillSource] = []


class SkillOrderItem(BaseSchema):
    id: UUID
    order: int = Field(..., ge=0)


class SkillOrderUpdate(BaseSchema):
    skills: List[SkillOrderItem]


# ─── References & maintenance results ──────────────────────────

class SkillReference(BaseSchema):
    """An entity that lists a skill."""

    id: UUID
    entity_type: str
    title: str
    is_active: bool


class SkillReferences(BaseSchema):
    projects: List[SkillReference] = []
    certifications: List[SkillReference] = []
    education: List[SkillReference] = []

    def all(self) -> List[SkillReference]:
        return [*self.projects, *self.certifications, *self.education]


class SkillUsageStats(BaseSchema):
    total_projects: int = 0
    active_projects: int = 0
    total_certifications: int = 0
    active_certifications: int = 0
    total_education: int = 0
    active_education: int = 0
    total_references: int = 0
    active_references: int = 0


class SkillReferencesResponse(BaseSchema):
    references: SkillReferences
    usage_stats: SkillUsageStats


class DeleteCheck(BaseSchema):
    can_delete: bool
    active_references: List[SkillReference]
    total_references: int


class VisibilityResult(BaseSchema):
    updated: bool
    skill: SkillResponse


class LinkResult(BaseSchema):
    skill: SkillResponse
    entity_type: str
    entity_id: UUID
    linked: bool


class BulkLinkRequest(BaseSchema):
    skill_ids: List[str] = Field(..., min_length=1, max_length=settings.bulk_link_max_items)


class BulkLinkItem(BaseSchema):
    skill_id: str
    status: str  # 'success' | 'error'
    result: Optional[LinkResult] = None
    error: Optional[str] = None


class SyncRequest(BaseSchema):
    """Bulk sync: `skills` may mix names, id strings and {"name", ...} objects."""

    skills: List[Any]
    source: SkillSourceType
    reference_id: Optional[str] = None

    @model_validator(mode="after")
    def check_reference_id(self) -> "SyncRequest":
        """Manual sources carry no reference; every other source needs one."""
        if self.source == SkillSourceType.MANUAL:
            self.reference_id = None
        elif not (self.reference_id or "").strip():
            raise ValueError(f"reference_id is required for {self.source.value} sources")
        return self


class SyncResponse(BaseSchema):
    message: str
    skills: List[SkillResponse]


class EntitySyncCount(BaseSchema):
    processed: int = 0
    skills_synced: int = 0


class SyncAllResult(BaseSchema):
    projects: EntitySyncCount
    certifications: EntitySyncCount
    education: EntitySyncCount
    total_skills: int


class CleanupResult(BaseSchema):
    cleaned_projects: int = 0
    cleaned_certifications: int = 0
    cleaned_education: int = 0
    deactivated_skills: int = 0
    activated_skills: int = 0
    pruned_sources: int = 0


class CleanupNamesResult(BaseSchema):
    cleaned: int = 0
    merged: int = 0


class EntitySkillsUpdate(BaseSchema):
    """Replacement skill list for a project / certification / education entry."""

    skills: List[Any]


class EntitySkillsResponse(BaseSchema):
    entity: SkillReference
    skills: List[SkillResponse]


class SkillDeleteResponse(BaseSchema):
    message: str
    skill: SkillResponse
