"""
Database models for the portfolio API.

All models use UUID primary keys and include created_at/updated_at timestamps.
"""
from app.models.base import ActiveMixin, BaseModel, TimestampMixin, UUIDMixin
from app.models.skill import (
    Skill,
    SkillSourceType,
    ENTITY_SOURCE_TYPES,
    SKILL_CATEGORIES,
    PROFICIENCY_LEVELS,
)
from app.models.project import Project
from app.models.certification import Certification
from app.models.education import Education

__all__ = [
    "BaseModel",
    "ActiveMixin",
    "TimestampMixin",
    "UUIDMixin",
    "Skill",
    "SkillSourceType",
    "ENTITY_SOURCE_TYPES",
    "SKILL_CATEGORIES",
    "PROFICIENCY_LEVELS",
    "Project",
    "Certification",
    "Education",
]
