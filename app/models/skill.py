"""
Skill model - the canonical, deduplicated skill entity.
"""
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlalchemy import String, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import ActiveMixin, BaseModel, JSONType


class SkillSourceType(str, Enum):
    """What justifies a skill's existence: a content entity or an admin."""

    PROJECT = "project"
    CERTIFICATION = "certification"
    EDUCATION = "education"
    MANUAL = "manual"
    GITHUB = "github"


# Source types backed by a content entity (and an entity adapter)
ENTITY_SOURCE_TYPES = (
    SkillSourceType.PROJECT.value,
    SkillSourceType.CERTIFICATION.value,
    SkillSourceType.EDUCATION.value,
)

SKILL_CATEGORIES = [
    "Language",
    "Framework / Library",
    "Database",
    "DevOps / Cloud",
    "Tooling",
    "Testing",
    "UI / UX",
    "Other",
]

PROFICIENCY_LEVELS = ["Beginner", "Intermediate", "Advanced", "Expert"]


class Skill(BaseModel, ActiveMixin):
    """
    Skill entity.

    `name_key` is the cleaned, lower-cased name and carries the unique
    constraint, so names differing only in case or stray punctuation map to
    one row. `sources` is a list of {"type", "reference_id"} dicts with at
    most one entry per pair.
    """

    __tablename__ = "skills"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_key: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    # Display metadata
    category: Mapped[str] = mapped_column(String(50), default="Other")
    proficiency: Mapped[str] = mapped_column(String(20), default="Beginner")
    level: Mapped[int] = mapped_column(Integer, default=50)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0)

    sources: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSONType,
        default=list,
        nullable=False,
    )

    def has_source(self, source_type: str, reference_id: Any = None) -> bool:
        ref = None if reference_id is None else str(reference_id)
        return any(
            s.get("type") == source_type and s.get("reference_id") == ref
            for s in (self.sources or [])
        )

    @property
    def is_manual(self) -> bool:
        return any(
            s.get("type") == SkillSourceType.MANUAL.value
            for s in (self.sources or [])
        )

    def __repr__(self) -> str:
        return f"<Skill {self.name} active={self.is_active}>"
