"""
Repository layer - data access abstraction.

Repositories handle all database queries, keeping SQL/ORM logic
out of the service and route layers.
"""
from app.repositories.base import BaseRepository
from app.repositories.skill_repository import SkillRepository
from app.repositories.content_repository import (
    ProjectRepository,
    CertificationRepository,
    EducationRepository,
)

__all__ = [
    "BaseRepository",
    "SkillRepository",
    "ProjectRepository",
    "CertificationRepository",
    "EducationRepository",
]
