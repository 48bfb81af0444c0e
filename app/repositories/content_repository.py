"""
Content repositories - data access for the entities that reference skills.

Skill lists live in JSON columns, so "which entities list skill X" is
answered by the entity adapters over `list_all()`, not by SQL.
"""
from app.models.certification import Certification
from app.models.education import Education
from app.models.project import Project
from app.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    def __init__(self):
        super().__init__(Project)


class CertificationRepository(BaseRepository[Certification]):
    def __init__(self):
        super().__init__(Certification)


class EducationRepository(BaseRepository[Education]):
    def __init__(self):
        super().__init__(Education)
