"""
Service layer - business logic and orchestration.

Services contain the application's business logic, coordinate between
repositories, and handle cross-cutting concerns.

RULE: Routes call services. Services call repositories. Never the reverse.
"""
from app.services.skill_resolver import SkillResolver
from app.services.skill_sync_service import SkillSyncService
from app.services.skill_service import SkillService

__all__ = [
    "SkillResolver",
    "SkillSyncService",
    "SkillService",
]
