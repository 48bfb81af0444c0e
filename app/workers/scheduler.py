"""
Celery Beat scheduler configuration.

Defines periodic tasks that run on a schedule:
- Orphaned skill reference sweep daily at `orphan_cleanup_hour` (UTC)

Direct database edits and interrupted requests can leave entity skill lists
pointing at deleted skills, or skill sources pointing at deleted entities.
The nightly sweep heals both.
"""
from celery.schedules import crontab

from app.core.config import settings
from app.core.database import async_session_maker
from app.workers.celery_app import celery_app
from app.workers.tasks import run_async

# ─── Periodic Task Schedule ────────────────────────────────────

celery_app.conf.beat_schedule = {
    "cleanup-orphaned-skill-references": {
        "task": "app.workers.scheduler.cleanup_orphaned_skill_references",
        "schedule": crontab(hour=settings.orphan_cleanup_hour, minute=0),
    },
}


# ─── Scheduled Tasks ──────────────────────────────────────────

@celery_app.task
def cleanup_orphaned_skill_references():
    """Strip dangling skill references and re-apply skill visibility."""
    return run_async(_cleanup_orphaned_skill_references())


async def _cleanup_orphaned_skill_references():
    from app.services.skill_sync_service import SkillSyncService

    sync_service = SkillSyncService()

    async with async_session_maker() as db:
        result = await sync_service.cleanup_orphaned_references(db)

    return result.model_dump()
