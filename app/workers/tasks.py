"""
Celery tasks for background processing.

Tasks are thin entry points, same as routes:
  1. Create a DB session (we're outside FastAPI's request cycle)
  2. Call a SkillSyncService method
  3. Return a JSON-serializable result
"""
import asyncio

from app.workers.celery_app import celery_app
from app.core.database import async_session_maker
from app.core.logging import get_logger

logger = get_logger(__name__)


def run_async(coro):
    """
    Helper to run async code in sync Celery tasks.

    Celery workers are synchronous. Our services are async (because
    SQLAlchemy async requires it). This bridge creates an event loop,
    runs the coroutine, and cleans up.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task(bind=True, max_retries=3)
def sync_all_skills(self):
    """Rebuild skill sources from every project, certification and education entry."""
    return run_async(_sync_all_skills())


async def _sync_all_skills():
    from app.services.skill_sync_service import SkillSyncService

    sync_service = SkillSyncService()

    async with async_session_maker() as db:
        result = await sync_service.sync_all_entities(db)

    logger.info("task_sync_all_skills_done", total_skills=result.total_skills)
    return result.model_dump(mode="json")


@celery_app.task(bind=True, max_retries=3)
def reconcile_entity_skills(self, entity_type: str, entity_id: str):
    """
    Re-sync one entity after an edit made outside the API.

    Skills the entity no longer lists keep their stale source until the
    nightly orphan sweep removes it.
    """
    return run_async(_reconcile_entity_skills(entity_type, entity_id))


async def _reconcile_entity_skills(entity_type: str, entity_id: str):
    from app.services.entity_adapters import get_adapter
    from app.services.skill_normalizer import parse_uuid
    from app.services.skill_sync_service import SkillSyncService

    sync_service = SkillSyncService()
    adapter = get_adapter(entity_type)
    parsed = parse_uuid(entity_id)

    async with async_session_maker() as db:
        entity = await adapter.get(db, parsed) if parsed else None
        if entity is None:
            logger.warning("task_entity_missing", entity_type=entity_type, entity_id=entity_id)
            return {"synced": 0}

        skills = await sync_service.reconcile_entity_skills(db, entity_type, entity)

    return {"synced": len(skills)}
