"""
Workers package - Celery tasks and background processing.
"""
from app.workers.celery_app import celery_app
from app.workers.tasks import (
    sync_all_skills,
    reconcile_entity_skills,
)
from app.workers.scheduler import cleanup_orphaned_skill_references

__all__ = [
    "celery_app",
    "sync_all_skills",
    "reconcile_entity_skills",
    "cleanup_orphaned_skill_references",
]
