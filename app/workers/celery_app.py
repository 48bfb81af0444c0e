"""
Celery application for skill-graph maintenance.

Runs the full re-sync and the nightly orphan sweep off the request path.
Redis is both broker and result backend.
"""
from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from app.core.config import settings
from app.core.logging import setup_logging

# Create Celery app
celery_app = Celery(
    "portfolio",
    broker=settings.celery_broker_url,
    backend=settings.celery_backend_url,
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # Full sweeps load every project, certification and education row
    task_time_limit=600,
    task_soft_time_limit=540,
    # One sweep at a time; concurrent sweeps rewrite the same skill rows
    worker_concurrency=1,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    result_expires=3600,
    task_default_retry_delay=60,
)

celery_app.autodiscover_tasks(["app.workers"])


@celery_setup_logging.connect
def _configure_worker_logging(**kwargs):
    """Use the API's structlog setup instead of Celery's own logging config."""
    setup_logging()
