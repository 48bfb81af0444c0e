"""
Health check routes.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
import redis.asyncio as redis

from app.core.database import get_db
from app.core.config import settings
from app.core.logging import get_logger
from app.schemas.base import BaseSchema

router = APIRouter(tags=["health"])

logger = get_logger(__name__)


class HealthResponse(BaseSchema):
    """Health check response."""

    status: str
    version: str
    environment: str
    timestamp: str
    checks: dict


async def _check_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
        return "healthy"
    except Exception as e:
        logger.warning("health_check_failed", component="database", error=str(e))
        return f"unhealthy: {str(e)}"


async def _check_broker() -> str:
    # Redis is the Celery broker; the API itself keeps working without it
    try:
        r = redis.from_url(settings.redis_url)
        await r.ping()
        await r.close()
        return "healthy"
    except Exception as e:
        logger.warning("health_check_failed", component="redis", error=str(e))
        return f"unhealthy: {str(e)}"


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint for monitoring.

    Always 200; `status` is "degraded" when a dependency is down.
    """
    checks = {
        "database": await _check_database(db),
        "redis": await _check_broker(),
    }

    all_healthy = all(v == "healthy" for v in checks.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat(),
        checks=checks,
    )
