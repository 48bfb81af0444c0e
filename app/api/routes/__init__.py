"""
API Routes package.
"""
from fastapi import APIRouter

from app.api.routes.health import router as health_router
from app.api.routes.skills import router as skills_router
from app.api.routes.content import router as content_router

# Main API router
api_router = APIRouter()

# Include all routers
api_router.include_router(health_router)
api_router.include_router(skills_router)
api_router.include_router(content_router)

__all__ = [
    "api_router",
    "health_router",
    "skills_router",
    "content_router",
]
