"""
Content hooks.

The portfolio editor saves projects, certifications and education entries
elsewhere; these endpoints are what it calls when an entry's skill list
changes or the entry is removed, so the skill graph follows along.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_admin_user
from app.core.database import get_db
from app.schemas.base import ErrorResponse, MessageResponse
from app.schemas.skill import EntitySkillsResponse, EntitySkillsUpdate
from app.services.skill_sync_service import SkillSyncService

router = APIRouter(
    prefix="/content",
    tags=["content"],
    responses={404: {"model": ErrorResponse}},
)

sync_service = SkillSyncService()


@router.put("/{entity_type}/{entity_id}/skills", response_model=EntitySkillsResponse)
async def update_entity_skills(
    entity_type: str,
    entity_id: str,
    data: EntitySkillsUpdate,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Replace an entry's skill list and sync it into the skill graph."""
    return await sync_service.update_entity_skills(db, entity_type, entity_id, data.skills)


@router.delete("/{entity_type}/{entity_id}", response_model=MessageResponse)
async def delete_entity(
    entity_type: str,
    entity_id: str,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete an entry and release the skills it held."""
    await sync_service.delete_entity(db, entity_type, entity_id)
    return MessageResponse(message=f"{entity_type} deleted")
