"""
Skill routes.

Thin controllers - SkillService owns the skill record, SkillSyncService
owns everything that crosses into projects, certifications and education.
Literal paths are registered before `/{skill_id}` so they are never
captured by it.
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_admin_user
from app.core.database import get_db
from app.schemas.base import ErrorResponse, MessageResponse
from app.schemas.skill import (
    BulkLinkItem,
    BulkLinkRequest,
    CleanupNamesResult,
    CleanupResult,
    LinkResult,
    SkillCreate,
    SkillDeleteResponse,
    SkillOrderUpdate,
    SkillReferencesResponse,
    SkillResponse,
    SkillUpdate,
    SyncAllResult,
    SyncRequest,
    SyncResponse,
    VisibilityResult,
)
from app.services.skill_service import SkillService
from app.services.skill_sync_service import SkillSyncService

router = APIRouter(
    prefix="/skills",
    tags=["skills"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)

sync_service = SkillSyncService()
skill_service = SkillService(sync_service)


# ─── Public ────────────────────────────────────────────────────

@router.get("", response_model=List[SkillResponse])
async def list_skills(
    category: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List visible skills, grouped by category then display order."""
    return await skill_service.list_skills(db, category=category)


@router.get("/meta/categories", response_model=List[str])
async def list_categories(db: AsyncSession = Depends(get_db)):
    """Categories that have at least one visible skill."""
    return await skill_service.list_categories(db)


@router.get("/admin/all", response_model=List[SkillResponse])
async def list_all_skills(
    category: Optional[str] = Query(None),
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Every skill, hidden ones included."""
    return await skill_service.list_skills(db, category=category, include_inactive=True)


# ─── Admin: bulk maintenance ───────────────────────────────────

@router.post("", response_model=SkillResponse, status_code=201)
async def create_skill(
    data: SkillCreate,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await skill_service.create_skill(db, data)


@router.put("/order/update", response_model=MessageResponse)
async def update_order(
    data: SkillOrderUpdate,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await skill_service.reorder(db, data.skills)
    return MessageResponse(message=f"Updated order of {updated} skills")


@router.post("/sync", response_model=SyncResponse)
async def sync_skills(
    data: SyncRequest,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Find-or-create skills from a mixed list and record where they came from."""
    skills = await sync_service.sync_skills(db, data.skills, data.source, data.reference_id)
    return SyncResponse(
        message=f"Synced {len(skills)} skills",
        skills=[SkillResponse.model_validate(s) for s in skills],
    )


@router.post("/sync-all", response_model=SyncAllResult)
async def sync_all(
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Rebuild skill sources from every project, certification and education entry."""
    return await sync_service.sync_all_entities(db)


@router.post("/cleanup-orphaned", response_model=CleanupResult)
async def cleanup_orphaned(
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await sync_service.cleanup_orphaned_references(db)


@router.post("/cleanup-names", response_model=CleanupNamesResult)
async def cleanup_names(
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Strip stray quotes from stored names and merge the duplicates that fall out."""
    return await skill_service.cleanup_names(db)


@router.post("/bulk-link/{entity_type}/{entity_id}", response_model=List[BulkLinkItem])
async def bulk_link(
    entity_type: str,
    entity_id: str,
    data: BulkLinkRequest,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await sync_service.bulk_link_skills_to_entity(db, data.skill_ids, entity_type, entity_id)


@router.post("/bulk-unlink/{entity_type}/{entity_id}", response_model=List[BulkLinkItem])
async def bulk_unlink(
    entity_type: str,
    entity_id: str,
    data: BulkLinkRequest,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await sync_service.bulk_unlink_skills_from_entity(db, data.skill_ids, entity_type, entity_id)


# ─── Single skill ──────────────────────────────────────────────

@router.get("/{skill_id}", response_model=SkillResponse)
async def get_skill(
    skill_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get one visible skill."""
    return await skill_service.get_public_skill(db, skill_id)


@router.put("/{skill_id}", response_model=SkillResponse)
async def update_skill(
    skill_id: UUID,
    data: SkillUpdate,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await skill_service.update_skill(db, skill_id, data)


@router.delete("/{skill_id}", response_model=SkillDeleteResponse)
async def delete_skill(
    skill_id: UUID,
    force: bool = Query(False),
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a skill and strip it from every entity.

    Refused with SKILL_IN_USE while an active entity lists it, unless `force`.
    """
    skill = await sync_service.delete_skill(db, skill_id, force=force)
    return SkillDeleteResponse(message="Skill deleted", skill=skill)


@router.put("/{skill_id}/toggle-active", response_model=SkillResponse)
async def toggle_active(
    skill_id: UUID,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await skill_service.toggle_active(db, skill_id)


@router.put("/{skill_id}/hide", response_model=SkillResponse)
async def hide_skill(
    skill_id: UUID,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await sync_service.hide_skill(db, skill_id)


@router.put("/{skill_id}/show", response_model=SkillResponse)
async def show_skill(
    skill_id: UUID,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await sync_service.show_skill(db, skill_id)


@router.put("/{skill_id}/recalculate-visibility", response_model=VisibilityResult)
async def recalculate_visibility(
    skill_id: UUID,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await sync_service.recalculate_skill_visibility(db, skill_id)


@router.get("/{skill_id}/references", response_model=SkillReferencesResponse)
async def get_references(
    skill_id: str,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Entities listing the skill. Accepts an id or a name."""
    references = await sync_service.get_skill_references(db, skill_id)
    usage_stats = await sync_service.get_skill_usage_stats(db, skill_id)
    return SkillReferencesResponse(references=references, usage_stats=usage_stats)


@router.post("/{skill_id}/link/{entity_type}/{entity_id}", response_model=LinkResult)
async def link_skill(
    skill_id: str,
    entity_type: str,
    entity_id: str,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await sync_service.link_skill_to_entity(db, skill_id, entity_type, entity_id)


@router.delete("/{skill_id}/link/{entity_type}/{entity_id}", response_model=LinkResult)
async def unlink_skill(
    skill_id: str,
    entity_type: str,
    entity_id: str,
    admin: Dict[str, Any] = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await sync_service.unlink_skill_from_entity(db, skill_id, entity_type, entity_id)
