"""
Pydantic schemas for API validation and serialization.
"""
from app.schemas.base import (
    BaseSchema,
    IDSchema,
    TimestampSchema,
    MessageResponse,
    ErrorResponse,
)
from app.schemas.skill import (
    SkillSource,
    SkillCreate,
    SkillUpdate,
    SkillResponse,
    SkillOrderItem,
    SkillOrderUpdate,
    SkillReference,
    SkillReferences,
    SkillUsageStats,
    SkillReferencesResponse,
    DeleteCheck,
    VisibilityResult,
    LinkResult,
    BulkLinkRequest,
    BulkLinkItem,
    SyncRequest,
    SyncResponse,
    EntitySyncCount,
    SyncAllResult,
    CleanupResult,
    CleanupNamesResult,
    EntitySkillsUpdate,
    EntitySkillsResponse,
    SkillDeleteResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "IDSchema",
    "TimestampSchema",
    "MessageResponse",
    "ErrorResponse",
    # Skill
    "SkillSource",
    "SkillCreate",
    "SkillUpdate",
    "SkillResponse",
    "SkillOrderItem",
    "SkillOrderUpdate",
    # References & maintenance
    "SkillReference",
    "SkillReferences",
    "SkillUsageStats",
    "SkillReferencesResponse",
    "DeleteCheck",
    "VisibilityResult",
    "LinkResult",
    "BulkLinkRequest",
    "BulkLinkItem",
    "SyncRequest",
    "SyncResponse",
    "EntitySyncCount",
    "SyncAllResult",
    "CleanupResult",
    "CleanupNamesResult",
    "EntitySkillsUpdate",
    "EntitySkillsResponse",
    "SkillDeleteResponse",
]
