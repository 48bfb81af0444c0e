"""Core module exports."""
from app.core.config import settings, get_settings
from app.core.database import Base, get_db, init_db, close_db, engine, async_session_maker
from app.core.security import (
    create_access_token,
    create_admin_token,
    decode_token,
    verify_token_type,
    is_admin_payload,
)
from app.core.exceptions import (
    APIException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    TokenExpiredException,
    InvalidTokenException,
    SkillNotFoundException,
    EntityNotFoundException,
    InvalidEntityTypeException,
    SkillExistsException,
    SkillInUseException,
    SkillAlreadyLinkedException,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    "engine",
    "async_session_maker",
    # Security
    "create_access_token",
    "create_admin_token",
    "decode_token",
    "verify_token_type",
    "is_admin_payload",
    # Exceptions
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "TokenExpiredException",
    "InvalidTokenException",
    "SkillNotFoundException",
    "EntityNotFoundException",
    "InvalidEntityTypeException",
    "SkillExistsException",
    "SkillInUseException",
    "SkillAlreadyLinkedException",
]
