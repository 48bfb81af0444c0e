"""
Declarative building blocks shared by skills and portfolio content.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests).
# Columns of this type are mutated by reassigning the list and calling
# flag_modified; in-place appends are not tracked.
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """created_at / updated_at, both timezone-aware UTC."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class UUIDMixin:
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


class ActiveMixin:
    """
    Visibility flag.

    On a Skill it decides whether the public site shows it. On a project,
    certification or education entry it decides whether that entry counts
    toward keeping its skills visible.
    """

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)


class BaseModel(Base, UUIDMixin, TimestampMixin):
    """UUID primary key plus timestamps. Every table inherits from this."""

    __abstract__ = True
