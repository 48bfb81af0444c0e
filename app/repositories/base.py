"""
Generic async data access shared by the skill and content repositories.

Repositories only flush. Committing is left to the service method that
owns the unit of work, so a failed sync or cascade rolls back as a whole.
"""
from typing import Any, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import BaseModel

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    CRUD for one model.

    Usage:
        class ProjectRepository(BaseRepository[Project]):
            def __init__(self):
                super().__init__(Project)
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get_by_id(self, db: AsyncSession, id: UUID) -> Optional[ModelType]:
        return await db.get(self.model, id)

    async def list_all(self, db: AsyncSession) -> List[ModelType]:
        """Every row, oldest first. Portfolio collections are small enough to load whole."""
        result = await db.execute(
            select(self.model).order_by(self.model.created_at, self.model.id)
        )
        return list(result.scalars().all())

    async def count(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(self.model))
        return result.scalar() or 0

    async def create(self, db: AsyncSession, **fields: Any) -> ModelType:
        instance = self.model(**fields)
        db.add(instance)
        await db.flush()
        await db.refresh(instance)
        return instance

    async def update(self, db: AsyncSession, instance: ModelType, **fields: Any) -> ModelType:
        """Set known attributes from `fields`; unknown keys are ignored."""
        for key, value in fields.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        await db.flush()
        await db.refresh(instance)
        return instance

    async def save(self, db: AsyncSession, instance: ModelType) -> ModelType:
        """Flush an instance whose JSON lists were reassigned and flag_modified."""
        db.add(instance)
        await db.flush()
        return instance

    async def delete(self, db: AsyncSession, instance: ModelType) -> None:
        await db.delete(instance)
        await db.flush()
