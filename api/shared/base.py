"""Base repository shared by the feature repositories."""
from abc import ABC
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.shared.entities.base import BaseEntity

T = TypeVar("T", bound=BaseEntity)


class BaseRepository(ABC, Generic[T]):
    """Base repository with common CRUD operations.

    Repositories only flush; committing is the caller's unit of work.
    """

    model: Type[T]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entity: T) -> T:
        """Create new entity."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: str) -> Optional[T]:
        """Get entity by ID."""
        stmt = select(self.model).where(self.model.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_field(
        self, field_name: str, value: Any, limit: Optional[int] = None
    ) -> List[T]:
        """Get entities by field value."""
        field = getattr(self.model, field_name)
        stmt = select(self.model).where(field == value)

        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, entity: T, **values: Any) -> T:
        """Apply field values to an attached entity and flush."""
        for key, value in values.items():
            setattr(entity, key, value)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity_id: str) -> bool:
        """Delete entity by ID."""
        stmt = delete(self.model).where(self.model.id == entity_id)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def count(self, **filters: Any) -> int:
        """Count entities with filters."""
        stmt = select(func.count(self.model.id))

        for field_name, value in filters.items():
            if hasattr(self.model, field_name):
                field = getattr(self.model, field_name)
                if value is None:
                    stmt = stmt.where(field.is_(None))
                else:
                    stmt = stmt.where(field == value)

        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)
