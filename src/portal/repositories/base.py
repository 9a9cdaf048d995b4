"""Base repository with common CRUD operations."""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select


class BaseRepository[ModelType: SQLModel]:
    """Base repository providing common database operations.

    Plain data access methods do not commit. The store-contract methods of
    subclasses commit each write, since callers treat them as a document store.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """Get a record by its primary key."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        )
        return result.scalar_one_or_none()

    def add(self, entity: ModelType) -> None:
        """Add entity to session (no flush/commit)."""
        self.session.add(entity)

    async def list_where(self, order_by: Any = None, **filters: Any) -> list[ModelType]:
        """List records whose columns equal the given filter values."""
        query = select(self.model)
        for field, value in filters.items():
            if value is None:
                continue
            if not hasattr(self.model, field):
                raise ValueError(f"Unknown filter field: {field}")
            query = query.where(getattr(self.model, field) == value)
        if order_by is not None:
            query = query.order_by(order_by)
        result = await self.session.execute(query)
        return list(result.scalars().all())
