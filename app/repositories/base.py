"""
Base repository.

Generic CRUD shared by the ledger repositories. Repositories flush so
generated ids are available, but never commit.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository for one ledger table.

    Example:
        class PromoCodeRepository(BaseRepository[PromoCode]):
            def __init__(self, session: AsyncSession):
                super().__init__(PromoCode, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        self.model = model
        self.session = session

    async def get_by_id(
        self, id: int, for_update: bool = False
    ) -> ModelType | None:
        """
        Get a row by primary key.

        With for_update the row is locked (SELECT ... FOR UPDATE) and
        reloaded, so checks made on it hold until the transaction ends.
        """
        if not for_update:
            return await self.session.get(self.model, id)

        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def get_by(self, **filters: Any) -> ModelType | None:
        """Get the first row matching column filters."""
        stmt = select(self.model).filter_by(**filters).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_all(
        self, limit: int | None = None, **filters: Any
    ) -> list[ModelType]:
        """
        List rows matching column filters, newest first.

        Args:
            limit: Max number of rows, all when None
            **filters: Column filters
        """
        stmt = (
            select(self.model)
            .filter_by(**filters)
            .order_by(self.model.id.desc())
        )
        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **data: Any) -> ModelType:
        """Insert a row and load server defaults back onto it."""
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(
        self, id: int, for_update: bool = False, **data: Any
    ) -> ModelType | None:
        """
        Set columns on one row.

        Args:
            id: Row id
            for_update: Lock the row before writing
            **data: Column values

        Returns:
            Updated row, or None if the id does not exist
        """
        entity = await self.get_by_id(id, for_update=for_update)

        if entity is None:
            return None

        for key, value in data.items():
            setattr(entity, key, value)

        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def count(self, **filters: Any) -> int:
        stmt = select(func.count()).select_from(self.model)
        if filters:
            stmt = stmt.filter_by(**filters)

        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists(self, **filters: Any) -> bool:
        return await self.count(**filters) > 0
