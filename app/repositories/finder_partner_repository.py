"""
FinderPartner repository.

Data access layer for FinderPartner model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.finder_partner import FinderPartner
from app.repositories.base import BaseRepository


class FinderPartnerRepository(BaseRepository[FinderPartner]):
    """FinderPartner repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize finder partner repository."""
        super().__init__(FinderPartner, session)

    async def get_by_code(self, finder_code: str) -> FinderPartner | None:
        """
        Get partner by finder code.

        Codes are stored upper-case; lookups are normalized the same way.
        """
        return await self.get_by(finder_code=finder_code.strip().upper())

    async def list_partners(self) -> list[FinderPartner]:
        """List all partners, most recently created first."""
        stmt = select(FinderPartner).order_by(
            FinderPartner.created_at.desc(), FinderPartner.id.desc()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
