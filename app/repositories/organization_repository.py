"""
OrganizationLicense repository.

Data access layer for OrganizationLicense model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.organization_license import OrganizationLicense
from app.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[OrganizationLicense]):
    """OrganizationLicense repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize organization repository."""
        super().__init__(OrganizationLicense, session)

    async def get_by_session(
        self, session_id: str
    ) -> OrganizationLicense | None:
        """Get organization created by a checkout session."""
        return await self.get_by(source_session_id=session_id)

    async def get_with_grants(
        self, organization_id: int
    ) -> OrganizationLicense | None:
        """Get organization with its team grants loaded."""
        stmt = (
            select(OrganizationLicense)
            .where(OrganizationLicense.id == organization_id)
            .options(selectinload(OrganizationLicense.grants))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
