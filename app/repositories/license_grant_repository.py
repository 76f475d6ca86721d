"""
LicenseGrant repository.

Data access layer for LicenseGrant model.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import SubscriptionStatus
from app.models.license_grant import LicenseGrant
from app.repositories.base import BaseRepository


class LicenseGrantRepository(BaseRepository[LicenseGrant]):
    """LicenseGrant repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize license grant repository."""
        super().__init__(LicenseGrant, session)

    async def get_by_session(self, session_id: str) -> LicenseGrant | None:
        """Get grant created by a checkout session."""
        return await self.get_by(source_session_id=session_id)

    async def find_by_subscription(
        self, subscription_id: str
    ) -> list[LicenseGrant]:
        """
        Get all grants paid for by a provider subscription.

        Organizations share one subscription across their teams.
        """
        stmt = (
            select(LicenseGrant)
            .where(LicenseGrant.stripe_subscription_id == subscription_id)
            .order_by(LicenseGrant.team_index)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def set_status_by_subscription(
        self, subscription_id: str, status: SubscriptionStatus
    ) -> int:
        """
        Update subscription status on every grant of a subscription.

        Returns:
            Number of grants updated
        """
        stmt = (
            update(LicenseGrant)
            .where(LicenseGrant.stripe_subscription_id == subscription_id)
            .values(subscription_status=status.value)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount
