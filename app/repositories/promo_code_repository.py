"""
PromoCode repository.

Data access layer for PromoCode and PromoRedemption models.
"""

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.promo_code import PromoCode, PromoRedemption
from app.repositories.base import BaseRepository


class PromoCodeRepository(BaseRepository[PromoCode]):
    """PromoCode repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize promo code repository."""
        super().__init__(PromoCode, session)

    async def get_by_code(self, code: str) -> PromoCode | None:
        """Get promo code by its (upper-case) code string."""
        return await self.get_by(code=code.strip().upper())

    async def increment_redemptions(self, promo_code_id: int) -> None:
        """
        Add one redemption to the counter.

        Atomic in the datastore; never read-modify-write in Python.
        """
        stmt = (
            update(PromoCode)
            .where(PromoCode.id == promo_code_id)
            .values(redemptions_count=PromoCode.redemptions_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)


class PromoRedemptionRepository(BaseRepository[PromoRedemption]):
    """Append-only promo redemption log."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize promo redemption repository."""
        super().__init__(PromoRedemption, session)

    async def has_redeemed(
        self, promo_code_id: int, referred_party: str
    ) -> bool:
        """Check whether a party already used a promo code."""
        return await self.exists(
            promo_code_id=promo_code_id, referred_party=referred_party
        )
