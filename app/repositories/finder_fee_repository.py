"""
FinderFeeRecord repository.

Data access layer for FinderFeeRecord model.
"""

from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import FinderFeeStatus
from app.models.finder_fee import FinderFeeRecord
from app.repositories.base import BaseRepository


class FinderFeeRepository(BaseRepository[FinderFeeRecord]):
    """FinderFeeRecord repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize finder fee repository."""
        super().__init__(FinderFeeRecord, session)

    async def exists_for_party(
        self, finder_code: str, referred_party: str
    ) -> bool:
        """
        Check whether a partner already has a fee for a referred party.

        Args:
            finder_code: Upper-case finder code
            referred_party: Lower-case purchaser email

        Returns:
            True if any record exists
        """
        return await self.exists(
            finder_code=finder_code, referred_party=referred_party
        )

    async def exists_for_purchase(
        self, finder_code: str, purchase_session_id: str
    ) -> bool:
        """Check whether a checkout session or invoice already earned a fee."""
        return await self.exists(
            finder_code=finder_code, purchase_session_id=purchase_session_id
        )

    async def list_records(
        self,
        status: FinderFeeStatus | None = None,
        finder_code: str | None = None,
    ) -> list[FinderFeeRecord]:
        """List fee records, newest first, with optional filters."""
        filters: dict[str, str] = {}
        if status:
            filters["status"] = status.value
        if finder_code:
            filters["finder_code"] = finder_code
        return await self.find_all(**filters)

    async def get_earnings_by_code(
        self,
    ) -> dict[str, dict[str, int | Decimal]]:
        """
        Aggregate fee totals per finder code in a single query.

        Rejected fees are excluded from earnings.

        Returns:
            Dict mapping finder code to stats {
                "ABC123": {
                    "count": 3,
                    "total_earned": Decimal("240.00"),
                    "total_paid": Decimal("120.00"),
                }
            }
        """
        paid_only = case(
            (
                FinderFeeRecord.status == FinderFeeStatus.PAID.value,
                FinderFeeRecord.fee_amount,
            ),
            else_=Decimal("0"),
        )
        stmt = (
            select(
                FinderFeeRecord.finder_code,
                func.count(FinderFeeRecord.id).label("count"),
                func.coalesce(
                    func.sum(FinderFeeRecord.fee_amount), Decimal("0")
                ).label("total_earned"),
                func.coalesce(
                    func.sum(paid_only), Decimal("0")
                ).label("total_paid"),
            )
            .where(FinderFeeRecord.status != FinderFeeStatus.REJECTED.value)
            .group_by(FinderFeeRecord.finder_code)
        )

        result = await self.session.execute(stmt)

        return {
            row.finder_code: {
                "count": row.count,
                "total_earned": Decimal(str(row.total_earned)),
                "total_paid": Decimal(str(row.total_paid)),
            }
            for row in result.all()
        }
