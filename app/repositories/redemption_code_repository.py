"""
RedemptionCode repository.

Data access layer for RedemptionCode model.
"""

from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import CodeKind
from app.models.redemption_code import RedemptionCode
from app.repositories.base import BaseRepository


class RedemptionCodeRepository(BaseRepository[RedemptionCode]):
    """RedemptionCode repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize redemption code repository."""
        super().__init__(RedemptionCode, session)

    async def get_by_code(self, code: str) -> RedemptionCode | None:
        """
        Get code row, bypassing any stale copy in the identity map.

        Args:
            code: Redemption code string

        Returns:
            RedemptionCode or None
        """
        stmt = (
            select(RedemptionCode)
            .where(RedemptionCode.code == code)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def code_exists(self, code: str) -> bool:
        """Check whether a code string is already taken."""
        return await self.exists(code=code)

    async def try_consume(self, code: str) -> bool:
        """
        Consume one use of an active code that still has capacity.

        Single conditional UPDATE; the WHERE clause is the capacity check, so
        two concurrent callers can never both take the last use.

        Args:
            code: Redemption code string

        Returns:
            True if a use was consumed
        """
        stmt = (
            update(RedemptionCode)
            .where(
                RedemptionCode.code == code,
                RedemptionCode.is_active.is_(True),
                RedemptionCode.uses_count < RedemptionCode.max_uses,
            )
            .values(uses_count=RedemptionCode.uses_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def link(
        self, first: RedemptionCode, second: RedemptionCode
    ) -> None:
        """Point two codes at each other."""
        first.linked_code_id = second.id
        second.linked_code_id = first.id
        await self.session.flush()

    async def deactivate(self, code: str) -> bool:
        """
        Deactivate a code without deleting it.

        Returns:
            True if an active code was deactivated
        """
        stmt = (
            update(RedemptionCode)
            .where(
                RedemptionCode.code == code,
                RedemptionCode.is_active.is_(True),
            )
            .values(is_active=False, deactivated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def get_for_grant(
        self, license_grant_id: int, kind: CodeKind
    ) -> RedemptionCode | None:
        """Get the coach or member code of a team license."""
        stmt = (
            select(RedemptionCode)
            .where(
                RedemptionCode.license_grant_id == license_grant_id,
                RedemptionCode.kind == kind.value,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def raise_max_uses(self, code_id: int, max_uses: int) -> None:
        """Set a new capacity on a code; never below uses already consumed."""
        stmt = (
            update(RedemptionCode)
            .where(
                RedemptionCode.id == code_id,
                RedemptionCode.uses_count <= max_uses,
            )
            .values(max_uses=max_uses)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
