"""
UserProfile and TrialGrant repositories.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.trial_grant import TrialGrant
from app.models.user_profile import UserProfile
from app.repositories.base import BaseRepository


class UserProfileRepository(BaseRepository[UserProfile]):
    """UserProfile repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user profile repository."""
        super().__init__(UserProfile, session)

    async def get_by_email(self, email: str) -> UserProfile | None:
        """Get profile by (lower-case) email."""
        return await self.get_by(email=email.strip().lower())


class TrialGrantRepository(BaseRepository[TrialGrant]):
    """TrialGrant repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize trial grant repository."""
        super().__init__(TrialGrant, session)

    async def exists_for_source(self, email: str, granted_by: str) -> bool:
        """Check whether a trial was ever granted to email from a source."""
        return await self.exists(user_email=email, granted_by=granted_by)

    async def get_latest_for_user(
        self, user_profile_id: int
    ) -> TrialGrant | None:
        """Get the most recent grant for a user, revoked or not."""
        stmt = (
            select(TrialGrant)
            .where(TrialGrant.user_profile_id == user_profile_id)
            .order_by(TrialGrant.granted_at.desc(), TrialGrant.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
