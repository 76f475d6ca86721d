"""
Trial service.

Admin-granted Pro trials for existing app users.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    TRIAL_DAYS,
    TRIAL_GRACE_DAYS,
    TRIAL_SOURCES,
)
from app.models.enums import UserTier
from app.models.trial_grant import TrialGrant
from app.models.user_profile import UserProfile
from app.repositories.user_profile_repository import (
    TrialGrantRepository,
    UserProfileRepository,
)
from app.services.base_service import BaseService, transaction
from app.utils.datetime_utils import as_utc, utc_now
from app.utils.exceptions import NotFoundError, ValidationError
from app.utils.security import mask_email


@dataclass
class TrialStatus:
    """Trial state of one user."""

    email: str
    tier: str
    is_trial_active: bool
    in_grace_period: bool
    expires_at: datetime | None
    grace_period_ends_at: datetime | None
    granted_by: str | None

    @property
    def days_remaining(self) -> int:
        if not self.is_trial_active or self.expires_at is None:
            return 0
        return max((self.expires_at - utc_now()).days, 0)


class TrialService(BaseService):
    """Trial grant, extension and revocation."""

    def __init__(
        self,
        session: AsyncSession,
        trial_days: int = TRIAL_DAYS,
        grace_days: int = TRIAL_GRACE_DAYS,
    ) -> None:
        """Initialize trial service."""
        super().__init__(session)
        self.profile_repo = UserProfileRepository(session)
        self.trial_repo = TrialGrantRepository(session)
        self.trial_days = trial_days
        self.grace_days = grace_days

    async def _get_profile(self, email: str) -> UserProfile:
        if not email or not email.strip():
            raise ValidationError("Email is required")
        profile = await self.profile_repo.get_by_email(email)
        if profile is None:
            raise NotFoundError("User not found", email=mask_email(email))
        return profile

    async def _get_current_grant(self, profile: UserProfile) -> TrialGrant:
        grant = await self.trial_repo.get_latest_for_user(profile.id)
        if grant is None or grant.revoked_at is not None:
            raise NotFoundError(
                "No trial to change", email=mask_email(profile.email)
            )
        return grant

    @transaction
    async def grant_trial(
        self,
        email: str,
        granted_by: str = "admin",
        source_record_id: str | None = None,
    ) -> TrialGrant:
        """
        Grant a Pro trial.

        Refused when the user already has an active trial, pays for Pro, or
        already got a trial from the same source.

        Raises:
            NotFoundError: If no user has this email
            ValidationError: If the grant is refused
        """
        if granted_by not in TRIAL_SOURCES:
            raise ValidationError(
                f"Unknown trial source {granted_by!r}", granted_by=granted_by
            )

        profile = await self._get_profile(email)
        now = utc_now()
        promo_expiry = as_utc(profile.promo_tier_expires_at)

        if profile.tier == UserTier.PRO and promo_expiry is None:
            raise ValidationError("User already has a paid Pro subscription")

        if promo_expiry is not None and promo_expiry > now:
            raise ValidationError(
                "User already has an active trial",
                expires_at=promo_expiry.isoformat(),
            )

        if await self.trial_repo.exists_for_source(profile.email, granted_by):
            raise ValidationError(
                f"Trial already granted from {granted_by}", granted_by=granted_by
            )

        expires_at = now + timedelta(days=self.trial_days)
        grant = await self.trial_repo.create(
            user_profile_id=profile.id,
            user_email=profile.email,
            granted_by=granted_by,
            source_record_id=source_record_id,
            granted_at=now,
            expires_at=expires_at,
            grace_period_ends_at=expires_at + timedelta(days=self.grace_days),
        )
        await self.profile_repo.update(
            profile.id,
            tier=UserTier.PRO.value,
            promo_tier_expires_at=expires_at,
        )

        self.logger.info(
            f"Trial granted to {mask_email(profile.email)} by {granted_by} "
            f"until {expires_at.date()}"
        )
        return grant

    @transaction
    async def extend_trial(self, email: str, days: int) -> TrialGrant:
        """
        Extend the current trial by a number of days.

        An expired trial is extended from today.

        Raises:
            ValidationError: If days < 1
            NotFoundError: If the user has no current trial
        """
        if days < 1:
            raise ValidationError("Extension must be at least 1 day", days=days)

        profile = await self._get_profile(email)
        grant = await self._get_current_grant(profile)

        base = max(as_utc(grant.expires_at), utc_now())
        expires_at = base + timedelta(days=days)

        grant = await self.trial_repo.update(
            grant.id,
            expires_at=expires_at,
            grace_period_ends_at=expires_at + timedelta(days=self.grace_days),
        )
        await self.profile_repo.update(
            profile.id,
            tier=UserTier.PRO.value,
            promo_tier_expires_at=expires_at,
        )

        self.logger.info(
            f"Trial for {mask_email(profile.email)} extended by {days} days "
            f"to {expires_at.date()}"
        )
        return grant

    @transaction
    async def revoke_trial(self, email: str) -> TrialGrant:
        """
        End a trial now and return the user to the core tier.

        Raises:
            NotFoundError: If the user has no current trial
        """
        profile = await self._get_profile(email)
        grant = await self._get_current_grant(profile)

        grant = await self.trial_repo.update(grant.id, revoked_at=utc_now())
        await self.profile_repo.update(
            profile.id,
            tier=UserTier.CORE.value,
            promo_tier_expires_at=None,
        )

        self.logger.warning(f"Trial for {mask_email(profile.email)} revoked")
        return grant

    async def get_trial_status(self, email: str) -> TrialStatus:
        """
        Describe a user's trial state.

        Raises:
            NotFoundError: If no user has this email
        """
        profile = await self._get_profile(email)
        grant = await self.trial_repo.get_latest_for_user(profile.id)
        now = utc_now()

        if grant is None or grant.revoked_at is not None:
            return TrialStatus(
                email=profile.email,
                tier=profile.tier,
                is_trial_active=False,
                in_grace_period=False,
                expires_at=None,
                grace_period_ends_at=None,
                granted_by=grant.granted_by if grant else None,
            )

        expires_at = as_utc(grant.expires_at)
        grace_ends = as_utc(grant.grace_period_ends_at)
        return TrialStatus(
            email=profile.email,
            tier=profile.tier,
            is_trial_active=expires_at > now,
            in_grace_period=expires_at <= now < grace_ends,
            expires_at=expires_at,
            grace_period_ends_at=grace_ends,
            granted_by=grant.granted_by,
        )

    async def list_trials(self, limit: int = 200) -> list[TrialGrant]:
        """List trial grants, newest first."""
        return await self.trial_repo.find_all(limit=limit)
