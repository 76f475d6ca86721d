"""
License service.

Team license grants: creation together with their code pair, seat usage,
subscription status and seat expansion.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    CODE_GENERATION_MAX_ATTEMPTS,
    SEAT_EXPANSION_MULTIPLIER,
)
from app.models.enums import CodeKind, SubscriptionStatus
from app.models.license_grant import LicenseGrant
from app.models.redemption_code import RedemptionCode
from app.repositories.license_grant_repository import LicenseGrantRepository
from app.repositories.redemption_code_repository import (
    RedemptionCodeRepository,
)
from app.services.base_service import BaseService, log_operation, transaction
from app.services.redemption_service import RedemptionService
from app.utils.exceptions import (
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from app.utils.security import mask_email


@dataclass
class TeamLicense:
    """A provisioned team: grant plus its code pair."""

    grant: LicenseGrant
    coach_code: RedemptionCode
    member_code: RedemptionCode


@dataclass
class SeatUsage:
    """Seat consumption for one team license."""

    license_grant_id: int
    seat_total: int
    seats_consumed: int
    coach_redeemed: bool

    @property
    def seats_remaining(self) -> int:
        return max(self.seat_total - self.seats_consumed, 0)


class LicenseService(BaseService):
    """
    License service.

    Creation methods flush but do not commit; the purchase flow commits once
    everything for the event has been written.
    """

    def __init__(
        self,
        session: AsyncSession,
        max_attempts: int = CODE_GENERATION_MAX_ATTEMPTS,
        seat_expansion_multiplier: int = SEAT_EXPANSION_MULTIPLIER,
    ) -> None:
        """Initialize license service."""
        super().__init__(session)
        self.grant_repo = LicenseGrantRepository(session)
        self.code_repo = RedemptionCodeRepository(session)
        self.redemption_service = RedemptionService(session, max_attempts)
        self.seat_expansion_multiplier = seat_expansion_multiplier

    @log_operation
    async def create_team_license(
        self,
        *,
        admin_email: str,
        seat_count: int,
        team_name: str,
        discount_percentage: Decimal = Decimal("0"),
        price_per_seat: Decimal = Decimal("0"),
        organization_license_id: int | None = None,
        team_index: int = 0,
        stripe_subscription_id: str | None = None,
        stripe_customer_id: str | None = None,
        source_session_id: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> TeamLicense:
        """
        Create a team license grant and its code pair.

        Grant and codes are written in one savepoint.

        Raises:
            ValidationError: If seat_count < 1
            CodeGenerationError: If no unused code could be drawn
            PersistenceFailure: If the datastore rejects the writes
        """
        if seat_count < 1:
            raise ValidationError(
                "Seat count must be at least 1", seat_count=seat_count
            )

        try:
            async with self.session.begin_nested():
                grant = await self.grant_repo.create(
                    organization_license_id=organization_license_id,
                    team_name=team_name,
                    team_index=team_index,
                    admin_email=admin_email,
                    seat_total=seat_count,
                    purchased_seats=seat_count,
                    discount_percentage=discount_percentage,
                    price_per_seat=price_per_seat,
                    subscription_status=SubscriptionStatus.ACTIVE.value,
                    stripe_subscription_id=stripe_subscription_id,
                    stripe_customer_id=stripe_customer_id,
                    source_session_id=source_session_id,
                    extra=extra or {},
                )
                coach, member = await self.redemption_service.create_code_pair(
                    seat_count, license_grant_id=grant.id
                )
        except SQLAlchemyError as e:
            raise PersistenceFailure(
                "Could not create team license", team_name=team_name, error=e
            ) from e

        self.logger.info(
            f"Team license {grant.id} created for {mask_email(admin_email)}: "
            f"{team_name!r}, {seat_count} seats"
        )
        return TeamLicense(grant=grant, coach_code=coach, member_code=member)

    async def get_seat_usage(self, license_grant_id: int) -> SeatUsage:
        """
        Get seat consumption for a team.

        seats_consumed is the member code's uses_count.

        Raises:
            NotFoundError: If the grant does not exist
        """
        grant = await self.grant_repo.get_by_id(license_grant_id)
        if grant is None:
            raise NotFoundError("Team license not found", id=license_grant_id)

        member = await self.code_repo.get_for_grant(grant.id, CodeKind.MEMBER)
        coach = await self.code_repo.get_for_grant(grant.id, CodeKind.COACH)

        return SeatUsage(
            license_grant_id=grant.id,
            seat_total=grant.seat_total,
            seats_consumed=member.uses_count if member else 0,
            coach_redeemed=bool(coach and coach.uses_count > 0),
        )

    async def set_subscription_status(
        self, subscription_id: str, status: SubscriptionStatus
    ) -> int:
        """
        Mirror the provider subscription status onto its grants.

        Returns:
            Number of grants updated (0 for unknown subscriptions)
        """
        updated = await self.grant_repo.set_status_by_subscription(
            subscription_id, status
        )
        if updated:
            self.logger.info(
                f"Subscription {subscription_id}: {updated} grant(s) -> {status}"
            )
        else:
            self.logger.warning(
                f"Subscription {subscription_id} has no license grants"
            )
        return updated

    @transaction
    async def add_seats(
        self, license_grant_id: int, additional_seats: int
    ) -> LicenseGrant:
        """
        Grow a team license.

        The member code capacity grows with the team. A team may reach at
        most seat_expansion_multiplier times its purchased size.

        Raises:
            ValidationError: If additional_seats < 1 or the cap is exceeded
            NotFoundError: If the grant or its member code does not exist
        """
        if additional_seats < 1:
            raise ValidationError(
                "Additional seats must be at least 1",
                additional_seats=additional_seats,
            )

        # The cap check and both writes run under the grant row lock
        grant = await self.grant_repo.get_by_id(license_grant_id, for_update=True)
        if grant is None:
            raise NotFoundError("Team license not found", id=license_grant_id)

        new_total = grant.seat_total + additional_seats
        max_total = grant.purchased_seats * self.seat_expansion_multiplier
        if new_total > max_total:
            raise ValidationError(
                f"Team can have at most {max_total} seats",
                current=grant.seat_total,
                requested=additional_seats,
                max_total=max_total,
            )

        member = await self.code_repo.get_for_grant(grant.id, CodeKind.MEMBER)
        if member is None:
            raise NotFoundError("Team code not found", license_grant_id=grant.id)

        await self.code_repo.raise_max_uses(member.id, new_total)
        grant = await self.grant_repo.update(grant.id, seat_total=new_total)

        self.logger.info(
            f"Team license {grant.id}: seats {new_total - additional_seats} "
            f"-> {new_total}"
        )
        return grant
