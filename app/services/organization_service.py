"""
Organization service.

Multi-team purchases: one parent OrganizationLicense fanned out into one
team license (grant plus code pair) per team.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import CODE_GENERATION_MAX_ATTEMPTS
from app.models.organization_license import OrganizationLicense
from app.repositories.organization_repository import OrganizationRepository
from app.services.base_service import BaseService
from app.services.license_service import LicenseService
from app.utils.exceptions import LedgerError, ValidationError
from app.utils.security import mask_email


def allocate_seats(
    total_seats: int,
    number_of_teams: int,
    seats_per_team: Sequence[int] | None = None,
) -> list[int]:
    """
    Split an organization's seats across its teams.

    An explicit allocation is used verbatim when it has one entry per
    team and does not exceed the purchase. Otherwise seats are split
    equally and the remainder is handed out one seat at a time from the
    first team, so allocations always sum to total_seats.

    Args:
        total_seats: Seats purchased by the organization
        number_of_teams: Teams to provision
        seats_per_team: Optional explicit allocation

    Returns:
        Seats per team, in team order

    Raises:
        ValidationError: If any team would get fewer than one seat

    Example:
        >>> allocate_seats(50, 4)
        [13, 13, 12, 12]
    """
    if number_of_teams < 1:
        raise ValidationError(
            "Number of teams must be at least 1", number_of_teams=number_of_teams
        )

    if seats_per_team is not None and len(seats_per_team) == number_of_teams:
        allocation = [int(seats) for seats in seats_per_team]
        if sum(allocation) > total_seats:
            raise ValidationError(
                "Team allocation exceeds purchased seats",
                total_seats=total_seats,
                allocation=allocation,
            )
    else:
        if total_seats < number_of_teams:
            raise ValidationError(
                "Not enough seats for one per team",
                total_seats=total_seats,
                number_of_teams=number_of_teams,
            )
        base, remainder = divmod(total_seats, number_of_teams)
        allocation = [
            base + (1 if index < remainder else 0)
            for index in range(number_of_teams)
        ]

    if any(seats < 1 for seats in allocation):
        raise ValidationError(
            "Every team needs at least one seat", allocation=allocation
        )

    return allocation


@dataclass
class TeamProvisionResult:
    """Outcome for one team of an organization."""

    team_index: int
    team_name: str
    seats: int
    succeeded: bool
    license_grant_id: int | None = None
    coach_code: str | None = None
    member_code: str | None = None
    error: str | None = None


@dataclass
class OrganizationProvisionResult:
    """Outcome of an organization fan-out."""

    organization: OrganizationLicense
    teams: list[TeamProvisionResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[TeamProvisionResult]:
        return [team for team in self.teams if team.succeeded]

    @property
    def failed(self) -> list[TeamProvisionResult]:
        return [team for team in self.teams if not team.succeeded]


class OrganizationService(BaseService):
    """Organization license fan-out."""

    def __init__(
        self,
        session: AsyncSession,
        max_attempts: int = CODE_GENERATION_MAX_ATTEMPTS,
    ) -> None:
        """Initialize organization service."""
        super().__init__(session)
        self.org_repo = OrganizationRepository(session)
        self.license_service = LicenseService(session, max_attempts)

    async def provision_organization(
        self,
        *,
        org_name: str,
        admin_email: str,
        total_seats: int,
        number_of_teams: int,
        seats_per_team: Sequence[int] | None = None,
        discount_percentage: Decimal = Decimal("0"),
        price_per_seat: Decimal = Decimal("0"),
        stripe_subscription_id: str | None = None,
        stripe_customer_id: str | None = None,
        source_session_id: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> OrganizationProvisionResult:
        """
        Create the parent license and one team license per team.

        Each team is written in its own savepoint. A failed team is logged
        and recorded in the result; teams already created are kept and the
        remaining teams are still attempted. The caller commits.

        Raises:
            ValidationError: If the seat allocation is invalid
        """
        allocation = allocate_seats(total_seats, number_of_teams, seats_per_team)

        organization = await self.org_repo.create(
            name=org_name,
            admin_email=admin_email,
            total_seats=total_seats,
            number_of_teams=number_of_teams,
            stripe_subscription_id=stripe_subscription_id,
            source_session_id=source_session_id,
        )
        result = OrganizationProvisionResult(organization=organization)

        for index, seats in enumerate(allocation):
            team_name = f"{org_name} - Team {index + 1}"
            try:
                async with self.session.begin_nested():
                    team = await self.license_service.create_team_license(
                        admin_email=admin_email,
                        seat_count=seats,
                        team_name=team_name,
                        discount_percentage=discount_percentage,
                        price_per_seat=price_per_seat,
                        organization_license_id=organization.id,
                        team_index=index,
                        stripe_subscription_id=stripe_subscription_id,
                        stripe_customer_id=stripe_customer_id,
                        source_session_id=source_session_id,
                        extra=extra,
                    )
            except (LedgerError, SQLAlchemyError) as e:
                self.logger.error(
                    f"Organization {organization.id}: team {index + 1}/"
                    f"{number_of_teams} ({seats} seats) failed: {e}"
                )
                result.teams.append(
                    TeamProvisionResult(
                        team_index=index,
                        team_name=team_name,
                        seats=seats,
                        succeeded=False,
                        error=str(e),
                    )
                )
                continue

            result.teams.append(
                TeamProvisionResult(
                    team_index=index,
                    team_name=team_name,
                    seats=seats,
                    succeeded=True,
                    license_grant_id=team.grant.id,
                    coach_code=team.coach_code.code,
                    member_code=team.member_code.code,
                )
            )

        self.logger.info(
            f"Organization {organization.id} ({org_name!r}) for "
            f"{mask_email(admin_email)}: {len(result.succeeded)}/"
            f"{number_of_teams} teams provisioned"
        )
        return result
