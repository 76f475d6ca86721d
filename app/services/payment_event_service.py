"""
Payment event service.

Applies verified Stripe events to the ledger:
- checkout.session.completed: provision team or organization licenses,
  record promo and finder fee usage, then deliver codes by email
- invoice.payment_succeeded: reactivate and pay renewal finder fees
- invoice.payment_failed: mark licenses inactive
- customer.subscription.deleted: mark licenses cancelled

Everything an event writes is committed once, before any email is sent.
"""

import json
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import CODE_GENERATION_MAX_ATTEMPTS
from app.models.enums import BillingType, SubscriptionStatus
from app.models.finder_fee import FinderFeeRecord
from app.repositories.license_grant_repository import LicenseGrantRepository
from app.repositories.organization_repository import OrganizationRepository
from app.services.base_service import BaseService
from app.services.finder_fee_service import FinderFeeService
from app.services.license_service import LicenseService
from app.services.notification import (
    EmailClient,
    PartnerTracker,
    TeamCodes,
    finder_fee_admin_email,
    organization_codes_email,
    team_codes_email,
)
from app.services.organization_service import OrganizationService
from app.services.promo_code_service import PromoCodeService
from app.utils.exceptions import ValidationError
from app.utils.security import mask_email
from pricing import CommissionCalculator


class CheckoutMetadata(BaseModel):
    """
    Metadata attached to a team licensing checkout session.

    Stripe metadata values are always strings; validators coerce them.
    """

    model_config = ConfigDict(extra="ignore")

    seat_count: int = Field(..., ge=1, description="Seats purchased")
    team_name: str | None = Field(default=None, description="Single team name")
    billing_type: BillingType = Field(default=BillingType.UPFRONT)
    is_multi_team: bool = Field(default=False)
    number_of_teams: int | None = Field(default=None, ge=1)
    seats_per_team: list[int] | None = Field(default=None)
    organization_name: str | None = Field(default=None)
    finder_code: str | None = Field(default=None)
    promo_code: str | None = Field(default=None)
    tolt_referral: str | None = Field(default=None)
    discount_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    price_per_seat: Decimal | None = Field(default=None, ge=0)
    email: str | None = Field(default=None)

    @field_validator(
        "team_name",
        "organization_name",
        "finder_code",
        "promo_code",
        "tolt_referral",
        "email",
        "number_of_teams",
        "discount_percentage",
        "price_per_seat",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        """Empty metadata values mean absent."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("is_multi_team", mode="before")
    @classmethod
    def parse_flag(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return value

    @field_validator("seats_per_team", mode="before")
    @classmethod
    def parse_seats_per_team(cls, value: Any) -> Any:
        """Accept a JSON list or a comma separated string."""
        if value is None or isinstance(value, list):
            return value
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            if value.startswith("["):
                return json.loads(value)
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @property
    def is_organization(self) -> bool:
        return self.is_multi_team and (self.number_of_teams or 1) > 1


def cents_to_dollars(cents: Any) -> Decimal:
    """Convert a Stripe amount in cents."""
    return (Decimal(int(cents or 0)) / 100).quantize(Decimal("0.01"))


def invoice_subscription_id(invoice: dict[str, Any]) -> str | None:
    """Subscription id of an invoice, for both old and new API shapes."""
    if invoice.get("subscription"):
        return invoice["subscription"]
    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    return details.get("subscription")


class PaymentEventService(BaseService):
    """Stripe event handling."""

    HANDLED_EVENTS = (
        "checkout.session.completed",
        "invoice.payment_succeeded",
        "invoice.payment_failed",
        "customer.subscription.deleted",
    )

    def __init__(
        self,
        session: AsyncSession,
        email_client: EmailClient,
        partner_tracker: PartnerTracker | None = None,
        *,
        site_url: str = "",
        admin_email: str | None = None,
        max_attempts: int = CODE_GENERATION_MAX_ATTEMPTS,
        calculator: CommissionCalculator | None = None,
        finder_fee_action_secret: str = "",
    ) -> None:
        """
        Initialize payment event service.

        Args:
            session: Database session
            email_client: Transactional email client
            partner_tracker: Optional partner conversion tracker
            site_url: Public site URL for email links
            admin_email: Recipient of finder fee notices
            max_attempts: Collision retries when generating codes
            calculator: Commission and pricing calculator
            finder_fee_action_secret: Signs action links in finder fee notices
        """
        super().__init__(session)
        self.email_client = email_client
        self.partner_tracker = partner_tracker
        self.site_url = site_url
        self.admin_email = admin_email
        self.calculator = calculator or CommissionCalculator()

        self.grant_repo = LicenseGrantRepository(session)
        self.org_repo = OrganizationRepository(session)
        self.license_service = LicenseService(session, max_attempts)
        self.organization_service = OrganizationService(session, max_attempts)
        self.finder_fee_service = FinderFeeService(
            session, self.calculator, site_url, finder_fee_action_secret
        )
        self.promo_service = PromoCodeService(session, max_attempts)

    async def handle_event(self, event: dict[str, Any]) -> dict[str, Any]:
        """
        Dispatch a verified event.

        Returns:
            Summary of what was done, for the webhook response

        Raises:
            ValidationError: If required event data is missing
        """
        event_type = event.get("type", "")
        data = (event.get("data") or {}).get("object") or {}

        if event_type == "checkout.session.completed":
            return await self.handle_checkout_completed(data)
        if event_type == "invoice.payment_succeeded":
            return await self.handle_invoice_paid(data)
        if event_type == "invoice.payment_failed":
            return await self._set_status(
                invoice_subscription_id(data), SubscriptionStatus.INACTIVE
            )
        if event_type == "customer.subscription.deleted":
            return await self._set_status(
                data.get("id"), SubscriptionStatus.CANCELLED
            )

        self.logger.info(f"Ignoring Stripe event {event_type!r}")
        return {"status": "ignored", "event_type": event_type}

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def _parse_metadata(self, checkout: dict[str, Any]) -> CheckoutMetadata:
        try:
            return CheckoutMetadata.model_validate(checkout.get("metadata") or {})
        except (PydanticValidationError, json.JSONDecodeError) as e:
            raise ValidationError(
                "Checkout metadata is missing or invalid",
                session_id=checkout.get("id"),
                error=e,
            ) from e

    @staticmethod
    def _customer_email(checkout: dict[str, Any], metadata: CheckoutMetadata) -> str:
        details = checkout.get("customer_details") or {}
        email = (
            details.get("email")
            or checkout.get("customer_email")
            or metadata.email
        )
        if not email:
            raise ValidationError(
                "Checkout has no customer email", session_id=checkout.get("id")
            )
        return email.strip().lower()

    async def handle_checkout_completed(
        self, checkout: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Provision licenses for a completed checkout.

        Replays of the same session are acknowledged without side effects.
        """
        session_id = checkout.get("id")
        if not session_id:
            raise ValidationError("Checkout session has no id")

        if await self.grant_repo.get_by_session(
            session_id
        ) or await self.org_repo.get_by_session(session_id):
            self.logger.info(f"Checkout {session_id} already processed")
            return {"status": "duplicate", "session_id": session_id}

        metadata = self._parse_metadata(checkout)
        email = self._customer_email(checkout, metadata)
        amount = cents_to_dollars(checkout.get("amount_total"))

        discount = metadata.discount_percentage
        if discount is None:
            discount = self.calculator.seat_discount_percent(metadata.seat_count)
        price_per_seat = metadata.price_per_seat
        if price_per_seat is None:
            price_per_seat = self.calculator.price_per_seat(
                metadata.seat_count, metadata.billing_type
            )

        extra = {
            "billing_type": metadata.billing_type.value,
            "finder_code": metadata.finder_code.upper() if metadata.finder_code else None,
            "promo_code": metadata.promo_code.upper() if metadata.promo_code else None,
            "tolt_referral": metadata.tolt_referral,
            "amount_total": str(amount),
        }
        common = {
            "admin_email": email,
            "discount_percentage": discount,
            "price_per_seat": price_per_seat,
            "stripe_subscription_id": checkout.get("subscription"),
            "stripe_customer_id": checkout.get("customer"),
            "source_session_id": session_id,
            "extra": extra,
        }

        summary: dict[str, Any] = {"status": "processed", "session_id": session_id}
        teams: list[TeamCodes] = []
        failed_teams: list[str] = []

        if metadata.is_organization:
            org_name = metadata.organization_name or metadata.team_name or "Organization"
            result = await self.organization_service.provision_organization(
                org_name=org_name,
                total_seats=metadata.seat_count,
                number_of_teams=metadata.number_of_teams,
                seats_per_team=metadata.seats_per_team,
                **common,
            )
            teams = [
                TeamCodes(team.team_name, team.seats, team.coach_code, team.member_code)
                for team in result.succeeded
            ]
            failed_teams = [team.team_name for team in result.failed]
            summary["organization_id"] = result.organization.id
            summary["teams"] = [
                {
                    "team_name": team.team_name,
                    "seats": team.seats,
                    "succeeded": team.succeeded,
                    "error": team.error,
                }
                for team in result.teams
            ]
        else:
            team_name = metadata.team_name or "My Team"
            team = await self.license_service.create_team_license(
                seat_count=metadata.seat_count,
                team_name=team_name,
                **common,
            )
            teams = [
                TeamCodes(
                    team_name,
                    metadata.seat_count,
                    team.coach_code.code,
                    team.member_code.code,
                )
            ]
            summary["license_grant_id"] = team.grant.id

        if metadata.promo_code:
            await self.promo_service.record_redemption(
                code=metadata.promo_code,
                referred_party=email,
                purchase_session_id=session_id,
            )

        fee: FinderFeeRecord | None = None
        if metadata.finder_code and amount > 0:
            fee = await self.finder_fee_service.record_finder_fee(
                finder_code=metadata.finder_code,
                referred_party=email,
                purchase_amount=amount,
                purchase_session_id=session_id,
                stripe_subscription_id=checkout.get("subscription"),
            )
            summary["finder_fee_id"] = fee.id if fee else None

        await self.commit()
        self.logger.info(
            f"Checkout {session_id} for {mask_email(email)} committed: "
            f"{len(teams)} team(s), {len(failed_teams)} failed"
        )

        await self._send_codes(
            email, metadata, teams, failed_teams
        )
        if fee is not None:
            await self._notify_finder_fee(fee)
        await self._track_conversion(
            email, amount, session_id, metadata.tolt_referral or metadata.finder_code
        )

        return summary

    async def _send_codes(
        self,
        email: str,
        metadata: CheckoutMetadata,
        teams: list[TeamCodes],
        failed_teams: list[str],
    ) -> None:
        if not teams:
            self.logger.error(
                f"No teams provisioned for {mask_email(email)}, codes email skipped"
            )
            return

        if metadata.is_organization:
            subject, html, text = organization_codes_email(
                metadata.organization_name or teams[0].team_name,
                teams,
                failed_teams,
                self.site_url,
            )
        else:
            subject, html, text = team_codes_email(teams[0], self.site_url)

        await self.email_client.send_safely(email, subject, html, text)

    async def _notify_finder_fee(self, fee: FinderFeeRecord) -> None:
        if not self.admin_email:
            return
        partner = await self.finder_fee_service.get_partner(fee.finder_code)
        subject, html, text = finder_fee_admin_email(
            finder_code=fee.finder_code,
            partner_name=partner.partner_name if partner else fee.finder_code,
            referred_party=fee.referred_party,
            purchase_amount=fee.purchase_amount,
            fee_percentage=fee.fee_percentage,
            fee_amount=fee.fee_amount,
            is_first_purchase=fee.is_first_purchase,
            site_url=self.site_url,
            action_links=self.finder_fee_service.action_links(
                fee.id, ("approve", "reject")
            ),
        )
        await self.email_client.send_safely(self.admin_email, subject, html, text)

    async def _track_conversion(
        self,
        email: str,
        amount: Decimal,
        source_id: str,
        partner_ref: str | None,
        is_renewal: bool = False,
    ) -> None:
        if self.partner_tracker is None or not partner_ref or amount <= 0:
            return
        await self.partner_tracker.track_conversion(
            customer_email=email,
            amount=amount,
            source_id=source_id,
            partner_ref=partner_ref,
            is_renewal=is_renewal,
        )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    async def handle_invoice_paid(self, invoice: dict[str, Any]) -> dict[str, Any]:
        """
        Reactivate licenses and pay renewal finder fees.

        The first invoice of a subscription belongs to the checkout and earns
        no renewal fee.
        """
        subscription_id = invoice_subscription_id(invoice)
        if not subscription_id:
            self.logger.info(f"Invoice {invoice.get('id')} has no subscription")
            return {"status": "ignored", "invoice_id": invoice.get("id")}

        await self.license_service.set_subscription_status(
            subscription_id, SubscriptionStatus.ACTIVE
        )

        summary: dict[str, Any] = {
            "status": "processed",
            "subscription_id": subscription_id,
        }
        is_renewal = invoice.get("billing_reason") == "subscription_cycle"
        amount = cents_to_dollars(invoice.get("amount_paid"))

        grants = await self.grant_repo.find_by_subscription(subscription_id)
        primary = grants[0] if grants else None
        finder_code = (primary.extra or {}).get("finder_code") if primary else None

        fee: FinderFeeRecord | None = None
        if is_renewal and finder_code and amount > 0:
            fee = await self.finder_fee_service.record_finder_fee(
                finder_code=finder_code,
                referred_party=primary.admin_email,
                purchase_amount=amount,
                purchase_session_id=invoice.get("id"),
                stripe_subscription_id=subscription_id,
                is_renewal=True,
            )
            summary["finder_fee_id"] = fee.id if fee else None

        await self.commit()

        if fee is not None:
            await self._notify_finder_fee(fee)
        if is_renewal and primary is not None:
            await self._track_conversion(
                primary.admin_email,
                amount,
                invoice.get("id") or subscription_id,
                (primary.extra or {}).get("tolt_referral") or finder_code,
                is_renewal=True,
            )

        return summary

    async def _set_status(
        self, subscription_id: str | None, status: SubscriptionStatus
    ) -> dict[str, Any]:
        if not subscription_id:
            raise ValidationError("Event has no subscription id")

        updated = await self.license_service.set_subscription_status(
            subscription_id, status
        )
        await self.commit()
        return {
            "status": "processed",
            "subscription_id": subscription_id,
            "subscription_status": status.value,
            "grants_updated": updated,
        }
