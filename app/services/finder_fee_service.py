"""
Finder fee service.

Finder partners, the fees they earn on referred purchases, and the
approval/payout workflow for those fees.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import FinderFeeStatus
from app.models.finder_fee import FinderFeeRecord
from app.models.finder_partner import FinderPartner
from app.repositories.finder_fee_repository import FinderFeeRepository
from app.repositories.finder_partner_repository import FinderPartnerRepository
from app.services.base_service import BaseService, transaction
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import NotFoundError, ValidationError
from app.utils.security import fee_action_token, mask_email
from app.validators import normalize_email, validate_finder_code
from pricing import CommissionCalculator
from pricing.constants import (
    FINDER_FEE_FIRST_PURCHASE_PERCENT,
    FINDER_FEE_RENEWAL_PERCENT,
)


# Allowed status changes. Rejected is terminal; paid can only be reverted
# to approved.
FINDER_FEE_TRANSITIONS: dict[FinderFeeStatus, frozenset[FinderFeeStatus]] = {
    FinderFeeStatus.PENDING: frozenset(
        {FinderFeeStatus.APPROVED, FinderFeeStatus.PAID, FinderFeeStatus.REJECTED}
    ),
    FinderFeeStatus.APPROVED: frozenset(
        {FinderFeeStatus.PAID, FinderFeeStatus.PENDING}
    ),
    FinderFeeStatus.PAID: frozenset({FinderFeeStatus.APPROVED}),
    FinderFeeStatus.REJECTED: frozenset(),
}

# One-click actions in admin emails
FEE_ACTIONS: dict[str, FinderFeeStatus] = {
    "approve": FinderFeeStatus.APPROVED,
    "reject": FinderFeeStatus.REJECTED,
    "paid": FinderFeeStatus.PAID,
}


def can_transition(current: FinderFeeStatus, new: FinderFeeStatus) -> bool:
    """Check whether a fee may move from current to new status."""
    return new in FINDER_FEE_TRANSITIONS.get(current, frozenset())


@dataclass
class PartnerSummary:
    """Partner with earnings, as shown on the admin dashboard."""

    partner: FinderPartner
    referral_count: int
    total_earned: Decimal
    total_paid: Decimal
    finder_link: str

    @property
    def total_outstanding(self) -> Decimal:
        return self.total_earned - self.total_paid


class FinderFeeService(BaseService):
    """
    Finder fee service.

    record_finder_fee() is called from the payment flow and never commits;
    the admin operations are transactional on their own.
    """

    def __init__(
        self,
        session: AsyncSession,
        calculator: CommissionCalculator | None = None,
        site_url: str = "",
        action_secret: str = "",
    ) -> None:
        """
        Initialize finder fee service.

        Args:
            session: Database session
            calculator: Commission calculator
            site_url: Public site URL for finder links
            action_secret: Key for one-click action links (empty disables)
        """
        super().__init__(session)
        self.partner_repo = FinderPartnerRepository(session)
        self.fee_repo = FinderFeeRepository(session)
        self.calculator = calculator or CommissionCalculator()
        self.site_url = site_url.rstrip("/")
        self.action_secret = action_secret

    def finder_link(self, finder_code: str) -> str:
        """Link a partner shares to attribute purchases."""
        return f"{self.site_url}/team-licensing?finder={finder_code}"

    def action_links(self, fee_id: int, actions: tuple[str, ...]) -> dict[str, str]:
        """
        Signed one-click links for the admin email, keyed by action.

        Empty when no action secret is configured.
        """
        if not self.action_secret:
            return {}
        return {
            action: (
                f"{self.site_url}/api/finder-fees/action?fee={fee_id}"
                f"&action={action}"
                f"&token={fee_action_token(self.action_secret, fee_id, action)}"
            )
            for action in actions
        }

    # ------------------------------------------------------------------
    # Partners
    # ------------------------------------------------------------------

    @transaction
    async def enable_partner(
        self,
        *,
        finder_code: str,
        partner_email: str,
        partner_name: str,
        is_recurring: bool = False,
    ) -> FinderPartner:
        """
        Register a finder partner.

        Raises:
            ValidationError: If the code or email is invalid, or the code is taken
        """
        is_valid, error = validate_finder_code(finder_code)
        if not is_valid:
            raise ValidationError(error, finder_code=finder_code)

        try:
            email = normalize_email(partner_email)
        except ValueError as e:
            raise ValidationError(str(e), partner_email=partner_email) from e

        if not partner_name or not partner_name.strip():
            raise ValidationError("Partner name is required")

        code = finder_code.strip().upper()
        if await self.partner_repo.get_by_code(code):
            raise ValidationError(
                "Finder code already in use", finder_code=code
            )

        partner = await self.partner_repo.create(
            finder_code=code,
            partner_email=email,
            partner_name=partner_name.strip(),
            is_recurring=is_recurring,
            enabled=True,
            fee_percentage_first=FINDER_FEE_FIRST_PURCHASE_PERCENT,
            fee_percentage_renewal=(
                FINDER_FEE_RENEWAL_PERCENT if is_recurring else Decimal("0")
            ),
        )
        self.logger.info(
            f"Finder partner {code} enabled "
            f"({'recurring' if is_recurring else 'standard'})"
        )
        return partner

    @transaction
    async def set_partner_enabled(
        self, partner_id: int, enabled: bool
    ) -> FinderPartner:
        """
        Enable or disable a partner.

        Raises:
            NotFoundError: If the partner does not exist
        """
        partner = await self.partner_repo.update(
            partner_id,
            enabled=enabled,
            disabled_at=None if enabled else utc_now(),
        )
        if partner is None:
            raise NotFoundError("Finder partner not found", id=partner_id)

        self.logger.info(
            f"Finder partner {partner.finder_code} "
            f"{'enabled' if enabled else 'disabled'}"
        )
        return partner

    async def list_partners(self) -> list[PartnerSummary]:
        """List partners with their earnings totals."""
        partners = await self.partner_repo.list_partners()
        earnings = await self.fee_repo.get_earnings_by_code()

        summaries = []
        for partner in partners:
            stats = earnings.get(partner.finder_code, {})
            summaries.append(
                PartnerSummary(
                    partner=partner,
                    referral_count=int(stats.get("count", 0)),
                    total_earned=stats.get("total_earned", Decimal("0")),
                    total_paid=stats.get("total_paid", Decimal("0")),
                    finder_link=self.finder_link(partner.finder_code),
                )
            )
        return summaries

    # ------------------------------------------------------------------
    # Fees
    # ------------------------------------------------------------------

    async def record_finder_fee(
        self,
        *,
        finder_code: str,
        referred_party: str,
        purchase_amount: Decimal,
        purchase_session_id: str | None = None,
        stripe_subscription_id: str | None = None,
        is_renewal: bool = False,
        strict: bool = False,
    ) -> FinderFeeRecord | None:
        """
        Record the fee a partner earns on a purchase.

        A standard partner earns once per referred party; a repeat purchase
        is a no-op with a log line. A recurring partner earns the first
        purchase rate once and the renewal rate on every later purchase.
        Unknown or disabled partners earn nothing.

        Args:
            finder_code: Code carried through checkout
            referred_party: Purchaser email
            purchase_amount: Purchase total in dollars
            purchase_session_id: Checkout session or invoice id
            stripe_subscription_id: Subscription that produced the payment
            is_renewal: Payment is a subscription renewal
            strict: Raise instead of skipping (admin entry)

        Returns:
            Created record, or None if no fee is owed

        Raises:
            ValidationError: If the amount is not positive, or (strict) on a
                duplicate or disabled partner
            NotFoundError: (strict) If the partner does not exist
        """
        code = finder_code.strip().upper()
        party = referred_party.strip().lower()

        if purchase_amount <= 0:
            raise ValidationError(
                "Purchase amount must be positive",
                purchase_amount=purchase_amount,
            )

        partner = await self.partner_repo.get_by_code(code)
        if partner is None or not partner.enabled:
            if strict:
                if partner is None:
                    raise NotFoundError("Finder partner not found", finder_code=code)
                raise ValidationError("Finder partner is disabled", finder_code=code)
            self.logger.warning(
                f"Finder code {code} is unknown or disabled, no fee recorded"
            )
            return None

        if is_renewal and not partner.is_recurring:
            self.logger.info(
                f"Renewal for {mask_email(party)}: partner {code} is not "
                "recurring, no fee"
            )
            return None

        if purchase_session_id and await self.fee_repo.exists_for_purchase(
            code, purchase_session_id
        ):
            self.logger.info(
                f"Finder fee for {code} already recorded for {purchase_session_id}"
            )
            return None

        has_prior = await self.fee_repo.exists_for_party(code, party)
        if has_prior and not partner.is_recurring:
            if strict:
                raise ValidationError(
                    "Finder fee already recorded for this referral",
                    finder_code=code,
                    referred_party=party,
                )
            self.logger.info(
                f"Finder fee for {code} / {mask_email(party)} already exists, "
                "skipping"
            )
            return None

        is_first_purchase = not has_prior
        fee = self.calculator.compute_fee(
            purchase_amount, partner.is_recurring, is_first_purchase
        )

        record = await self.fee_repo.create(
            finder_code=code,
            partner_id=partner.id,
            referred_party=party,
            purchase_amount=purchase_amount,
            fee_percentage=fee.fee_percentage,
            fee_amount=fee.fee_amount,
            is_first_purchase=is_first_purchase,
            is_recurring_partner=partner.is_recurring,
            status=FinderFeeStatus.PENDING.value,
            purchase_session_id=purchase_session_id,
            stripe_subscription_id=stripe_subscription_id,
        )
        self.logger.info(
            f"Finder fee {record.id}: {code} earns {fee.fee_amount} "
            f"({fee.fee_percentage}% of {purchase_amount}) for {mask_email(party)}"
        )
        return record

    @transaction
    async def create_manual_fee(
        self,
        *,
        finder_code: str,
        referred_party: str,
        purchase_amount: Decimal,
        admin_notes: str | None = None,
    ) -> FinderFeeRecord:
        """
        Record a fee by hand from the admin dashboard.

        Raises:
            ValidationError: On a duplicate referral for a standard partner
            NotFoundError: If the partner does not exist
        """
        try:
            party = normalize_email(referred_party)
        except ValueError as e:
            raise ValidationError(str(e), referred_party=referred_party) from e

        record = await self.record_finder_fee(
            finder_code=finder_code,
            referred_party=party,
            purchase_amount=purchase_amount,
            strict=True,
        )
        if admin_notes:
            record.admin_notes = admin_notes
            await self.session.flush()
        return record

    @transaction
    async def update_status(
        self,
        fee_id: int,
        new_status: FinderFeeStatus,
        notes: str | None = None,
    ) -> FinderFeeRecord:
        """
        Move a fee through the payout workflow.

        Raises:
            NotFoundError: If the fee does not exist
            ValidationError: If the transition is not allowed
        """
        # The transition is checked under the fee row lock
        record = await self.fee_repo.get_by_id(fee_id, for_update=True)
        if record is None:
            raise NotFoundError("Finder fee not found", id=fee_id)

        current = FinderFeeStatus(record.status)
        if not can_transition(current, new_status):
            raise ValidationError(
                f"Cannot change finder fee from {current} to {new_status}",
                id=fee_id,
            )

        changes: dict[str, object] = {"status": new_status.value}
        now = utc_now()
        if new_status == FinderFeeStatus.APPROVED:
            changes["approved_at"] = record.approved_at or now
            changes["paid_at"] = None
        elif new_status == FinderFeeStatus.PAID:
            changes["paid_at"] = now
            changes["approved_at"] = record.approved_at or now
        elif new_status == FinderFeeStatus.PENDING:
            changes["approved_at"] = None
        if notes:
            changes["admin_notes"] = notes

        record = await self.fee_repo.update(fee_id, **changes)
        self.logger.info(f"Finder fee {fee_id}: {current} -> {new_status}")
        return record

    async def list_fees(
        self,
        status: FinderFeeStatus | None = None,
        finder_code: str | None = None,
    ) -> list[FinderFeeRecord]:
        """List fee records, newest first."""
        return await self.fee_repo.list_records(
            status=status,
            finder_code=finder_code.strip().upper() if finder_code else None,
        )

    async def get_partner(self, finder_code: str) -> FinderPartner | None:
        """Get partner by finder code."""
        return await self.partner_repo.get_by_code(finder_code)
