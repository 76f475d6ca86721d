"""
Pure business logic calculator for fees and seat pricing.

This module contains standalone calculation logic without any
dependencies on database, ORM, or app-specific code.
"""

from decimal import ROUND_HALF_UP, Decimal

from pricing.constants import (
    CENT,
    FINDER_FEE_FIRST_PURCHASE_PERCENT,
    FINDER_FEE_RENEWAL_PERCENT,
    LIST_PRICES,
    PARTNER_COMMISSION_BASE_PERCENT,
    PARTNER_COMMISSION_BONUS_PERCENT,
    PARTNER_VOLUME_BONUS_THRESHOLD,
    get_tier_for_seats,
)
from pricing.core.models import FeeResult, PartnerCommission, SeatQuote


def to_cents(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class CommissionCalculator:
    """
    Pure business logic calculator for finder fees, partner commissions
    and per-seat pricing.

    All amounts are Decimal; every money result is rounded half-up to cents.
    """

    def finder_fee_percentage(
        self,
        is_recurring_partner: bool,
        is_first_purchase: bool,
    ) -> Decimal:
        """
        Select the finder fee rate.

        Standard partners always earn the first-purchase rate (they are only
        ever paid once per referred party). Recurring partners earn the
        first-purchase rate once and the renewal rate afterwards.

        Args:
            is_recurring_partner: Partner earns on renewals
            is_first_purchase: No earlier fee exists for this party

        Returns:
            Fee percentage (e.g., 10 = 10%)
        """
        if is_recurring_partner and not is_first_purchase:
            return FINDER_FEE_RENEWAL_PERCENT
        return FINDER_FEE_FIRST_PURCHASE_PERCENT

    def compute_fee(
        self,
        purchase_amount: Decimal,
        is_recurring_partner: bool,
        is_first_purchase: bool,
    ) -> FeeResult:
        """
        Calculate the finder fee for a purchase.

        Formula: purchase_amount * fee_percentage / 100, rounded half-up

        Args:
            purchase_amount: Purchase total in dollars
            is_recurring_partner: Partner earns on renewals
            is_first_purchase: No earlier fee exists for this party

        Returns:
            FeeResult with rate and amount

        Example:
            >>> calc = CommissionCalculator()
            >>> calc.compute_fee(Decimal("100"), True, False).as_tuple()
            (Decimal('5'), Decimal('5.00'))
        """
        percentage = self.finder_fee_percentage(
            is_recurring_partner, is_first_purchase
        )

        if purchase_amount <= 0:
            return FeeResult(fee_percentage=percentage, fee_amount=Decimal("0.00"))

        amount = to_cents(purchase_amount * percentage / 100)
        return FeeResult(fee_percentage=percentage, fee_amount=amount)

    def seat_discount_percent(self, seat_count: int) -> Decimal:
        """
        Get the list-price discount for a seat count.

        Example:
            >>> calc = CommissionCalculator()
            >>> calc.seat_discount_percent(12)
            Decimal('10')
        """
        if seat_count < 1:
            return Decimal("0")
        return get_tier_for_seats(seat_count).discount_percent

    def price_per_seat(self, seat_count: int, billing_type: str) -> Decimal:
        """
        Calculate the discounted price per seat.

        Formula: list_price * (100 - discount) / 100, rounded half-up

        Raises:
            ValueError: If billing_type is unknown
        """
        list_price = self._list_price(billing_type)
        discount = self.seat_discount_percent(seat_count)
        return to_cents(list_price * (100 - discount) / 100)

    def quote(self, seat_count: int, billing_type: str) -> SeatQuote:
        """
        Build a full price quote.

        Args:
            seat_count: Seats requested (>= 1)
            billing_type: "upfront" or "monthly"

        Returns:
            SeatQuote

        Raises:
            ValueError: If seat_count < 1 or billing_type is unknown
        """
        if seat_count < 1:
            raise ValueError(f"Seat count must be at least 1, got {seat_count}")

        list_price = self._list_price(billing_type)
        discount = self.seat_discount_percent(seat_count)
        per_seat = self.price_per_seat(seat_count, billing_type)
        total = to_cents(per_seat * seat_count)
        savings = to_cents(list_price * seat_count - total)

        return SeatQuote(
            seat_count=seat_count,
            billing_type=str(billing_type),
            list_price_per_seat=list_price,
            discount_percent=discount,
            price_per_seat=per_seat,
            total=total,
            savings=max(savings, Decimal("0.00")),
        )

    def partner_commission_rate(self, referred_seats: int) -> Decimal:
        """
        Select the partner program commission rate.

        Up to 100 referred seats earn the base rate; above that the bonus
        rate applies.
        """
        # NOTE: flat bonus. Once the threshold is crossed the bonus rate
        # applies to the whole amount, not only to the seats above 100.
        if referred_seats > PARTNER_VOLUME_BONUS_THRESHOLD:
            return PARTNER_COMMISSION_BONUS_PERCENT
        return PARTNER_COMMISSION_BASE_PERCENT

    def compute_partner_commission(
        self,
        amount: Decimal,
        referred_seats: int,
    ) -> PartnerCommission:
        """
        Calculate partner commission for a referred purchase.

        Example:
            >>> calc = CommissionCalculator()
            >>> calc.compute_partner_commission(Decimal("1000"), 150).commission_amount
            Decimal('150.00')
        """
        rate = self.partner_commission_rate(referred_seats)
        commission = to_cents(amount * rate / 100) if amount > 0 else Decimal("0.00")
        return PartnerCommission(
            referred_seats=max(referred_seats, 0),
            commission_rate=rate,
            commission_amount=commission,
        )

    def _list_price(self, billing_type: str) -> Decimal:
        try:
            return LIST_PRICES[str(billing_type)]
        except KeyError:
            raise ValueError(f"Unknown billing type: {billing_type}") from None
