"""
Default constants for the pricing calculator.

Single source of truth for list prices, the seat discount schedule and the
commission rates. The tables are independent of each other: the seat discount
schedule never feeds the finder fee or partner commission rates.
"""

from decimal import Decimal

from pricing.core.models import SeatDiscountTier


# List prices per seat
UPFRONT_LIST_PRICE = Decimal("79.99")  # 6-month seasonal license
MONTHLY_LIST_PRICE = Decimal("15.99")

LIST_PRICES: dict[str, Decimal] = {
    "upfront": UPFRONT_LIST_PRICE,
    "monthly": MONTHLY_LIST_PRICE,
}

# Per-seat list-price discount schedule
SEAT_DISCOUNT_TIERS: list[SeatDiscountTier] = [
    SeatDiscountTier(min_seats=0, max_seats=11, discount_percent=Decimal("0")),
    SeatDiscountTier(min_seats=12, max_seats=119, discount_percent=Decimal("10")),
    SeatDiscountTier(min_seats=120, max_seats=199, discount_percent=Decimal("15")),
    SeatDiscountTier(min_seats=200, max_seats=None, discount_percent=Decimal("20")),
]

# Finder fees
FINDER_FEE_FIRST_PURCHASE_PERCENT = Decimal("10")
FINDER_FEE_RENEWAL_PERCENT = Decimal("5")

# Partner program volume bonus
PARTNER_COMMISSION_BASE_PERCENT = Decimal("10")
PARTNER_COMMISSION_BONUS_PERCENT = Decimal("15")
PARTNER_VOLUME_BONUS_THRESHOLD = 100  # seats; bonus starts above this

CENT = Decimal("0.01")


def get_tier_for_seats(seat_count: int) -> SeatDiscountTier:
    """
    Get the discount band for a seat count.

    Args:
        seat_count: Seats purchased

    Returns:
        Matching tier (the zero-discount band for counts below 1)

    Example:
        >>> get_tier_for_seats(150).discount_percent
        Decimal('15')
    """
    for tier in SEAT_DISCOUNT_TIERS:
        if tier.contains(seat_count):
            return tier
    return SEAT_DISCOUNT_TIERS[0]
