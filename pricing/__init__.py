"""
Seat pricing and commission calculator.

Standalone package: no database, ORM or web dependencies.

Example:
    >>> from pricing import CommissionCalculator
    >>> from decimal import Decimal
    >>>
    >>> calc = CommissionCalculator()
    >>> fee = calc.compute_fee(Decimal("1200.00"), False, True)
    >>> print(f"Finder fee: {fee.fee_amount}")
    Finder fee: 120.00
"""

# core before constants: the tier table is built from core.models
from pricing.core.calculator import CommissionCalculator, to_cents
from pricing.core.models import (
    FeeResult,
    PartnerCommission,
    SeatDiscountTier,
    SeatQuote,
)
from pricing.constants import (
    LIST_PRICES,
    SEAT_DISCOUNT_TIERS,
    get_tier_for_seats,
)
from pricing.utils import format_currency, format_percentage


__version__ = "1.0.0"
__all__ = [
    # Core
    "CommissionCalculator",
    "to_cents",
    # Models
    "FeeResult",
    "PartnerCommission",
    "SeatDiscountTier",
    "SeatQuote",
    # Constants
    "LIST_PRICES",
    "SEAT_DISCOUNT_TIERS",
    "get_tier_for_seats",
    # Formatters
    "format_currency",
    "format_percentage",
]
