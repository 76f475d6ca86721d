"""
Core calculator functionality.

Contains the fee and pricing logic and its data models.
"""

from pricing.core.calculator import CommissionCalculator, to_cents
from pricing.core.models import (
    FeeResult,
    PartnerCommission,
    SeatDiscountTier,
    SeatQuote,
)

__all__ = [
    "CommissionCalculator",
    "to_cents",
    "FeeResult",
    "PartnerCommission",
    "SeatDiscountTier",
    "SeatQuote",
]
