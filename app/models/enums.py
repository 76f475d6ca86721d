"""
Enumerations shared by models, services and the web layer.

Values are stored as plain strings so the schema stays portable.
"""

from enum import StrEnum


class CodeKind(StrEnum):
    """Redemption code role."""

    COACH = "coach"  # single use, establishes team ownership
    MEMBER = "member"  # multi use, one per seat


class SubscriptionStatus(StrEnum):
    """License subscription status mirrored from the payment provider."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"


class FinderFeeStatus(StrEnum):
    """Finder fee payout workflow status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class PromoCodeType(StrEnum):
    """Promo code flavour."""

    DISCOUNT = "discount"
    TRIAL = "trial"


class PromoCodeStatus(StrEnum):
    """Computed promo code status (not persisted)."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    DEPLETED = "depleted"


class UserTier(StrEnum):
    """App subscription tier on a user profile."""

    CORE = "core"
    PRO = "pro"


class BillingType(StrEnum):
    """Checkout billing cadence."""

    UPFRONT = "upfront"  # 6-month seasonal license paid once
    MONTHLY = "monthly"
