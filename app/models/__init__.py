"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.base import Base
from app.models.enums import (
    BillingType,
    CodeKind,
    FinderFeeStatus,
    PromoCodeStatus,
    PromoCodeType,
    SubscriptionStatus,
    UserTier,
)

# Finder partners
from app.models.finder_fee import FinderFeeRecord
from app.models.finder_partner import FinderPartner

# Licensing
from app.models.license_grant import LicenseGrant
from app.models.organization_license import OrganizationLicense

# Promo codes
from app.models.promo_code import PromoCode, PromoRedemption
from app.models.redemption_code import RedemptionCode

# App users and trials
from app.models.trial_grant import TrialGrant
from app.models.user_profile import UserProfile

__all__ = [
    # Base
    "Base",
    # Enums
    "BillingType",
    "CodeKind",
    "FinderFeeStatus",
    "PromoCodeStatus",
    "PromoCodeType",
    "SubscriptionStatus",
    "UserTier",
    # Licensing
    "RedemptionCode",
    "LicenseGrant",
    "OrganizationLicense",
    # Finder partners
    "FinderPartner",
    "FinderFeeRecord",
    # Promo codes
    "PromoCode",
    "PromoRedemption",
    # App users and trials
    "UserProfile",
    "TrialGrant",
]
