"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from app.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)

# Licensing
from app.services.license_service import LicenseService, SeatUsage, TeamLicense
from app.services.organization_service import (
    OrganizationProvisionResult,
    OrganizationService,
    TeamProvisionResult,
    allocate_seats,
)
from app.services.redemption_service import RedemptionOutcome, RedemptionService

# Partners, promos and trials
from app.services.finder_fee_service import FinderFeeService, PartnerSummary
from app.services.promo_code_service import PromoCodeService
from app.services.trial_service import TrialService, TrialStatus

# Payment events
from app.services.payment_event_service import (
    CheckoutMetadata,
    PaymentEventService,
)


__all__ = [
    # Base
    "BaseService",
    "log_operation",
    "transaction",
    # Licensing
    "LicenseService",
    "SeatUsage",
    "TeamLicense",
    "OrganizationService",
    "OrganizationProvisionResult",
    "TeamProvisionResult",
    "allocate_seats",
    "RedemptionService",
    "RedemptionOutcome",
    # Partners, promos and trials
    "FinderFeeService",
    "PartnerSummary",
    "PromoCodeService",
    "TrialService",
    "TrialStatus",
    # Payment events
    "CheckoutMetadata",
    "PaymentEventService",
]
