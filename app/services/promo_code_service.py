"""
Promo code service.

Admin-defined discount and trial codes, validation at checkout and the
append-only redemption log.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import CODE_GENERATION_MAX_ATTEMPTS
from app.models.enums import PromoCodeStatus, PromoCodeType
from app.models.promo_code import PromoCode, PromoRedemption
from app.repositories.promo_code_repository import (
    PromoCodeRepository,
    PromoRedemptionRepository,
)
from app.services.base_service import BaseService, transaction
from app.services.codes import generate_promo_code, generate_unique_code
from app.utils.datetime_utils import as_utc
from app.utils.exceptions import NotFoundError, ValidationError
from app.utils.security import mask_email
from app.validators import validate_promo_code


class PromoCodeService(BaseService):
    """Promo code service."""

    def __init__(
        self,
        session: AsyncSession,
        max_attempts: int = CODE_GENERATION_MAX_ATTEMPTS,
    ) -> None:
        """Initialize promo code service."""
        super().__init__(session)
        self.promo_repo = PromoCodeRepository(session)
        self.redemption_repo = PromoRedemptionRepository(session)
        self.max_attempts = max_attempts

    @transaction
    async def create_promo_code(
        self,
        *,
        code_type: PromoCodeType,
        code: str | None = None,
        discount_percent: Decimal | None = None,
        tier_duration_days: int | None = None,
        max_redemptions: int | None = None,
        expires_at: datetime | None = None,
        description: str | None = None,
    ) -> PromoCode:
        """
        Create a promo code.

        A code is generated when none is given; custom codes are stored
        upper-case.

        Raises:
            ValidationError: On an invalid or duplicate code, or values that
                do not fit the code type
        """
        if code_type == PromoCodeType.DISCOUNT:
            if discount_percent is None or not (
                Decimal("1") <= discount_percent <= Decimal("100")
            ):
                raise ValidationError(
                    "Discount codes need a discount between 1 and 100 percent",
                    discount_percent=discount_percent,
                )
            tier_duration_days = None
        else:
            if tier_duration_days is None or tier_duration_days < 1:
                raise ValidationError(
                    "Trial codes need a duration of at least 1 day",
                    tier_duration_days=tier_duration_days,
                )
            discount_percent = None

        if max_redemptions is not None and max_redemptions < 1:
            raise ValidationError(
                "Max redemptions must be at least 1",
                max_redemptions=max_redemptions,
            )

        if code:
            is_valid, error = validate_promo_code(code)
            if not is_valid:
                raise ValidationError(error, code=code)
            code = code.strip().upper()
            if await self.promo_repo.exists(code=code):
                raise ValidationError("Promo code already exists", code=code)
        else:
            code = await generate_unique_code(
                generate_promo_code,
                lambda candidate: self.promo_repo.exists(code=candidate),
                max_attempts=self.max_attempts,
            )

        promo = await self.promo_repo.create(
            code=code,
            description=description,
            code_type=code_type.value,
            discount_percent=discount_percent,
            tier_duration_days=tier_duration_days,
            max_redemptions=max_redemptions,
            redemptions_count=0,
            is_active=True,
            expires_at=as_utc(expires_at),
        )
        self.logger.info(f"Promo code {code} created ({code_type})")
        return promo

    @transaction
    async def set_active(self, promo_code_id: int, is_active: bool) -> PromoCode:
        """
        Activate or deactivate a promo code.

        Raises:
            NotFoundError: If the promo code does not exist
        """
        promo = await self.promo_repo.update(promo_code_id, is_active=is_active)
        if promo is None:
            raise NotFoundError("Promo code not found", id=promo_code_id)
        self.logger.info(
            f"Promo code {promo.code} {'activated' if is_active else 'deactivated'}"
        )
        return promo

    async def list_promo_codes(self) -> list[PromoCode]:
        """List promo codes, newest first."""
        return await self.promo_repo.find_all()

    async def validate_for_email(self, code: str, email: str) -> PromoCode:
        """
        Check that a promo code can be used by a purchaser.

        Raises:
            NotFoundError: If the code does not exist
            ValidationError: If the code is inactive, expired, depleted, or
                already redeemed by this email
        """
        if not code or not code.strip():
            raise ValidationError("Promo code is required")

        promo = await self.promo_repo.get_by_code(code)
        if promo is None:
            raise NotFoundError("Promo code not found", code=code.strip().upper())

        status = promo.computed_status()
        if status != PromoCodeStatus.ACTIVE:
            raise ValidationError(
                f"Promo code is {status}", code=promo.code, status=status
            )

        if email and await self.redemption_repo.has_redeemed(
            promo.id, email.strip().lower()
        ):
            raise ValidationError(
                "Promo code already used by this email", code=promo.code
            )

        return promo

    async def record_redemption(
        self,
        *,
        code: str,
        referred_party: str,
        discount_applied: Decimal | None = None,
        purchase_session_id: str | None = None,
    ) -> PromoRedemption | None:
        """
        Append a redemption and bump the counter.

        No duplicate check here: the provider already accepted the discount,
        so the use is recorded as it happened. The caller commits.

        Returns:
            Redemption record, or None if the code is unknown
        """
        promo = await self.promo_repo.get_by_code(code)
        if promo is None:
            self.logger.warning(
                f"Promo code {code!r} used at checkout but not found, "
                "redemption not recorded"
            )
            return None

        if discount_applied is None:
            discount_applied = promo.discount_percent or Decimal("0")

        redemption = await self.redemption_repo.create(
            promo_code_id=promo.id,
            referred_party=referred_party.strip().lower(),
            discount_applied=discount_applied,
            purchase_session_id=purchase_session_id,
        )
        await self.promo_repo.increment_redemptions(promo.id)

        self.logger.info(
            f"Promo code {promo.code} redeemed by {mask_email(referred_party)}"
        )
        return redemption
