"""
Promo code models.

PromoCode holds the admin-defined code; PromoRedemption is the append-only
log of uses.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import PromoCodeStatus, PromoCodeType
from app.models.types import PercentType
from app.utils.datetime_utils import as_utc, utc_now


class PromoCode(Base):
    """
    PromoCode entity.

    Discount codes carry discount_percent; trial codes carry
    tier_duration_days. redemptions_count is only ever changed with an
    atomic UPDATE (PromoCodeRepository.increment_redemptions).
    """

    __tablename__ = "promo_codes"
    __table_args__ = (
        CheckConstraint("redemptions_count >= 0", name="redemptions_non_negative"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    code: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    code_type: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PromoCodeType.DISCOUNT.value
    )

    discount_percent: Mapped[Decimal | None] = mapped_column(
        PercentType, nullable=True
    )
    tier_duration_days: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )

    max_redemptions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    redemptions_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PromoCode(id={self.id}, code={self.code}, type={self.code_type}, "
            f"redemptions={self.redemptions_count}/{self.max_redemptions})>"
        )

    def computed_status(self, now: datetime | None = None) -> PromoCodeStatus:
        """
        Derive the display status.

        Inactive wins over expired, expired wins over depleted.
        """
        now = now or utc_now()
        if not self.is_active:
            return PromoCodeStatus.INACTIVE
        expires_at = as_utc(self.expires_at)
        if expires_at is not None and expires_at < now:
            return PromoCodeStatus.EXPIRED
        if (
            self.max_redemptions is not None
            and self.redemptions_count >= self.max_redemptions
        ):
            return PromoCodeStatus.DEPLETED
        return PromoCodeStatus.ACTIVE

    @property
    def is_trial(self) -> bool:
        return self.code_type == PromoCodeType.TRIAL


class PromoRedemption(Base):
    """Append-only promo code use."""

    __tablename__ = "promo_redemptions"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    promo_code_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("promo_codes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    referred_party: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True
    )
    discount_applied: Mapped[Decimal] = mapped_column(
        PercentType, nullable=False, default=Decimal("0")
    )
    purchase_session_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PromoRedemption(id={self.id}, promo_code_id={self.promo_code_id}, "
            f"party={self.referred_party})>"
        )
