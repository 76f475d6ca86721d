"""
FinderPartner model.

Referral partners who earn finder fees on purchases they introduce.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import PercentType
from pricing.constants import FINDER_FEE_FIRST_PURCHASE_PERCENT


class FinderPartner(Base):
    """
    FinderPartner entity.

    Standard partners earn a one-time fee on a referred party's first
    purchase. Recurring (VIP) partners also earn on every renewal.

    Attributes:
        id: Primary key
        finder_code: Upper-case alphanumeric code carried in checkout links
        partner_email: Contact email
        partner_name: Display name
        is_recurring: Earns renewal commission
        enabled: Disabled partners earn nothing from new purchases
        fee_percentage_first: First purchase rate
        fee_percentage_renewal: Renewal rate (0 for standard partners)
    """

    __tablename__ = "finder_partners"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    finder_code: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, index=True
    )
    partner_email: Mapped[str] = mapped_column(String(255), nullable=False)
    partner_name: Mapped[str] = mapped_column(String(255), nullable=False)

    is_recurring: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )

    fee_percentage_first: Mapped[Decimal] = mapped_column(
        PercentType, nullable=False, default=FINDER_FEE_FIRST_PURCHASE_PERCENT
    )
    fee_percentage_renewal: Mapped[Decimal] = mapped_column(
        PercentType, nullable=False, default=Decimal("0")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    disabled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<FinderPartner(id={self.id}, code={self.finder_code}, "
            f"recurring={self.is_recurring}, enabled={self.enabled})>"
        )
